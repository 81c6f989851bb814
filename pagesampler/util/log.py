"""簡易ロギング。サンプリングのサマリを必ず出せるようにする。"""
import logging
import os
import sys
from typing import Any


def setup_logging(level: int | str | None = None) -> None:
    logging.basicConfig(
        level=level or os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_sampling_summary(
    logger: logging.Logger,
    run_id: str,
    requested: int,
    completed: int,
    failed: int,
    abandoned: int,
    notes: str = "",
    **extra: Any,
) -> None:
    logger.info(
        "sampling_summary run_id=%s requested=%s completed=%s failed=%s abandoned=%s notes=%s",
        run_id,
        requested,
        completed,
        failed,
        abandoned,
        notes or "(none)",
        extra=extra,
    )
