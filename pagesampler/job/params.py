"""サンプリング実行パラメータ。"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pagesampler.errors import ConfigError
from pagesampler.util.datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    同一オフセットの連続失敗に対するリトライ方針。
    max_attempts=None は無制限・即時リトライ（バックオフなし）。
    """

    max_attempts: Optional[int] = 5
    backoff_sec: float = 2.0
    backoff_max_sec: float = 60.0

    @classmethod
    def unlimited(cls) -> RetryPolicy:
        return cls(max_attempts=None, backoff_sec=0.0, backoff_max_sec=0.0)

    def should_retry(self, attempts: int) -> bool:
        return self.max_attempts is None or attempts < self.max_attempts

    def delay(self, attempts: int) -> float:
        """attempts 回目の失敗後の待ち時間（指数バックオフ）。"""
        if self.backoff_sec <= 0:
            return 0.0
        return min(self.backoff_sec * (2 ** (attempts - 1)), self.backoff_max_sec)


@dataclass(frozen=True)
class SamplerParams:
    """1回のサンプリング実行のパラメータ。"""

    sample_count: int
    threads: int
    target_dir: Path
    timeout_sec: float
    start_date: date
    end_date: date
    timezone: str
    page_size: int
    retry: RetryPolicy

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> SamplerParams:
        sampler_cfg = _section(config, "sampler")
        api_cfg = _section(config, "api")
        retry_cfg = _section(config, "retry")

        try:
            start_date = parse_iso_date(sampler_cfg.get("date_start"))
            end_date = parse_iso_date(sampler_cfg.get("date_end"))
        except ValueError as e:
            raise ConfigError(f"invalid date: {e}") from e
        if start_date is None or end_date is None:
            raise ConfigError("sampler.date_start and sampler.date_end are required")
        if start_date > end_date:
            raise ConfigError(f"date_start {start_date} is after date_end {end_date}")

        sample_count = _number(sampler_cfg, "sampler.sample_count", 10, int)
        threads = _number(sampler_cfg, "sampler.threads", 4, int)
        page_size = _number(api_cfg, "api.page_size", 400, int)
        for name, value in (("sample_count", sample_count), ("threads", threads), ("page_size", page_size)):
            if value < 1:
                raise ConfigError(f"{name} must be positive, got {value}")

        if retry_cfg.get("max_attempts", 5) is None:
            max_attempts = None
            logger.warning("retry.max_attempts が未設定です。失敗し続けるページは無制限にリトライされます。")
        else:
            max_attempts = _number(retry_cfg, "retry.max_attempts", 5, int)
            if max_attempts < 1:
                raise ConfigError(f"retry.max_attempts must be positive or null, got {max_attempts}")

        tz = sampler_cfg.get("timezone") or "UTC"
        try:
            ZoneInfo(str(tz))
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ConfigError(f"unknown timezone {tz!r}") from e

        return cls(
            sample_count=sample_count,
            threads=threads,
            target_dir=Path(sampler_cfg.get("target_dir") or "data/samples"),
            timeout_sec=_number(sampler_cfg, "sampler.timeout_minutes", 30, float) * 60,
            start_date=start_date,
            end_date=end_date,
            timezone=str(tz),
            page_size=page_size,
            retry=RetryPolicy(
                max_attempts=max_attempts,
                backoff_sec=_number(retry_cfg, "retry.backoff_sec", 2, float),
                backoff_max_sec=_number(retry_cfg, "retry.backoff_max_sec", 60, float),
            ),
        )


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    """空のセクション（`retry:` だけの行）は None になるため空 dict として扱う。"""
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} must be a mapping, got {type(section).__name__}")
    return section


def _number(section: dict[str, Any], name: str, default: Any, cast: Callable[[Any], Any]) -> Any:
    key = name.split(".", 1)[1]
    value = section.get(key)
    if value is None:
        value = default
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
