"""
サンプリング中のイベント通知。
各タスクは observer を明示的に受け取り、task_id 付きでイベントを出す。
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from pagesampler.api.page_fetcher import PageResult


class SamplingObserver(Protocol):
    def sample_started(self, task_id: str) -> None: ...

    def page_fetched(self, task_id: str, page_index: int, result: PageResult) -> None: ...

    def fetch_failed(self, task_id: str, result: PageResult, attempts: int, delay_sec: float) -> None: ...

    def sample_persisted(self, task_id: str, page_count: int, item_count: int, path: Path) -> None: ...

    def sample_failed(self, task_id: str, error: BaseException) -> None: ...


class LoggingObserver:
    """イベントを logging に出すデフォルト実装。"""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("pagesampler.sampling")

    def sample_started(self, task_id: str) -> None:
        self.logger.info("[%s] sample started", task_id)

    def page_fetched(self, task_id: str, page_index: int, result: PageResult) -> None:
        self.logger.info(
            "[%s] page=%d offset=%d items=%d status=%s",
            task_id,
            page_index,
            result.offset,
            len(result.items),
            result.status_code,
        )

    def fetch_failed(self, task_id: str, result: PageResult, attempts: int, delay_sec: float) -> None:
        self.logger.warning(
            "[%s] fetch failed kind=%s offset=%d status=%s attempt=%d retry_in=%.1fs detail=%s",
            task_id,
            result.failure.value if result.failure else "",
            result.offset,
            result.status_code,
            attempts,
            delay_sec,
            result.detail,
        )

    def sample_persisted(self, task_id: str, page_count: int, item_count: int, path: Path) -> None:
        self.logger.info(
            "[%s] %d pages / %d work items written to %s", task_id, page_count, item_count, path
        )

    def sample_failed(self, task_id: str, error: BaseException) -> None:
        self.logger.error("[%s] sample failed: %s", task_id, error)


class RecordingObserver:
    """イベントをリストに記録する。テストや集計用。"""

    def __init__(self) -> None:
        self.events: list[tuple] = []

    def sample_started(self, task_id: str) -> None:
        self.events.append(("started", task_id))

    def page_fetched(self, task_id: str, page_index: int, result: PageResult) -> None:
        self.events.append(("page", task_id, page_index, result.offset, len(result.items)))

    def fetch_failed(self, task_id: str, result: PageResult, attempts: int, delay_sec: float) -> None:
        self.events.append(("failed", task_id, result.failure, result.offset, attempts))

    def sample_persisted(self, task_id: str, page_count: int, item_count: int, path: Path) -> None:
        self.events.append(("persisted", task_id, page_count, item_count, path))

    def sample_failed(self, task_id: str, error: BaseException) -> None:
        self.events.append(("sample_failed", task_id, str(error)))
