"""テスト用のフェイクとファクトリ。"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from pagesampler.api.client import build_request_params
from pagesampler.api.models import Page, Sample, WorkItem
from pagesampler.api.page_fetcher import FailureKind, PageResult

START = date(2024, 1, 1)
END = date(2024, 1, 31)


def work_item(item_id: str, minutes: int = 30, updated: bool = True) -> WorkItem:
    return WorkItem(
        id=item_id,
        created=datetime(2024, 1, 2, 9, 0, tzinfo=timezone.utc),
        updated=datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc) if updated else None,
        date=date(2024, 1, 2),
        duration_minutes=minutes,
    )


def page(offset: int, ids: list[str], page_size: int = 400) -> Page:
    return Page(
        params=build_request_params(offset, page_size, START, END),
        offset=offset,
        items=tuple(work_item(i) for i in ids),
    )


def sample(*pages_ids: list[str], page_size: int = 400) -> Sample:
    pages = []
    offset = 0
    for ids in pages_ids:
        pages.append(page(offset, ids, page_size))
        offset += len(ids)
    return Sample(pages=tuple(pages))


class ScriptedFetcher:
    """fetch 呼び出しごとに台本どおりの結果を返す。台本が尽きたら空ページ。"""

    def __init__(self, script: list, page_size: int = 400):
        self.script = list(script)
        self.page_size = page_size
        self.offsets: list[int] = []
        self.closed = False

    def fetch(self, offset: int) -> PageResult:
        self.offsets.append(offset)
        params = build_request_params(offset, self.page_size, START, END)
        step = self.script.pop(0) if self.script else []
        if isinstance(step, FailureKind):
            status = 500 if step == FailureKind.SERVER_ERROR else None
            return PageResult.failed(params, offset, step, status_code=status)
        return PageResult.success(params, offset, [work_item(i) for i in step])

    def close(self) -> None:
        self.closed = True


def ids(prefix: str, n: int) -> list[str]:
    return [f"{prefix}-{i}" for i in range(n)]


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: Optional[str] = None, reason: str = "OK"):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""
        self.reason = reason

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """requests.Session の代わり。get の呼び出しを記録する。"""

    def __init__(self, responses: list):
        self.responses = list(responses)
        self.calls: list[tuple[str, object]] = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, timeout))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    def close(self) -> None:
        self.closed = True
