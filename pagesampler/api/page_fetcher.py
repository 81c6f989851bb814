"""1ページ分の workItems を取得し、結果を分類する。リトライはしない。"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional

import requests

from pagesampler.api.client import build_headers, build_request_params
from pagesampler.api.models import WorkItem
from pagesampler.constants import DEFAULT_TIMEZONE, PAGE_SIZE
from pagesampler.util import http

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    TRANSPORT = "transport"  # 応答を受け取る前の接続・タイムアウト失敗
    SERVER_ERROR = "server_error"  # 2xx 以外のステータス
    INVALID_PAYLOAD = "invalid_payload"  # 2xx だが workItem の JSON 配列ではない


@dataclass(frozen=True)
class PageResult:
    params: str
    offset: int
    items: tuple[WorkItem, ...] = ()
    failure: Optional[FailureKind] = None
    status_code: Optional[int] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, params: str, offset: int, items: list[WorkItem], status_code: int = 200) -> PageResult:
        return cls(params=params, offset=offset, items=tuple(items), status_code=status_code)

    @classmethod
    def failed(
        cls,
        params: str,
        offset: int,
        kind: FailureKind,
        status_code: Optional[int] = None,
        detail: str = "",
    ) -> PageResult:
        return cls(params=params, offset=offset, failure=kind, status_code=status_code, detail=detail)


def _parse_items(payload: Any, tz: str) -> list[WorkItem]:
    if not isinstance(payload, list):
        raise ValueError(f"expected JSON array, got {type(payload).__name__}")
    # 範囲外のタイムスタンプ (OverflowError/OSError) や未知のタイムゾーン (KeyError) も不正ペイロード扱い
    try:
        return [WorkItem.from_api(x, tz) for x in payload]
    except (TypeError, AttributeError, KeyError, OverflowError, OSError) as e:
        raise ValueError(f"unparseable work item: {type(e).__name__}: {e}") from e


class PageCursorFetcher:
    """
    skip/top で1ページだけ取得する。
    期間（start_date〜end_date）と fields は固定。成功したページはそのオフセットの確定結果として扱う。
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        start_date: date,
        end_date: date,
        page_size: int = PAGE_SIZE,
        tz: str = DEFAULT_TIMEZONE,
        session: Optional[requests.Session] = None,
        timeout_sec: Optional[int] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.start_date = start_date
        self.end_date = end_date
        self.page_size = page_size
        self.tz = tz
        self.timeout_sec = timeout_sec
        self.session = session or http.new_session(build_headers(token))

    def fetch(self, offset: int) -> PageResult:
        params = build_request_params(offset, self.page_size, self.start_date, self.end_date)
        url = f"{self.base_url}{params}"
        logger.debug("Fetching from %s", url)
        try:
            r = http.get(url, timeout_sec=self.timeout_sec, session=self.session)
        except (requests.RequestException, OSError) as e:
            return PageResult.failed(params, offset, FailureKind.TRANSPORT, detail=str(e))

        if not 200 <= r.status_code < 300:
            body = (r.text or "")[:500]
            return PageResult.failed(
                params,
                offset,
                FailureKind.SERVER_ERROR,
                status_code=r.status_code,
                detail=f"{r.reason or ''} {body}".strip(),
            )

        try:
            items = _parse_items(r.json(), self.tz)
        except (ValueError, TypeError, AttributeError) as e:
            return PageResult.failed(
                params, offset, FailureKind.INVALID_PAYLOAD, status_code=r.status_code, detail=str(e)
            )
        if len(items) > self.page_size:
            return PageResult.failed(
                params,
                offset,
                FailureKind.INVALID_PAYLOAD,
                status_code=r.status_code,
                detail=f"{len(items)} items exceeds page size {self.page_size}",
            )
        return PageResult.success(params, offset, items, r.status_code)

    def close(self) -> None:
        self.session.close()
