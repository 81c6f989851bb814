"""YouTrack API の共通クライアント設定。"""
from __future__ import annotations

from datetime import date

from pagesampler.constants import (
    SKIP_PARAM,
    TOP_PARAM,
    WORKITEM_FIELDS,
    WORKITEMS_PATH,
)


def build_headers(token: str) -> dict[str, str]:
    """API リクエスト用ヘッダを構築。"""
    headers: dict[str, str] = {
        "Accept": "application/json, text/plain, */*",
        "Accept-Encoding": "gzip, deflate",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def build_request_params(
    offset: int,
    page_size: int,
    start_date: date,
    end_date: date,
    fields: str = WORKITEM_FIELDS,
) -> str:
    """
    1ページ分のパス＋クエリ文字列。サンプルファイルにもこの文字列をそのまま記録する。
    fields の括弧・カンマはエンコードしない（YouTrack がそのまま受け付ける）。
    """
    return (
        f"{WORKITEMS_PATH}?{TOP_PARAM}={page_size}&{SKIP_PARAM}={offset}"
        f"&fields={fields}"
        f"&startDate={start_date.isoformat()}&endDate={end_date.isoformat()}"
    )
