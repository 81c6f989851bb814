"""日時ユーティリティ。"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def run_id() -> str:
    """サンプリング実行ID（UTC タイムスタンプ）。"""
    return datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")


def from_epoch_millis(value: Optional[int], tz: str = "UTC") -> Optional[datetime]:
    """API のエポックミリ秒を指定タイムゾーンの datetime に変換。None はそのまま。"""
    if value is None:
        return None
    millis = int(value)
    base = datetime.fromtimestamp(millis // 1000, tz=ZoneInfo(tz))
    return base + timedelta(milliseconds=millis % 1000)


def parse_iso_date(value: str | date | None) -> Optional[date]:
    """YYYY-MM-DD を date に。YAML が既に date にしている場合もある。"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())
