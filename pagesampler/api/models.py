"""YouTrack workItems API のレスポンス用モデル（簡易 dataclass）。"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional, Union

from pagesampler.constants import DEFAULT_TIMEZONE
from pagesampler.util.datetime_utils import from_epoch_millis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    id: str
    login: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_api(cls, d: Optional[dict[str, Any]]) -> Optional[User]:
        if not d:
            return None
        return cls(
            id=str(d.get("id", "")),
            login=d.get("login"),
            full_name=d.get("fullName"),
            email=d.get("email"),
        )


@dataclass(frozen=True)
class SingleValue:
    value: Optional[str]


@dataclass(frozen=True)
class MultiValue:
    values: tuple[Optional[str], ...]


@dataclass(frozen=True)
class AbsentValue:
    pass


# カスタムフィールドの値。型ごとに JSON の形が変わるためタグ付きユニオンで表す
CustomFieldValue = Union[SingleValue, MultiValue, AbsentValue]


def _value_name(node: Any) -> Optional[str]:
    """値オブジェクト {"name": ...} から name を取り出す。"""
    if isinstance(node, dict):
        name = node.get("name")
        return None if name is None else str(name)
    return None


def parse_custom_field_value(raw: Any) -> CustomFieldValue:
    """
    カスタムフィールドの value を解釈する。
    配列 → MultiValue, null → AbsentValue, オブジェクト → SingleValue,
    文字列・数値・真偽値 → SingleValue（文字列化）。それ以外は警告して AbsentValue。
    """
    if raw is None:
        return AbsentValue()
    if isinstance(raw, list):
        return MultiValue(tuple(_value_name(x) for x in raw))
    if isinstance(raw, dict):
        return SingleValue(_value_name(raw))
    if isinstance(raw, bool):
        return SingleValue("true" if raw else "false")
    if isinstance(raw, (str, int, float)):
        return SingleValue(str(raw))
    logger.warning("Unhandled custom field value %r, defaulting to absent", raw)
    return AbsentValue()


@dataclass(frozen=True)
class CustomField:
    name: Optional[str]
    value: CustomFieldValue = field(default_factory=AbsentValue)

    @classmethod
    def from_api(cls, d: dict[str, Any]) -> CustomField:
        return cls(name=d.get("name"), value=parse_custom_field_value(d.get("value")))

    def values(self) -> list[Optional[str]]:
        """値を常にリストで返す（未設定は空リスト）。"""
        if isinstance(self.value, MultiValue):
            return list(self.value.values)
        if isinstance(self.value, SingleValue):
            return [self.value.value]
        return []


@dataclass(frozen=True)
class Project:
    name: Optional[str]
    short_name: Optional[str]

    @classmethod
    def from_api(cls, d: Optional[dict[str, Any]]) -> Optional[Project]:
        if not d:
            return None
        return cls(name=d.get("name"), short_name=d.get("shortName"))


@dataclass(frozen=True)
class Issue:
    id_readable: str
    project: Optional[Project] = None
    resolved: Optional[datetime] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    custom_fields: tuple[CustomField, ...] = ()

    @classmethod
    def from_api(cls, d: Optional[dict[str, Any]], tz: str = DEFAULT_TIMEZONE) -> Optional[Issue]:
        if not d:
            return None
        return cls(
            id_readable=str(d.get("idReadable", "")),
            project=Project.from_api(d.get("project")),
            resolved=from_epoch_millis(d.get("resolved"), tz),
            summary=d.get("summary"),
            description=d.get("wikifiedDescription"),
            custom_fields=tuple(CustomField.from_api(x) for x in (d.get("customFields") or [])),
        )


@dataclass(frozen=True)
class WorkItem:
    """
    1件の作業記録。同一性は id のみで判定する。
    比較に使う属性: created / updated / date（発生日）/ duration_minutes。
    """

    id: str
    created: Optional[datetime]
    updated: Optional[datetime]
    date: Optional[date]
    duration_minutes: int
    duration_presentation: Optional[str] = None
    author: Optional[User] = None
    creator: Optional[User] = None
    type_name: Optional[str] = None
    text: Optional[str] = None
    issue: Optional[Issue] = None

    @classmethod
    def from_api(cls, d: dict[str, Any], tz: str = DEFAULT_TIMEZONE) -> WorkItem:
        if "id" not in d:
            raise ValueError("work item without id")
        duration = d.get("duration") or {}
        occurred = from_epoch_millis(d.get("date"), tz)
        return cls(
            id=str(d["id"]),
            created=from_epoch_millis(d.get("created"), tz),
            updated=from_epoch_millis(d.get("updated"), tz),
            date=occurred.date() if occurred else None,
            duration_minutes=int(duration.get("minutes") or 0),
            duration_presentation=duration.get("presentation"),
            author=User.from_api(d.get("author")),
            creator=User.from_api(d.get("creator")),
            type_name=(d.get("type") or {}).get("name"),
            text=d.get("text"),
            issue=Issue.from_api(d.get("issue"), tz),
        )


@dataclass(frozen=True)
class Page:
    """1リクエスト分の結果。ServerError の後は failed=True の空ページを記録する。"""

    params: str
    offset: int
    items: tuple[WorkItem, ...] = ()
    failed: bool = False


@dataclass(frozen=True)
class Sample:
    """1回のサンプリングで取得した全ページ（取得順）。"""

    pages: tuple[Page, ...]

    @property
    def item_count(self) -> int:
        return sum(len(p.items) for p in self.pages)
