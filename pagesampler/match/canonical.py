"""サンプルの正規化テキストとフィンガープリント（SHA-256）。"""
from __future__ import annotations

import csv
import hashlib
import io
from typing import Iterable, Sequence

from pagesampler.api.models import Sample, WorkItem
from pagesampler.constants import CSV_DELIMITER, CSV_HEADER


def sha256_hex(data: bytes) -> str:
    """バイト列の SHA-256 を16進文字列で返す。"""
    return hashlib.sha256(data).hexdigest()


def _item_row(page_index: int, params: str, item: WorkItem) -> list[str]:
    return [
        str(page_index),
        params,
        item.id,
        item.created.isoformat() if item.created else "",
        item.updated.isoformat() if item.updated else "",
        item.date.isoformat() if item.date else "",
        f"{item.duration_minutes}m",
    ]


def sample_rows(sample: Sample) -> list[list[str]]:
    """ヘッダー行 + ページ順・ページ内の返却順に1件1行。"""
    rows: list[list[str]] = [list(CSV_HEADER)]
    for page_index, page in enumerate(sample.pages):
        for item in page.items:
            rows.append(_item_row(page_index, page.params, item))
    return rows


def format_rows(rows: Iterable[Sequence[str]]) -> str:
    """
    ; 区切りで行を連結する。区切り文字・引用符・改行を含むフィールドのみ引用される。
    最終行の後に改行は付けない（ハッシュ対象の文字列）。
    """
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=CSV_DELIMITER, lineterminator="\n")
    writer.writerows(rows)
    text = buf.getvalue()
    return text[:-1] if text.endswith("\n") else text


def canonical_text(sample: Sample) -> str:
    return format_rows(sample_rows(sample))


def fingerprint(text: str) -> str:
    """正規化テキストの UTF-8 バイト列に対する SHA-256（小文字16進）。"""
    return sha256_hex(text.encode("utf-8"))
