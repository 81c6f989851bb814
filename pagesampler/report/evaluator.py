"""
保存済みサンプルの比較。フィンガープリントでグループ化して統計を出す。
ネットワークアクセスはしない。読み込み済みのデータのみを扱う純粋関数。
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

from pagesampler.errors import CorruptArtifactError
from pagesampler.store.sample_store import COL_ITEM_ID, COL_PAGE_INDEX, LoadResult, StoredSample


@dataclass(frozen=True)
class SampleGroup:
    """同じフィンガープリントを持つサンプルファイルの集まり。"""

    fingerprint: str
    paths: tuple[Path, ...]
    representative: StoredSample

    @property
    def size(self) -> int:
        return len(self.paths)

    @property
    def item_count(self) -> int:
        return len(self.representative.rows)

    def item_ids(self) -> set[str]:
        return {row[COL_ITEM_ID] for row in self.representative.rows}


@dataclass(frozen=True)
class DuplicateItem:
    item_id: str
    page_indices: tuple[int, ...]

    @property
    def times_present(self) -> int:
        return len(self.page_indices)


@dataclass
class ComparisonReport:
    # サンプル数の降順、同数はフィンガープリント昇順
    groups: list[SampleGroup]
    item_ids: list[str]
    presence: dict[str, tuple[bool, ...]]
    duplicates: dict[str, list[DuplicateItem]]
    corrupted: list[CorruptArtifactError] = field(default_factory=list)

    @property
    def frequency(self) -> list[tuple[str, int]]:
        return [(g.fingerprint, g.size) for g in self.groups]

    @property
    def item_counts(self) -> list[tuple[str, int]]:
        return [(g.fingerprint, g.item_count) for g in self.groups]

    @property
    def sample_count(self) -> int:
        return sum(g.size for g in self.groups)

    def is_present(self, item_id: str, fingerprint: str) -> bool:
        for idx, g in enumerate(self.groups):
            if g.fingerprint == fingerprint:
                row = self.presence.get(item_id)
                return bool(row and row[idx])
        raise KeyError(fingerprint)


def group_samples(samples: list[StoredSample]) -> list[SampleGroup]:
    """フィンガープリントでまとめる。代表はパス名が最小のファイル。"""
    by_fp: dict[str, list[StoredSample]] = defaultdict(list)
    for s in samples:
        by_fp[s.fingerprint].append(s)
    groups = []
    for fp, members in by_fp.items():
        members.sort(key=lambda s: str(s.path))
        groups.append(
            SampleGroup(fingerprint=fp, paths=tuple(m.path for m in members), representative=members[0])
        )
    groups.sort(key=lambda g: (-g.size, g.fingerprint))
    return groups


def find_duplicates(sample: StoredSample) -> list[DuplicateItem]:
    """サンプル内で2回以上現れる work item と、その出現したリクエスト番号（昇順）。"""
    pages_by_id: dict[str, list[int]] = defaultdict(list)
    for row in sample.rows:
        pages_by_id[row[COL_ITEM_ID]].append(int(row[COL_PAGE_INDEX]))
    return [
        DuplicateItem(item_id=item_id, page_indices=tuple(sorted(pages)))
        for item_id, pages in sorted(pages_by_id.items())
        if len(pages) > 1
    ]


def evaluate(loaded: LoadResult) -> ComparisonReport:
    groups = group_samples(loaded.samples)
    ids_per_group = [g.item_ids() for g in groups]
    item_ids = sorted(set().union(*ids_per_group)) if ids_per_group else []
    presence = {item_id: tuple(item_id in ids for ids in ids_per_group) for item_id in item_ids}
    duplicates = {g.fingerprint: find_duplicates(g.representative) for g in groups}
    return ComparisonReport(
        groups=groups,
        item_ids=item_ids,
        presence=presence,
        duplicates=duplicates,
        corrupted=list(loaded.corrupted),
    )
