"""フィンガープリント付きサンプルの保存と読み込み。ファイルは追記のみで上書きしない。"""
from __future__ import annotations

import csv
import io
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from pagesampler.constants import CSV_DELIMITER, CSV_HEADER, RESULTS_SUFFIX
from pagesampler.errors import CorruptArtifactError
from pagesampler.match import canonical

logger = logging.getLogger(__name__)

# 同名ファイルが既にある場合にサフィックスを引き直す回数
_MAX_NAME_ATTEMPTS = 10

# 列の位置
COL_PAGE_INDEX = 0
COL_ITEM_ID = 2


@dataclass(frozen=True)
class StoredSample:
    """読み込んだサンプルファイル1つ分。rows はヘッダーを除いたデータ行。"""

    path: Path
    fingerprint: str
    rows: tuple[tuple[str, ...], ...]


@dataclass
class LoadResult:
    samples: list[StoredSample] = field(default_factory=list)
    corrupted: list[CorruptArtifactError] = field(default_factory=list)


def fingerprint_from_name(name: str) -> str:
    """ファイル名の最初の '-' より前がフィンガープリント。"""
    return name.split("-", 1)[0]


def new_suffix() -> str:
    return uuid.uuid4().hex[-8:]


class SampleStore:
    """
    1サンプル = 1ファイル `<fingerprint>-<suffix>-results.csv`。
    並行して書き込まれても、排他作成（mode "x"）で衝突時はサフィックスを変えるため上書きは起きない。
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def write(self, text: str, fp: str | None = None, suffix: str | None = None) -> Path:
        """正規化テキストを書き込み、パスを返す。ファイル末尾は改行で終える。"""
        fp = fp or canonical.fingerprint(text)
        self.ensure_directory()
        for _ in range(_MAX_NAME_ATTEMPTS):
            path = self.directory / f"{fp}-{suffix or new_suffix()}{RESULTS_SUFFIX}"
            try:
                with open(path, "x", encoding="utf-8", newline="") as f:
                    f.write(text)
                    f.write("\n")
                return path
            except FileExistsError:
                logger.debug("%s already exists, drawing a new suffix", path.name)
                suffix = None
        raise FileExistsError(f"could not find a free file name for {fp} in {self.directory}")

    def list_artifacts(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.iterdir() if p.is_file() and p.name.endswith(".csv"))

    def read(self, path: Path) -> StoredSample:
        """1ファイルを読み込み検証する。内容が名前のフィンガープリントと一致しなければ CorruptArtifactError。"""
        fp = fingerprint_from_name(path.name)
        try:
            raw = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CorruptArtifactError(path, f"unreadable: {e}") from e
        if not raw.endswith("\n"):
            raise CorruptArtifactError(path, "missing trailing newline")
        text = raw[:-1]
        if canonical.fingerprint(text) != fp:
            raise CorruptArtifactError(path, "content does not match fingerprint")

        try:
            rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=CSV_DELIMITER))
        except csv.Error as e:
            raise CorruptArtifactError(path, f"unparseable: {e}") from e
        if not rows:
            raise CorruptArtifactError(path, "empty file")
        data = rows[1:]  # ヘッダー行を除く
        for line_no, row in enumerate(data, start=2):
            if len(row) != len(CSV_HEADER):
                raise CorruptArtifactError(path, f"line {line_no}: expected {len(CSV_HEADER)} fields, got {len(row)}")
            if not row[COL_PAGE_INDEX].isdigit():
                raise CorruptArtifactError(path, f"line {line_no}: invalid request id {row[COL_PAGE_INDEX]!r}")
        return StoredSample(path=path, fingerprint=fp, rows=tuple(tuple(r) for r in data))

    def load_all(self) -> LoadResult:
        """ディレクトリ内の全サンプルを読み込む。壊れたファイルは corrupted に入れて続行。"""
        result = LoadResult()
        for path in self.list_artifacts():
            try:
                result.samples.append(self.read(path))
            except CorruptArtifactError as e:
                logger.warning("Skipping corrupted sample file %s", e)
                result.corrupted.append(e)
        return result
