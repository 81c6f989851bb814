"""サンプラー共通の例外。"""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class SamplerError(Exception):
    """pagesampler の例外の基底クラス。"""


class ConfigError(SamplerError):
    """設定値が不正。"""


class SampleFailedError(SamplerError):
    """同一オフセットのリトライ上限に達し、サンプル全体を失敗とした。"""

    def __init__(self, offset: int, attempts: int, last_failure: Optional[str] = None):
        self.offset = offset
        self.attempts = attempts
        self.last_failure = last_failure
        super().__init__(
            f"offset={offset} still failing after {attempts} attempts"
            + (f" (last: {last_failure})" if last_failure else "")
        )


class CorruptArtifactError(SamplerError):
    """保存済みサンプルファイルが読めない・内容がチェックサムと一致しない。"""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path.name}: {reason}")
