"""設定の読み込み。config.yaml と .env を main / job で共有。"""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).resolve().parent.parent


def default_config() -> dict[str, Any]:
    """デフォルト設定を返す。"""
    return {
        "sampler": {
            "sample_count": 10,
            "threads": 4,
            "target_dir": "data/samples",
            "timeout_minutes": 30,
            "date_start": None,
            "date_end": None,
            "timezone": "UTC",
        },
        "api": {"page_size": 400},
        "retry": {
            "max_attempts": 5,  # None で無制限（即時リトライ）
            "backoff_sec": 2,
            "backoff_max_sec": 60,
        },
    }


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """セクション単位でデフォルトに上書きする。"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if value is None and isinstance(merged.get(key), dict):
            continue  # 中身のないセクションはデフォルトのまま
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> dict[str, Any]:
    """config.yaml を読み込みデフォルトにマージする。ファイルが無ければデフォルトを返す。"""
    path = config_path or os.getenv("CONFIG_PATH") or str(ROOT / "config.yaml")
    if not os.path.isfile(path):
        return default_config()
    with open(path, "r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    return _merge(default_config(), loaded)


def get_api_url() -> str:
    return os.getenv("YOUTRACK_API_URL", "").rstrip("/")


def get_api_token() -> str:
    return os.getenv("YOUTRACK_TOKEN", "")
