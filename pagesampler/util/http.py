"""HTTP クライアント設定：タイムアウト・リトライ回数・バックオフ。"""
import os
from typing import Any, Optional

import requests


def get_timeout_sec() -> int:
    return int(os.getenv("HTTP_TIMEOUT_SEC", "30"))


def get_connect_timeout_sec() -> float:
    return float(os.getenv("HTTP_CONNECT_TIMEOUT_SEC", "5"))


def new_session(headers: Optional[dict[str, str]] = None) -> requests.Session:
    """タスク専用のセッションを作る。スレッド間で共有しないこと。"""
    session = requests.Session()
    if headers:
        session.headers.update(headers)
    return session


def get(
    url: str,
    params: Optional[dict[str, Any]] = None,
    timeout_sec: Optional[int] = None,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """GET を1回だけ実行。ステータスの判定とリトライは呼び出し側で行う想定。"""
    timeout_sec = timeout_sec or get_timeout_sec()
    use_session = session or requests
    return use_session.get(
        url,
        params=params,
        timeout=(get_connect_timeout_sec(), timeout_sec),
    )
