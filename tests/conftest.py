"""テスト共通の fixture。"""
from __future__ import annotations

from typing import Callable

import pytest

from tests.helpers import ScriptedFetcher


@pytest.fixture
def fetcher_factory() -> Callable[..., ScriptedFetcher]:
    def make(script: list, page_size: int = 400) -> ScriptedFetcher:
        return ScriptedFetcher(script, page_size)

    return make
