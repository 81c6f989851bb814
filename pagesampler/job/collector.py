"""1サンプル分の取得ループ。オフセットを進めながら最終ページまで取得する。"""
from __future__ import annotations

import time
from typing import Callable, Protocol

from pagesampler.api.models import Page, Sample
from pagesampler.api.page_fetcher import FailureKind, PageResult
from pagesampler.errors import SampleFailedError
from pagesampler.job.events import SamplingObserver
from pagesampler.job.params import RetryPolicy


class PageFetcher(Protocol):
    page_size: int

    def fetch(self, offset: int) -> PageResult: ...


class SampleCollector:
    """
    PageCursorFetcher を繰り返し呼び、1つの Sample を組み立てる。
    - 成功: ページを追加し offset を件数分進める。page_size 未満なら終了。
    - ServerError: 空ページ（failed=True）を記録して同じ offset を再取得。
    - Transport / InvalidPayload: 何も記録せず同じ offset を再取得。
    同じ offset での連続失敗が retry.max_attempts に達したら SampleFailedError。
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        observer: SamplingObserver,
        retry: RetryPolicy | None = None,
        task_id: str = "",
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.fetcher = fetcher
        self.observer = observer
        self.retry = retry or RetryPolicy()
        self.task_id = task_id
        self.sleep = sleep

    def collect(self) -> Sample:
        page_size = self.fetcher.page_size
        offset = 0
        pages: list[Page] = []
        attempts = 0

        while True:
            result = self.fetcher.fetch(offset)
            if result.ok:
                attempts = 0
                pages.append(Page(params=result.params, offset=offset, items=result.items))
                self.observer.page_fetched(self.task_id, len(pages) - 1, result)
                offset += len(result.items)
                if len(result.items) < page_size:
                    return Sample(pages=tuple(pages))
                continue

            if result.failure == FailureKind.SERVER_ERROR:
                # 後のレポートでリクエスト番号が連続するよう空ページを残す
                pages.append(Page(params=result.params, offset=offset, failed=True))

            attempts += 1
            if not self.retry.should_retry(attempts):
                self.observer.fetch_failed(self.task_id, result, attempts, 0.0)
                raise SampleFailedError(offset, attempts, _describe(result))
            delay = self.retry.delay(attempts)
            self.observer.fetch_failed(self.task_id, result, attempts, delay)
            if delay > 0:
                self.sleep(delay)


def _describe(result: PageResult) -> str:
    kind = result.failure.value if result.failure else "ok"
    if result.status_code is not None:
        return f"{kind} status={result.status_code}"
    return f"{kind} {result.detail}".strip()
