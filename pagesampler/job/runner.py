"""サンプリングのオーケストレーション。N 個の独立したサンプル取得をスレッドプールで並列実行する。"""
from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from pagesampler.api.page_fetcher import PageCursorFetcher
from pagesampler.job.collector import PageFetcher, SampleCollector
from pagesampler.job.events import LoggingObserver, SamplingObserver
from pagesampler.job.params import RetryPolicy, SamplerParams
from pagesampler.match import canonical
from pagesampler.store.sample_store import SampleStore
from pagesampler.util.datetime_utils import run_id as make_run_id
from pagesampler.util.log import log_sampling_summary

logger = logging.getLogger(__name__)

FetcherFactory = Callable[[], PageFetcher]


@dataclass(frozen=True)
class SampleOutcome:
    """1タスクの結果。成功時は fingerprint と path、失敗時は error。"""

    task_id: str
    fingerprint: Optional[str] = None
    path: Optional[Path] = None
    page_count: int = 0
    item_count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SamplingSummary:
    run_id: str
    requested: int
    outcomes: list[SampleOutcome] = field(default_factory=list)
    abandoned: int = 0

    @property
    def completed(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)


def new_task_id() -> str:
    return uuid.uuid4().hex[-4:]


def _close_quietly(fetcher: object, task_id: str) -> None:
    """fetcher の後始末。close の失敗でサンプル結果を失わないようログに残すだけにする。"""
    close = getattr(fetcher, "close", None)
    if not close:
        return
    try:
        close()
    except Exception:
        logger.warning("Sample task %s: closing fetcher failed", task_id, exc_info=True)


def _outcome_of(fut: Future[SampleOutcome]) -> SampleOutcome:
    """完了した Future を SampleOutcome に。タスク外に漏れた例外も失敗として扱う。"""
    error = fut.exception()
    if error is None:
        return fut.result()
    logger.error("Sample task crashed: %s", error, exc_info=error)
    return SampleOutcome(task_id="?", error=f"{type(error).__name__}: {error}")


class Sampler:
    """
    各タスクは他タスクと状態を共有しない（共有するのは出力ディレクトリのみ）。
    タスク内の例外は握りつぶさず失敗 SampleOutcome として返す。
    """

    def __init__(
        self,
        fetcher_factory: FetcherFactory,
        store: SampleStore,
        retry: RetryPolicy | None = None,
        observer: SamplingObserver | None = None,
    ):
        self.fetcher_factory = fetcher_factory
        self.store = store
        self.retry = retry or RetryPolicy()
        self.observer = observer or LoggingObserver()

    def sample_once(self, task_id: str | None = None) -> SampleOutcome:
        """1サンプルを取得・正規化・保存する。"""
        task_id = task_id or new_task_id()
        self.observer.sample_started(task_id)
        fetcher = None
        try:
            fetcher = self.fetcher_factory()
            sample = SampleCollector(fetcher, self.observer, self.retry, task_id).collect()
            text = canonical.canonical_text(sample)
            fp = canonical.fingerprint(text)
            path = self.store.write(text, fp)
        except Exception as e:
            logger.exception("Sample task %s failed", task_id)
            self.observer.sample_failed(task_id, e)
            return SampleOutcome(task_id=task_id, error=f"{type(e).__name__}: {e}")
        finally:
            _close_quietly(fetcher, task_id)
        self.observer.sample_persisted(task_id, len(sample.pages), sample.item_count, path)
        return SampleOutcome(
            task_id=task_id,
            fingerprint=fp,
            path=path,
            page_count=len(sample.pages),
            item_count=sample.item_count,
        )

    def _task(self) -> SampleOutcome:
        task_id = new_task_id()
        threading.current_thread().name = f"sample-{task_id}"
        try:
            return self.sample_once(task_id)
        except Exception as e:
            logger.exception("Sample task %s crashed", task_id)
            return SampleOutcome(task_id=task_id, error=f"{type(e).__name__}: {e}")

    def run(self, sample_count: int, workers: int, timeout_sec: float | None = None) -> SamplingSummary:
        """
        sample_count 個のタスクを workers 並列で実行し、全完了かタイムアウトまで待つ。
        タイムアウト時、実行中のタスクは強制終了せず放置し、未開始のタスクはキャンセルする。
        """
        summary = SamplingSummary(run_id=make_run_id(), requested=sample_count)
        self.store.ensure_directory()
        logger.info("Fetching %d samples in %d threads", sample_count, workers)

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sampler")
        futures: list[Future[SampleOutcome]] = [
            executor.submit(self._task) for _ in range(sample_count)
        ]
        done, not_done = wait(futures, timeout=timeout_sec)
        executor.shutdown(wait=False, cancel_futures=True)

        for fut in futures:
            if fut in done:
                summary.outcomes.append(_outcome_of(fut))
        summary.abandoned = len(not_done)
        if not_done:
            logger.warning("Timeout after %ss: %d sample tasks abandoned", timeout_sec, len(not_done))

        log_sampling_summary(
            logger,
            summary.run_id,
            summary.requested,
            summary.completed,
            summary.failed,
            summary.abandoned,
        )
        return summary


def build_sampler(
    params: SamplerParams,
    base_url: str,
    token: str,
    observer: SamplingObserver | None = None,
) -> Sampler:
    """設定から本番用の Sampler を組み立てる。fetcher（と HTTP セッション）はタスクごとに作る。"""

    def fetcher_factory() -> PageCursorFetcher:
        return PageCursorFetcher(
            base_url,
            token,
            params.start_date,
            params.end_date,
            page_size=params.page_size,
            tz=params.timezone,
        )

    return Sampler(
        fetcher_factory,
        SampleStore(params.target_dir),
        retry=params.retry,
        observer=observer,
    )
