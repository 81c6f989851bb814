"""runner モジュールのユニットテスト。"""
import threading
from concurrent.futures import Future

from pagesampler.api.page_fetcher import FailureKind
from pagesampler.job.events import RecordingObserver
from pagesampler.job.params import RetryPolicy
from pagesampler.job.runner import Sampler, _outcome_of
from pagesampler.report.evaluator import evaluate
from pagesampler.store.sample_store import SampleStore
from tests.helpers import ScriptedFetcher, ids


def _sampler(tmp_path, factory, retry=None):
    return Sampler(
        factory,
        SampleStore(tmp_path),
        retry=retry or RetryPolicy(backoff_sec=0),
        observer=RecordingObserver(),
    )


def test_runs_all_samples_and_persists(tmp_path):
    sampler = _sampler(tmp_path, lambda: ScriptedFetcher([ids("a", 2), ["x"]], page_size=2))
    summary = sampler.run(sample_count=5, workers=2, timeout_sec=30)
    assert summary.requested == 5
    assert summary.completed == 5
    assert summary.failed == 0
    assert summary.abandoned == 0
    assert len({o.fingerprint for o in summary.outcomes}) == 1
    assert all(o.item_count == 3 and o.page_count == 2 for o in summary.outcomes)
    report = evaluate(SampleStore(tmp_path).load_all())
    assert report.frequency[0][1] == 5


def test_failed_sample_is_reported_not_persisted(tmp_path):
    sampler = _sampler(
        tmp_path,
        lambda: ScriptedFetcher([FailureKind.SERVER_ERROR] * 5),
        retry=RetryPolicy(max_attempts=2, backoff_sec=0),
    )
    summary = sampler.run(sample_count=2, workers=2, timeout_sec=30)
    assert summary.failed == 2
    assert all("SampleFailedError" in o.error for o in summary.outcomes)
    assert SampleStore(tmp_path).list_artifacts() == []


def test_crashing_fetcher_becomes_failure_outcome(tmp_path):
    class Boom:
        page_size = 400

        def fetch(self, offset):
            raise RuntimeError("boom")

    summary = _sampler(tmp_path, Boom).run(sample_count=1, workers=1, timeout_sec=30)
    assert summary.completed == 0
    assert summary.outcomes[0].error == "RuntimeError: boom"
    assert not summary.outcomes[0].ok


def test_fetcher_is_closed_after_sample(tmp_path):
    created = []

    def factory():
        f = ScriptedFetcher([["x"]])
        created.append(f)
        return f

    _sampler(tmp_path, factory).run(sample_count=3, workers=3, timeout_sec=30)
    assert len(created) == 3
    assert all(f.closed for f in created)


def test_timeout_abandons_running_tasks(tmp_path):
    release = threading.Event()

    class Blocking:
        page_size = 400

        def fetch(self, offset):
            release.wait(5)
            return ScriptedFetcher([["x"]]).fetch(offset)

    try:
        summary = _sampler(tmp_path, Blocking).run(sample_count=3, workers=1, timeout_sec=0.2)
        assert summary.abandoned == 3
        assert summary.outcomes == []
    finally:
        release.set()


def test_sample_once_direct(tmp_path):
    outcome = _sampler(tmp_path, lambda: ScriptedFetcher([["a", "b"]])).sample_once("beef")
    assert outcome.ok
    assert outcome.task_id == "beef"
    assert outcome.path.exists()
    assert outcome.path.name.startswith(outcome.fingerprint)


def test_close_failure_keeps_sample_and_summary(tmp_path):
    class FailingClose(ScriptedFetcher):
        def close(self):
            raise OSError("close failed")

    summary = _sampler(tmp_path, lambda: FailingClose([["x"]])).run(sample_count=2, workers=1, timeout_sec=10)
    assert summary.completed == 2
    assert len(SampleStore(tmp_path).list_artifacts()) == 2


def test_observer_crash_becomes_failure_outcome(tmp_path):
    class BrokenObserver(RecordingObserver):
        def sample_persisted(self, task_id, page_count, item_count, path):
            raise RuntimeError("observer down")

    sampler = Sampler(
        lambda: ScriptedFetcher([["x"]]),
        SampleStore(tmp_path),
        retry=RetryPolicy(backoff_sec=0),
        observer=BrokenObserver(),
    )
    summary = sampler.run(sample_count=2, workers=2, timeout_sec=10)
    assert summary.failed == 2
    assert all(o.error == "RuntimeError: observer down" for o in summary.outcomes)
    assert all(len(o.task_id) == 4 for o in summary.outcomes)


def test_future_exception_becomes_failure_outcome():
    fut = Future()
    fut.set_exception(RuntimeError("lost"))
    outcome = _outcome_of(fut)
    assert not outcome.ok
    assert outcome.error == "RuntimeError: lost"
