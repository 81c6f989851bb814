"""tables モジュールのユニットテスト。"""
import logging

from pagesampler.api.models import Sample
from pagesampler.match.canonical import canonical_text
from pagesampler.report import tables
from pagesampler.report.evaluator import evaluate
from pagesampler.store.sample_store import SampleStore
from tests.helpers import page, sample


def _report(tmp_path, samples):
    store = SampleStore(tmp_path)
    for s in samples:
        store.write(canonical_text(s))
    return evaluate(store.load_all())


def test_checksum_table_lists_counts(tmp_path):
    report = _report(tmp_path, [sample(["1"]), sample(["1"])])
    lines = tables.checksum_table(report)
    assert lines[0] == "Results by same response"
    assert lines[2].startswith(f"| {report.groups[0].fingerprint} |")
    assert lines[2].rstrip(" |").endswith("2")


def test_presence_table_marks_missing(tmp_path):
    report = _report(tmp_path, [sample(["1", "2"]), sample(["1", "2"]), sample(["1"])])
    lines = tables.presence_table(report)
    header = lines[1]
    assert header.startswith("| Work Item Id | ")
    assert f"{report.groups[0].fingerprint[:5]}..." in header
    row_2 = next(line for line in lines[2:] if line.split("|")[1].strip() == "2")
    assert tables.PRESENT in row_2
    assert tables.MISSING in row_2


def test_duplicate_table(tmp_path):
    dup = Sample(pages=(page(0, ["42"], 1), page(1, ["42"], 1)))
    report = _report(tmp_path, [dup, sample(["1"])])
    text = "\n".join(tables.duplicate_table(report))
    assert "No duplicates present" in text
    assert "0, 1" in text


def test_render_separates_sections_and_lists_corrupted(tmp_path):
    (tmp_path / "abc-0000-results.csv").write_text("x\n", encoding="utf-8")
    report = _report(tmp_path, [sample(["1"])])
    lines = tables.render(report)
    assert lines.count("Results by same response") == 1
    assert "Corrupted sample files: 1" in lines


def test_log_report_empty(tmp_path, caplog):
    report = _report(tmp_path, [])
    with caplog.at_level(logging.INFO):
        tables.log_report(report)
    assert "No sample files found" in caplog.text
