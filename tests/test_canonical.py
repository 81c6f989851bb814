"""canonical モジュールのユニットテスト。"""
from dataclasses import replace

from pagesampler.api.models import Page, Sample
from pagesampler.match.canonical import canonical_text, fingerprint, format_rows, sample_rows, sha256_hex
from tests.helpers import page, sample, work_item


def test_sha256_hex_is_lowercase_hex():
    h = sha256_hex(b"")
    assert len(h) == 64
    assert all(c in "0123456789abcdef" for c in h)


def test_same_content_same_fingerprint():
    a = sample(["1", "2"], [])
    b = sample(["1", "2"], [])
    assert canonical_text(a) == canonical_text(b)
    assert fingerprint(canonical_text(a)) == fingerprint(canonical_text(b))


def test_canonicalization_is_idempotent():
    s = sample(["1", "2", "3"])
    assert canonical_text(s) == canonical_text(s)


def test_reordering_within_page_changes_fingerprint():
    a = sample(["1", "2"])
    b = sample(["2", "1"])
    assert fingerprint(canonical_text(a)) != fingerprint(canonical_text(b))


def test_attribute_difference_changes_fingerprint():
    a = sample(["1"])
    changed = replace(a.pages[0], items=(work_item("1", minutes=31),))
    b = Sample(pages=(changed,))
    assert fingerprint(canonical_text(a)) != fingerprint(canonical_text(b))


def test_rows_layout():
    s = sample(["1"], ["2"])
    rows = sample_rows(s)
    assert rows[0][0] == "Request ID"
    assert rows[1] == [
        "0",
        s.pages[0].params,
        "1",
        "2024-01-02T09:00:00+00:00",
        "2024-01-03T09:00:00+00:00",
        "2024-01-02",
        "30m",
    ]
    assert rows[2][0] == "1"
    assert rows[2][2] == "2"


def test_missing_update_is_empty_field():
    s = Sample(pages=(Page(params="p", offset=0, items=(work_item("1", updated=False),)),))
    assert sample_rows(s)[1][4] == ""


def test_failed_page_shifts_page_index():
    failed = Page(params=page(0, []).params, offset=0, failed=True)
    s = Sample(pages=(failed, page(0, ["1"])))
    assert sample_rows(s)[1][0] == "1"


def test_text_has_no_trailing_newline():
    text = canonical_text(sample(["1", "2"]))
    assert not text.endswith("\n")
    assert len(text.split("\n")) == 3


def test_delimiter_in_field_is_quoted():
    text = format_rows([["a;b", "c"]])
    assert text == '"a;b";c'
