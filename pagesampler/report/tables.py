"""比較レポートの表示用テーブル。"""
from __future__ import annotations

import logging
from typing import Optional

from pagesampler.report.evaluator import ComparisonReport

PRESENT = "✓"
MISSING = "missing"


def checksum_table(report: ComparisonReport) -> list[str]:
    lines = ["Results by same response", "| %64s | %s |" % ("Checksum", "Number of identical Samples")]
    for fp, count in report.frequency:
        lines.append("| %64s | %27d |" % (fp, count))
    return lines


def item_count_table(report: ComparisonReport) -> list[str]:
    lines = ["Total WorkItems in Sample File", "| %64s | %s |" % ("Checksum", "Number of WorkItems")]
    for fp, count in report.item_counts:
        lines.append("| %64s | %19d |" % (fp, count))
    return lines


def presence_table(report: ComparisonReport) -> list[str]:
    header = " | ".join(f"{g.fingerprint[:5]}..." for g in report.groups)
    lines = ["WorkItems presence in samples", f"| Work Item Id | {header} |"]
    for item_id in report.item_ids:
        cells = " | ".join("%8s" % (PRESENT if p else MISSING) for p in report.presence[item_id])
        lines.append("| %12s | %s |" % (item_id, cells))
    return lines


def duplicate_table(report: ComparisonReport) -> list[str]:
    lines = ["Responses containing duplicate WorkItems"]
    for g in report.groups:
        lines.append(f"Files with checksum {g.fingerprint}")
        dups = report.duplicates.get(g.fingerprint) or []
        if not dups:
            lines.append("No duplicates present")
        else:
            lines.append("| %15s | %s | %s |" % ("WorkItem Id", "Times present in Sample", "Received in requests"))
            for d in dups:
                pages = ", ".join(str(p) for p in d.page_indices)
                lines.append("| %15s | %23d | %20s |" % (d.item_id, d.times_present, pages))
        lines.append("")
    return lines


def corrupted_table(report: ComparisonReport) -> list[str]:
    if not report.corrupted:
        return []
    lines = [f"Corrupted sample files: {len(report.corrupted)}"]
    for e in report.corrupted:
        lines.append(f"  {e.path.name}: {e.reason}")
    return lines


def render(report: ComparisonReport) -> list[str]:
    """全テーブルを表示順に連結。テーブル間は空行3つ。"""
    sections = [
        checksum_table(report),
        item_count_table(report),
        presence_table(report),
        duplicate_table(report),
    ]
    corrupted = corrupted_table(report)
    if corrupted:
        sections.append(corrupted)
    lines: list[str] = []
    for idx, section in enumerate(sections):
        if idx:
            lines.extend(["", "", ""])
        lines.extend(section)
    return lines


def log_report(report: ComparisonReport, logger: Optional[logging.Logger] = None) -> None:
    logger = logger or logging.getLogger("pagesampler.report")
    if not report.groups and not report.corrupted:
        logger.info("No sample files found")
        return
    for line in render(report):
        logger.info(line)
