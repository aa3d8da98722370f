"""Markdown summary of a batch of parsed reports."""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, cast

from .normalize import now_iso


def render_summary(reports: Iterable[Mapping[str, Any]], output_path: Path) -> str:
    """Write ``SUMMARY.md`` for ``reports``, each a ``ParsedReport.to_dict()`` mapping."""

    entries = sorted(reports, key=lambda entry: str(entry.get("file", "")).lower())
    grade_counts: Counter[str] = Counter()
    for entry in entries:
        case_info = cast(Mapping[str, Any], record_of(entry).get("caseInfo", {}))
        grade_counts[str(case_info.get("grade", "")) or "unknown"] += 1

    lines = ["# Assessment Report Summary", "", f"_Last build: {now_iso()}_", ""]
    lines.append(f"**Total reports:** {len(entries)}")
    lines.append("")
    if grade_counts:
        grade_summary = ", ".join(f"{grade} ({count})" for grade, count in sorted(grade_counts.items()))
        lines.append(f"**By grade:** {grade_summary}")
        lines.append("")
    lines.append("## Reports")
    lines.append("")
    if not entries:
        lines.append("_No reports parsed yet._")
    else:
        lines.append("| File | Student | Grade | Author | Strengths | Challenges | Strategies |")
        lines.append("| --- | --- | --- | --- | --- | --- | --- |")
        for entry in entries:
            lines.append(format_report_row(entry))
    lines.append("")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    content = "\n".join(lines)
    output_path.write_text(content, encoding="utf-8")
    return content


def record_of(entry: Mapping[str, Any]) -> Mapping[str, Any]:
    return cast(Mapping[str, Any], entry.get("record", {}) or {})


def format_report_row(entry: Mapping[str, Any]) -> str:
    record = record_of(entry)
    case_info = cast(Mapping[str, Any], record.get("caseInfo", {}) or {})
    file_path = str(entry.get("file", ""))
    display = file_path.rsplit("/", 1)[-1]
    link = f"[{escape_cell(display)}]({file_path})" if file_path else ""
    return (
        "| "
        f"{link} | {escape_cell(str(case_info.get('studentName', '')))} | "
        f"{escape_cell(str(case_info.get('grade', '')))} | "
        f"{escape_cell(str(case_info.get('tutor', '')))} | "
        f"{len(record.get('studentStrengths', []) or [])} | "
        f"{len(record.get('studentChallenges', []) or [])} | "
        f"{len(record.get('supportStrategies', []) or [])} |"
    )


def escape_cell(value: str) -> str:
    return value.replace("|", "\\|")
