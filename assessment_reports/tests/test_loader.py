from __future__ import annotations

from pathlib import Path

import pytest
from docx import Document

import assessment_reports.report_parser as report_parser
from assessment_reports.report_parser import loader, renderer
from assessment_reports.report_parser.cache import ReportCache
from assessment_reports.report_parser.parser import parse_report

HTML_REPORT = """<html><body>
<h1>Student Support Report</h1>
<p><strong>Student Name:</strong> Ana Ruiz</p>
<h2>Strengths</h2>
<p><strong>Reading</strong></p>
<p>What You See:</p>
<ul><li>Reads fluently aloud</li></ul>
<p>What to Do:</p>
<ul><li>✔ Provide chapter books</li></ul>
<h2>Challenges</h2>
<table>
<tr><th>Challenge</th><th>What You See</th><th>What to Do</th></tr>
<tr><td>Focus</td><td>Gets distracted<br>Leaves seat often</td><td>✔ Use timers</td></tr>
</table>
</body></html>
"""


def build_docx(path: Path) -> None:
    document = Document()
    document.add_heading("Student Support Report", level=1)
    name = document.add_paragraph()
    name.add_run("Student Name:").bold = True
    name.add_run(" Omar Haddad")
    document.add_heading("Strengths", level=2)
    title = document.add_paragraph()
    title.add_run("Reading").bold = True
    document.add_paragraph("What You See:")
    document.add_paragraph("Reads fluently aloud", style="List Bullet")
    document.add_paragraph("What to Do:")
    document.add_paragraph("✔ Provide chapter books", style="List Bullet")
    document.add_heading("Challenges", level=2)
    table = document.add_table(rows=2, cols=3)
    for cell, value in zip(table.rows[0].cells, ["Challenge", "What You See", "What to Do"]):
        cell.text = value
    for cell, value in zip(table.rows[1].cells, ["Focus", "Gets distracted", "✔ Use timers"]):
        cell.text = value
    document.save(str(path))


def test_markdown_is_read_verbatim(tmp_path: Path) -> None:
    path = tmp_path / "report.md"
    path.write_text("## Strengths\n**Reading**\n", encoding="utf-8")
    assert loader.load_report_text(path) == "## Strengths\n**Reading**\n"


def test_unsupported_suffix_raises(tmp_path: Path) -> None:
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4")
    with pytest.raises(ValueError):
        loader.load_report_text(path)


def test_html_is_converted_to_markdown(tmp_path: Path) -> None:
    path = tmp_path / "report.html"
    path.write_text(HTML_REPORT, encoding="utf-8")
    text = loader.load_report_text(path)
    assert "# Student Support Report" in text
    assert "**Student Name:** Ana Ruiz" in text
    assert "## Strengths" in text
    assert "- Reads fluently aloud" in text
    assert "| Focus | Gets distracted <br> Leaves seat often | ✔ Use timers |" in text

    record = parse_report(text, cache=ReportCache())
    assert record.case_info.student_name == "Ana Ruiz"
    assert record.strengths[0].title == "Reading"
    assert record.strengths[0].observations == ("Reads fluently aloud",)
    assert record.challenges[0].title == "Focus"
    assert record.challenges[0].observations == ("Gets distracted", "Leaves seat often")


def test_docx_is_converted_to_markdown(tmp_path: Path) -> None:
    path = tmp_path / "report.docx"
    build_docx(path)
    text = loader.load_report_text(path)
    assert "# Student Support Report" in text
    assert "**Student Name:** Omar Haddad" in text
    assert "## Strengths" in text
    assert "- Reads fluently aloud" in text
    assert "| Focus | Gets distracted | ✔ Use timers |" in text

    record = parse_report(text, cache=ReportCache())
    assert record.case_info.student_name == "Omar Haddad"
    assert record.strengths[0].title == "Reading"
    assert record.challenges[0].title == "Focus"


def test_scan_directory_records_each_file(sandbox: Path) -> None:
    target = sandbox / "reports"
    (target / "broken.docx").write_bytes(b"not a zip archive")
    (target / "notes.csv").write_text("ignored", encoding="utf-8")
    reports, files = loader.scan_directory(target, sandbox, cache=ReportCache())
    assert len(reports) == 2
    assert set(files) == {
        "reports/broken.docx",
        "reports/marcus_lee_validated_findings.md",
        "reports/sarah_johnson_support_report.md",
    }
    assert files["reports/broken.docx"].status == "error"
    assert files["reports/broken.docx"].error
    sarah = files["reports/sarah_johnson_support_report.md"]
    assert sarah.status == "ok"
    assert sarah.chars > 0
    assert len(sarah.sha256) == 64


def test_render_summary_lists_reports(sandbox: Path, tmp_path: Path) -> None:
    reports, _ = loader.scan_directory(sandbox / "reports", sandbox, cache=ReportCache())
    summary_path = tmp_path / "_index" / "SUMMARY.md"
    content = renderer.render_summary([report.to_dict() for report in reports], summary_path)
    assert summary_path.exists()
    assert "**Total reports:** 2" in content
    assert (
        "| [sarah_johnson_support_report.md](reports/sarah_johnson_support_report.md) "
        "| Sarah Johnson | 5th Grade | Ms. Rivera | 2 | 2 | 4 |"
    ) in content


def test_render_summary_without_reports(tmp_path: Path) -> None:
    content = renderer.render_summary([], tmp_path / "SUMMARY.md")
    assert "_No reports parsed yet._" in content


def test_parse_report_file_reads_and_parses(sandbox: Path) -> None:
    record = report_parser.parse_report_file(
        sandbox / "reports" / "sarah_johnson_support_report.md", cache=ReportCache()
    )
    assert record.case_info.student_name == "Sarah Johnson"
