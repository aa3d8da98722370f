"""Reading report files of various formats and scanning report directories."""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup, NavigableString, Tag
from docx import Document
from docx.table import Table
from docx.text.paragraph import Paragraph

from .cache import ReportCache
from .config import ParserSettings
from .models import ReportRecord
from .parser import parse_report

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {".md", ".markdown", ".txt"}
HTML_EXTENSIONS = {".html", ".htm"}
DOCX_EXTENSIONS = {".docx"}
SUPPORTED_EXTENSIONS = MARKDOWN_EXTENSIONS | HTML_EXTENSIONS | DOCX_EXTENSIONS

HTML_HEADINGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
HTML_BLOCKS = [*HTML_HEADINGS, "p", "li", "tr"]
DOCX_HEADING_RE = re.compile(r"^Heading\s+(\d)$", re.IGNORECASE)
DOCX_LIST_STYLES = ("list bullet", "list number", "list paragraph")
GROUPED_BLOCKS = {"li", "tr"}


@dataclass
class FileScanResult:
    """Metadata captured while scanning a single report file."""

    file: str
    sha256: str
    mtime: int
    chars: int
    status: str = "pending"
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.file,
            "sha256": self.sha256,
            "mtime": self.mtime,
            "chars": self.chars,
            "status": self.status,
            "error": self.error,
        }


@dataclass
class ParsedReport:
    """A parsed record together with the file it came from."""

    file: str
    sha256: str
    record: ReportRecord

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "sha256": self.sha256, "record": self.record.to_dict()}


def table_row(cells: Iterable[str]) -> str:
    return "| " + " | ".join(cell.replace("|", "\\|") for cell in cells) + " |"


def separator_row(width: int) -> str:
    return table_row(["---"] * max(width, 1))


def join_blocks(blocks: Iterable[tuple[str, str]]) -> str:
    """Join ``(kind, text)`` blocks, keeping list items and table rows contiguous."""

    lines: list[str] = []
    previous: str | None = None
    for kind, text in blocks:
        if lines and not (kind == previous and kind in GROUPED_BLOCKS):
            lines.append("")
        lines.append(text)
        previous = kind
    return "\n".join(lines)


def _collapse_lines(text: str) -> str:
    lines = (" ".join(line.split()) for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


def _html_text(element: Tag, *, skip: tuple[str, ...] = ()) -> str:
    parts: list[str] = []
    for child in element.children:
        if isinstance(child, Tag):
            if child.name in skip:
                continue
            parts.append(child.get_text(" "))
        elif isinstance(child, NavigableString):
            parts.append(str(child))
    return _collapse_lines(" ".join(parts))


def html_to_markdown(text: str) -> str:
    soup = BeautifulSoup(text, "lxml")
    for tag in soup.find_all(["strong", "b"]):
        tag.replace_with(NavigableString(f"**{tag.get_text(strip=True)}**"))
    for tag in soup.find_all("br"):
        marker = "<br>" if tag.find_parent(["td", "th"]) else "\n"
        tag.replace_with(NavigableString(marker))

    blocks: list[tuple[str, str]] = []
    current_table: Tag | None = None
    for element in soup.find_all(HTML_BLOCKS):
        if element.name == "tr":
            table = element.find_parent("table")
            cells = [
                _collapse_lines(cell.get_text(" ")).replace("\n", "<br>")
                for cell in element.find_all(["td", "th"], recursive=False)
            ]
            if not cells:
                continue
            blocks.append(("tr", table_row(cells)))
            if table is not current_table:
                current_table = table
                blocks.append(("tr", separator_row(len(cells))))
            continue
        if element.find_parent(["table"]):
            continue
        if element.name == "li":
            content = _html_text(element, skip=("ul", "ol"))
            depth = max(len(element.find_parents(["ul", "ol"])) - 1, 0)
            if content:
                blocks.append(("li", "  " * depth + "- " + content))
            continue
        if element.find_parent("li"):
            continue
        content = _html_text(element)
        if not content:
            continue
        if element.name in HTML_HEADINGS:
            level = int(element.name[1])
            blocks.append(("h", "#" * level + " " + " ".join(content.split())))
        else:
            blocks.append(("p", content))

    if not blocks:
        return _collapse_lines(soup.get_text("\n"))
    return join_blocks(blocks)


def _docx_runs_text(paragraph: Paragraph) -> str:
    segments: list[tuple[bool, str]] = []
    for run in paragraph.runs:
        if not run.text:
            continue
        bold = bool(run.bold)
        if segments and segments[-1][0] == bold:
            segments[-1] = (bold, segments[-1][1] + run.text)
        else:
            segments.append((bold, run.text))
    if not segments:
        return paragraph.text.strip()
    parts: list[str] = []
    for bold, text in segments:
        core = text.strip()
        if bold and core:
            lead = text[: len(text) - len(text.lstrip())]
            trail = text[len(text.rstrip()):]
            parts.append(f"{lead}**{core}**{trail}")
        else:
            parts.append(text)
    return "".join(parts).strip()


def _docx_paragraph_block(paragraph: Paragraph) -> tuple[str, str] | None:
    style_name = paragraph.style.name if paragraph.style is not None else ""
    heading = DOCX_HEADING_RE.match(style_name or "")
    if heading or style_name == "Title":
        text = paragraph.text.strip()
        if not text:
            return None
        level = int(heading.group(1)) if heading else 1
        return "h", "#" * level + " " + text
    text = _docx_runs_text(paragraph)
    if not text:
        return None
    if (style_name or "").lower().startswith(DOCX_LIST_STYLES):
        return "li", "- " + text
    return "p", text


def _docx_table_blocks(table: Table) -> Iterator[tuple[str, str]]:
    for index, row in enumerate(table.rows):
        cells = [cell.text.strip().replace("\n", "<br>") for cell in row.cells]
        yield "tr", table_row(cells)
        if index == 0:
            yield "tr", separator_row(len(cells))


def docx_to_markdown(path: Path) -> str:
    document = Document(str(path))
    blocks: list[tuple[str, str]] = []
    for child in document.element.body.iterchildren():
        tag = child.tag.rsplit("}", 1)[-1]
        if tag == "p":
            block = _docx_paragraph_block(Paragraph(child, document))
            if block is not None:
                blocks.append(block)
        elif tag == "tbl":
            blocks.extend(_docx_table_blocks(Table(child, document)))
    return join_blocks(blocks)


def load_report_text(path: str | Path) -> str:
    """Read a report file and return its content as Markdown-like text."""

    report_path = Path(path)
    suffix = report_path.suffix.lower()
    if suffix in MARKDOWN_EXTENSIONS:
        return report_path.read_text(encoding="utf-8", errors="ignore")
    if suffix in HTML_EXTENSIONS:
        return html_to_markdown(report_path.read_text(encoding="utf-8", errors="ignore"))
    if suffix in DOCX_EXTENSIONS:
        return docx_to_markdown(report_path)
    raise ValueError(f"Unsupported report format: {report_path.name}")


def iter_supported_files(root: Path) -> Iterator[Path]:
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        if any(part == "_index" for part in path.parts):
            continue
        if path.suffix.lower() in SUPPORTED_EXTENSIONS:
            yield path


def scan_directory(
    target_dir: Path,
    base_path: Path,
    *,
    cache: ReportCache | None = None,
    settings: ParserSettings | None = None,
) -> tuple[list[ParsedReport], dict[str, FileScanResult]]:
    reports: list[ParsedReport] = []
    files: dict[str, FileScanResult] = {}
    for file_path in iter_supported_files(target_dir):
        rel_file = str(file_path.relative_to(base_path).as_posix())
        try:
            raw_bytes = file_path.read_bytes()
        except OSError as exc:  # pragma: no cover - disk errors
            logger.error("Failed to read %s: %s", file_path, exc)
            files[rel_file] = FileScanResult(
                file=rel_file, sha256="", mtime=0, chars=0, status="error", error=str(exc)
            )
            continue
        file_sha = sha256(raw_bytes).hexdigest()
        mtime = int(file_path.stat().st_mtime)
        try:
            text = load_report_text(file_path)
        except Exception as exc:
            logger.warning("Failed to load %s: %s", file_path, exc)
            files[rel_file] = FileScanResult(
                file=rel_file, sha256=file_sha, mtime=mtime, chars=0, status="error", error=str(exc)
            )
            continue
        record = parse_report(text, cache=cache, settings=settings)
        reports.append(ParsedReport(rel_file, file_sha, record))
        files[rel_file] = FileScanResult(
            file=rel_file, sha256=file_sha, mtime=mtime, chars=len(text), status="ok"
        )
        logger.info("Parsed %s (%d characters)", rel_file, len(text))
    return reports, files
