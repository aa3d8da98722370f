"""Assessment report parser package."""
from __future__ import annotations

from pathlib import Path

from . import (
    cache,
    classify,
    config,
    defaults,
    extractors,
    findings,
    loader,
    normalize,
    parser,
    renderer,
    sections,
    tables,
)
from .cache import ReportCache
from .config import ParserSettings, load_settings
from .defaults import default_report
from .models import ReportRecord
from .parser import parse_report

__all__ = [
    "cache",
    "classify",
    "config",
    "defaults",
    "extractors",
    "findings",
    "loader",
    "normalize",
    "parser",
    "renderer",
    "sections",
    "tables",
    "ParserSettings",
    "ReportCache",
    "ReportRecord",
    "default_report",
    "load_settings",
    "parse_report",
    "parse_report_file",
]


def parse_report_file(path: Path, **kwargs: object) -> ReportRecord:
    """Convenience wrapper that loads ``path`` and parses its text."""
    from .loader import load_report_text

    return parse_report(load_report_text(path), **kwargs)  # type: ignore[arg-type]
