from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from assessment_reports.report_parser.cache import ReportCache

SAMPLE_DIR = Path(__file__).resolve().parents[1] / "reports" / "_samples"


@pytest.fixture()
def cache() -> ReportCache:
    return ReportCache()


@pytest.fixture()
def sample_text() -> str:
    return (SAMPLE_DIR / "sarah_johnson_support_report.md").read_text(encoding="utf-8")


@pytest.fixture()
def sandbox(tmp_path: Path) -> Path:
    target = tmp_path / "reports"
    target.mkdir(parents=True)
    for sample_file in SAMPLE_DIR.glob("*.md"):
        shutil.copy(sample_file, target / sample_file.name)
    return tmp_path
