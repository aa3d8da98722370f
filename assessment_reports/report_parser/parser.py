"""Top-level entry point turning report text into a ReportRecord."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import TypeVar

from .cache import DEFAULT_CACHE, ReportCache
from .config import ParserSettings, load_settings
from .defaults import (
    default_case_info,
    default_challenges,
    default_documents,
    default_overview,
    default_report,
    default_strategies,
    default_strengths,
)
from .extractors import (
    extract_case_info,
    extract_challenges,
    extract_documents,
    extract_overview,
    extract_strategies,
    extract_strengths,
)
from .findings import parse_validated_findings
from .models import CaseInfo, ReportRecord, ValidatedFindings
from .normalize import normalize_body
from .sections import split_sections

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _guarded(name: str, extract: Callable[[], T], fallback: Callable[[], T]) -> T:
    try:
        return extract()
    except Exception:
        logger.exception("Extractor %s failed; using default", name)
        return fallback()


def _apply_overrides(
    info: CaseInfo, student_name: str | None, report_author: str | None
) -> CaseInfo:
    if isinstance(student_name, str) and student_name.strip():
        info = replace(info, student_name=student_name.strip())
    if isinstance(report_author, str) and report_author.strip():
        info = replace(info, tutor=report_author.strip())
    return info


def _cache_key(
    text: str,
    document_names: list[str] | None,
    student_name: str | None,
    report_author: str | None,
) -> str:
    if not (document_names or student_name or report_author):
        return text
    # Overrides are part of the key.
    extras = "\x00".join([",".join(document_names or []), student_name or "", report_author or ""])
    return f"{text}\x00{extras}"


def parse_report(
    text: object,
    document_names: Iterable[str] | None = None,
    student_name: str | None = None,
    report_author: str | None = None,
    *,
    cache: ReportCache | None = None,
    settings: ParserSettings | None = None,
) -> ReportRecord:
    """Parse AI-generated report text into a fully populated record.

    Never raises: blank or non-text input yields ``default_report()`` and any
    field that cannot be extracted falls back to its default value.
    """

    if not isinstance(text, str) or not text.strip():
        logger.warning("Empty or non-text report input; returning default record")
        return default_report()

    settings = settings or load_settings()
    cache = DEFAULT_CACHE if cache is None else cache
    if isinstance(document_names, str):
        document_names = [document_names]
    names = [name for name in document_names or () if isinstance(name, str)]

    limit = settings.max_input_chars
    if limit and len(text) > limit:
        logger.warning("Report input truncated from %d to %d characters", len(text), limit)
        text = text[:limit]

    key = _cache_key(text, names, student_name, report_author)
    cached = cache.get(key)
    if cached is not None:
        return cached

    body = normalize_body(text)
    sections = split_sections(body)
    validated = _guarded("validated_findings", lambda: parse_validated_findings(text), ValidatedFindings)

    record = ReportRecord(
        case_info=_guarded(
            "case_info",
            lambda: extract_case_info(text, student_name, report_author),
            lambda: _apply_overrides(default_case_info(), student_name, report_author),
        ),
        documents=_guarded("documents", lambda: extract_documents(sections, names), default_documents),
        overview=_guarded("overview", lambda: extract_overview(sections), default_overview),
        strategies=tuple(validated.strategies)
        if validated.found and validated.strategies
        else _guarded("strategies", lambda: extract_strategies(sections), default_strategies),
        strengths=tuple(validated.strengths)
        if validated.strengths
        else _guarded("strengths", lambda: extract_strengths(sections), default_strengths),
        challenges=tuple(validated.challenges)
        if validated.challenges
        else _guarded("challenges", lambda: extract_challenges(sections), default_challenges),
    )
    cache.put(key, record)
    logger.debug(
        "Parsed report: %d sections, %d strengths, %d challenges, %d strategies",
        len(sections),
        len(record.strengths),
        len(record.challenges),
        len(record.strategies),
    )
    return record
