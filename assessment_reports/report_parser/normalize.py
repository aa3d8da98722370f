"""Text normalization helpers shared by the splitter and extractors."""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import UTC, date, datetime

logger = logging.getLogger(__name__)

KNOWN_SECTION_NAMES = (
    "Student Overview",
    "Key Support Strategies",
    "Section 1: Strengths",
    "Section 2: Challenges",
    "Section 3: Accommodations",
    "Strengths",
    "Challenges",
    "Areas of Need",
    "Support Strategies",
)

LEADING_TITLE_RE = re.compile(r"\A\s*#{1,2}(?!#)[ \t]+(?P<title>[^\n]*?)[ \t]*(?:\n+|\Z)")
BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
ITALIC_RE = re.compile(r"\*(.*?)\*")
BULLET_RE = re.compile(r"^\s*(?:[-*•+]|\d+[.)])\s+")
WHITESPACE_RE = re.compile(r"\s+")
EMPHASIS_EDGE_RE = re.compile(r"^(?:\*\*|__|\*|_)+|(?:\*\*|__|\*|_)+$")

PREVIEW_LENGTH = 500


def now_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat()


def today_label(today: date | None = None) -> str:
    current = today or date.today()
    return f"{current.month}/{current.day}/{current.year}"


def default_school_year(today: date | None = None) -> str:
    year = (today or date.today()).year
    return f"{year}-{year + 1}"


def names_known_section(heading: str) -> bool:
    lowered = heading.lower()
    return any(name.lower() in lowered for name in KNOWN_SECTION_NAMES)


def strip_title(text: str) -> str:
    """Drop a leading ``#``/``##`` document title line.

    A leading heading that names a report section is part of the body and is kept.
    """

    match = LEADING_TITLE_RE.match(text)
    if not match:
        return text
    title = match.group("title").strip()
    if names_known_section(title):
        logger.debug("Leading heading %r names a section; keeping it", title)
        return text
    logger.debug("Removed document title %r", title)
    return text[match.end():]


def normalize_body(text: str) -> str:
    return strip_title(text).strip()


def strip_emphasis(value: str) -> str:
    return EMPHASIS_EDGE_RE.sub("", value.strip()).strip()


def is_bullet(line: str) -> bool:
    return bool(BULLET_RE.match(line))


def strip_bullet(line: str) -> str:
    return BULLET_RE.sub("", line, count=1).strip()


def clean_text(text: str) -> str:
    cleaned = BOLD_RE.sub(r"\1", text)
    cleaned = ITALIC_RE.sub(r"\1", cleaned)
    cleaned = BULLET_RE.sub("", cleaned, count=1)
    cleaned = WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()


def limit_length(value: str, max_length: int = 30) -> str:
    if len(value) <= max_length:
        return value
    return value[:max_length] + "..."


def preview(text: str, max_length: int = PREVIEW_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3].rstrip() + "..."


def dedupe(values: Iterable[str]) -> list[str]:
    seen = set()
    result: list[str] = []
    for value in values:
        cleaned = value.strip()
        if not cleaned:
            continue
        if cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


def split_sentences(text: str) -> list[str]:
    return [sentence.strip() for sentence in re.split(r"[.!?]+", text) if sentence.strip()]


def split_paragraphs(text: str) -> list[str]:
    return [paragraph.strip() for paragraph in re.split(r"\n\s*\n", text) if paragraph.strip()]
