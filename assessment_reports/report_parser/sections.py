"""Split a normalized report body into titled sections."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from .models import Section
from .normalize import KNOWN_SECTION_NAMES, preview

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "Report Content"
EMPTY_CONTENT = "No content available"

TITLE_PATTERNS = (
    re.compile(r"^#{1,4}\s*(.+?)[ \t#]*(?:\n|$)"),
    re.compile(r"^\*\*(.+?)\*\*:?"),
    re.compile(r"^(.+?)(?:\n|$)"),
)


class ProbeStatus(str, Enum):
    MATCHED = "matched"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeResult:
    status: ProbeStatus
    probe: str
    parts: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class SplitProbe:
    """A precompiled split strategy; ``pattern`` is ``None`` when it failed to compile."""

    name: str
    pattern: re.Pattern[str] | None
    compile_error: str | None = None

    def run(self, body: str) -> ProbeResult:
        if self.pattern is None:
            return ProbeResult(ProbeStatus.ERROR, self.name, error=self.compile_error)
        try:
            if not self.pattern.search(body):
                return ProbeResult(ProbeStatus.NOT_FOUND, self.name)
            parts = tuple(self.pattern.split(body))
        except (re.error, RecursionError, TypeError) as exc:
            return ProbeResult(ProbeStatus.ERROR, self.name, error=str(exc))
        return ProbeResult(ProbeStatus.MATCHED, self.name, parts=parts)


def build_probe(name: str, source: str, flags: int = re.MULTILINE) -> SplitProbe:
    try:
        return SplitProbe(name, re.compile(source, flags))
    except re.error as exc:
        logger.warning("Split probe %r failed to compile: %s", name, exc)
        return SplitProbe(name, None, compile_error=str(exc))


SPLIT_PROBES = (
    build_probe("h2", r"(?=^##[ \t])"),
    build_probe("h3", r"(?=^###[ \t])"),
    build_probe("bold-section", r"(?=\*\*Section)", flags=0),
    *(
        build_probe(f"name:{name}", rf"(?=^.*{re.escape(name)}.*$)")
        for name in KNOWN_SECTION_NAMES
    ),
)


def run_probes(body: str, probes: tuple[SplitProbe, ...] = SPLIT_PROBES) -> ProbeResult:
    """Evaluate probes in order and return the first match."""

    for probe in probes:
        result = probe.run(body)
        if result.status is ProbeStatus.MATCHED:
            logger.debug("Split strategy %s produced %d parts", probe.name, len(result.parts))
            return result
        if result.status is ProbeStatus.ERROR:
            logger.warning("Split probe %s failed: %s", probe.name, result.error)
    return ProbeResult(ProbeStatus.NOT_FOUND, "whole-body", parts=(body,))


def section_from_chunk(chunk: str, index: int) -> Section | None:
    trimmed = chunk.strip()
    if not trimmed:
        return None
    for pattern in TITLE_PATTERNS:
        match = pattern.match(trimmed)
        if match and match.group(1).strip():
            title = match.group(1).strip()
            content = trimmed[match.end():].strip()
            return Section(title=title, content=content)
    return Section(title=f"Section {index + 1}", content=trimmed)


def fallback_section(body: str) -> Section:
    content = preview(body) if body.strip() else EMPTY_CONTENT
    return Section(title=FALLBACK_TITLE, content=content)


def split_sections(
    body: str, probes: tuple[SplitProbe, ...] = SPLIT_PROBES
) -> list[Section]:
    """Segment ``body`` into an ordered, non-empty list of sections."""

    if not body or not body.strip():
        logger.warning("Empty report body; using default section")
        return [fallback_section("")]
    try:
        result = run_probes(body, probes)
        sections: list[Section] = []
        for index, chunk in enumerate(result.parts):
            section = section_from_chunk(chunk, index)
            if section is not None:
                sections.append(section)
    except Exception:  # pragma: no cover
        logger.exception("Section splitting failed; using fallback section")
        return [fallback_section(body)]
    if not sections:
        logger.warning("No sections found; using fallback section")
        return [fallback_section(body)]
    logger.debug("Parsed %d sections: %s", len(sections), [section.title for section in sections])
    return sections
