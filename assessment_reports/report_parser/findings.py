"""Extraction of the field-labelled "Validated Findings" region."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .classify import FindingKind, classify_finding
from .defaults import to_challenge, to_strength
from .models import ActionItem, ActionKind, Finding, Strategy, ValidatedFindings
from .normalize import clean_text

logger = logging.getLogger(__name__)

REGION_HEADING_RE = re.compile(
    r"^#{2,3}[ \t]+(?:\*\*)?Validated Findings\b[^\n]*$", re.IGNORECASE | re.MULTILINE
)
REGION_END_RE = re.compile(r"^#{1,3}[ \t]", re.MULTILINE)
BLOCK_SPLIT_RE = re.compile(r"(?=^####[ \t])", re.MULTILINE)
BLOCK_TITLE_RE = re.compile(r"^####[ \t]+(?:\d+[.)][ \t]*)?(?P<title>[^\n]+?)[ \t#]*$", re.MULTILINE)

FIELD_LABELS = {
    "evidence": "Evidence",
    "teacher": "Teacher-Friendly Description",
    "parent": "Parent-Friendly Explanation",
    "observable": "Observable Behaviors",
    "primary": "Primary Support Strategy",
    "secondary": "Secondary Support Strategy",
    "caution": "Implementation Caution",
}


def _field_pattern(label: str) -> re.Pattern[str]:
    # The value continues over following lines until a blank line, heading or bold label.
    return re.compile(
        rf"\*\*{re.escape(label)}[ \t]*(?::\*\*|\*\*[ \t]*:)[ \t]*"
        r"(?P<value>[^\n]*(?:\n(?![ \t]*(?:\*\*|#|$))[^\n]+)*)",
        re.IGNORECASE | re.MULTILINE,
    )


FIELD_PATTERNS = {key: _field_pattern(label) for key, label in FIELD_LABELS.items()}


@dataclass(frozen=True)
class FindingBlock:
    """Labelled fields read from one ``####`` finding."""

    title: str
    evidence: str = ""
    teacher: str = ""
    parent: str = ""
    observable: str = ""
    primary: str = ""
    secondary: str = ""
    caution: str = ""

    def observations(self) -> tuple[str, ...]:
        values = [self.observable or self.teacher]
        if self.evidence:
            values.append(f"Evidence: {self.evidence}")
        return tuple(value for value in values if value)

    def actions(self) -> tuple[ActionItem, ...]:
        actions = [ActionItem(ActionKind.DO, value) for value in (self.primary, self.secondary) if value]
        if self.caution:
            actions.append(ActionItem(ActionKind.DONT, self.caution))
        return tuple(actions)


def find_region(text: str) -> str | None:
    """Return the text under the Validated Findings heading, or ``None``."""

    heading = REGION_HEADING_RE.search(text)
    if heading is None:
        return None
    end = REGION_END_RE.search(text, heading.end())
    return text[heading.end(): end.start() if end else len(text)]


def extract_field(block: str, key: str) -> str:
    match = FIELD_PATTERNS[key].search(block)
    if not match:
        return ""
    return clean_text(match.group("value"))


def parse_block(block: str) -> FindingBlock | None:
    title_match = BLOCK_TITLE_RE.match(block)
    if not title_match:
        return None
    title = clean_text(title_match.group("title"))
    if not title:
        return None
    fields = {key: extract_field(block, key) for key in FIELD_PATTERNS}
    return FindingBlock(title=title, **fields)


def parse_validated_findings(text: str) -> ValidatedFindings:
    result = ValidatedFindings()
    region = find_region(text)
    if region is None:
        logger.debug("No Validated Findings region")
        return result

    seen_supports: set[str] = set()
    for chunk in BLOCK_SPLIT_RE.split(region):
        chunk = chunk.strip()
        if not chunk.startswith("####"):
            continue
        try:
            block = parse_block(chunk)
            if block is None:
                continue
            if block.primary and block.primary not in seen_supports:
                seen_supports.add(block.primary)
                result.strategies.append(Strategy(block.title, block.primary))
            observations = block.observations()
            if not observations:
                logger.debug("Skipped finding %r without observations", block.title)
                continue
            finding = Finding(block.title, observations, block.actions())
            if classify_finding(block.title, block.teacher) is FindingKind.STRENGTH:
                result.strengths.append(to_strength(finding, len(result.strengths)))
            else:
                result.challenges.append(to_challenge(finding))
        except Exception:  # pragma: no cover
            logger.exception("Failed to parse validated finding block %r", chunk[:80])

    logger.info(
        "Validated findings: %d strengths, %d challenges, %d strategies",
        len(result.strengths),
        len(result.challenges),
        len(result.strategies),
    )
    return result
