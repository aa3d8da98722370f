"""Field extractors that turn report sections into record components."""
from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass

from .defaults import (
    DEFAULT_AUTHOR,
    DEFAULT_GRADE,
    DEFAULT_STUDENT_NAME,
    DOCUMENT_AUTHOR,
    OVERVIEW_AT_A_GLANCE,
    SUMMARY_AT_A_GLANCE,
    THEMES,
    default_challenges,
    default_documents,
    default_overview,
    default_strategies,
    default_strengths,
    default_thematic_sections,
    to_challenge,
    to_strength,
)
from .models import (
    ActionItem,
    ActionKind,
    CaseInfo,
    Challenge,
    Document,
    Finding,
    Overview,
    Section,
    Strategy,
    Strength,
    ThematicSection,
)
from .normalize import (
    clean_text,
    default_school_year,
    is_bullet,
    limit_length,
    split_paragraphs,
    split_sentences,
    strip_bullet,
    strip_emphasis,
    today_label,
)
from .tables import DO_GLYPHS, parse_actions, parse_table

logger = logging.getLogger(__name__)

UNSAFE_CHARS_RE = re.compile(r"[<>{}]")
DIGIT_RE = re.compile(r"\d")

NAME_STOPWORDS = {
    "a",
    "an",
    "each",
    "every",
    "he",
    "her",
    "his",
    "it",
    "she",
    "student",
    "that",
    "the",
    "their",
    "there",
    "they",
    "this",
}


@dataclass(frozen=True)
class FieldProbe:
    """A compiled pattern whose ``value`` group yields a candidate field value."""

    name: str
    pattern: re.Pattern[str]
    template: str = "{value}"

    def candidates(self, text: str) -> Iterator[str]:
        for match in self.pattern.finditer(text):
            value = strip_emphasis(match.group("value"))
            if value:
                yield self.template.format(value=value)


def label_probe(label: str) -> FieldProbe:
    """Match ``Label: value`` at the start of a line, tolerating bullets and bold."""

    pattern = re.compile(
        rf"^[ \t]*(?:[-*•][ \t]+)?(?:\*\*|__)?{re.escape(label)}"
        r"(?:[ \t]*(?:\*\*|__))?[ \t]*:(?:[ \t]*(?:\*\*|__))?[ \t]*(?P<value>[^\n]*\S)",
        re.IGNORECASE | re.MULTILINE,
    )
    return FieldProbe(f"label:{label}", pattern)


def context_probe(name: str, source: str, template: str = "{value}", flags: int = 0) -> FieldProbe:
    return FieldProbe(f"context:{name}", re.compile(source, flags), template)


NAME_PROBES = (
    label_probe("Student Name"),
    label_probe("Name"),
    *(
        context_probe(
            verb,
            rf"^(?P<value>[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*)[ \t]+{verb}\b",
            flags=re.MULTILINE,
        )
        for verb in ("is a", "enjoys", "works")
    ),
)

GRADE_PROBES = (
    label_probe("Grade"),
    label_probe("Grade Level"),
    label_probe("Student Grade"),
    context_probe("ordinal", r"\b(?P<value>\d{1,2}(?:st|nd|rd|th))\s+grade\b", "{value} Grade", re.IGNORECASE),
    context_probe("numbered", r"\bgrade\s+(?P<value>\d{1,2})\b", "Grade {value}", re.IGNORECASE),
)

DATE_PROBES = (
    label_probe("Analysis Date"),
    label_probe("Report Date"),
    label_probe("Date"),
    context_probe("numeric", r"\b(?P<value>\d{1,2}/\d{1,2}/\d{4})\b"),
    context_probe("long", r"\b(?P<value>[A-Z][a-z]+\s+\d{1,2},\s+\d{4})\b"),
)

AUTHOR_PROBES = (
    label_probe("Author"),
    label_probe("Report Author"),
    label_probe("Prepared By"),
    label_probe("Tutor"),
    label_probe("Case Manager"),
    label_probe("Teacher"),
)

SCHOOL_YEAR_PROBES = (
    label_probe("School Year"),
    context_probe("range", r"\b(?P<value>\d{4}\s*[-–]\s*\d{4})\b"),
)


def _valid_text(value: str, max_length: int) -> bool:
    return 0 < len(value) <= max_length and not UNSAFE_CHARS_RE.search(value)


def _valid_name(value: str) -> bool:
    if not _valid_text(value, 100):
        return False
    return value.split()[0].lower() not in NAME_STOPWORDS


def _valid_grade(value: str) -> bool:
    return _valid_text(value, 50)


def _valid_date(value: str) -> bool:
    return _valid_text(value, 50) and bool(DIGIT_RE.search(value))


def _valid_author(value: str) -> bool:
    return _valid_text(value, 100)


def first_match(
    text: str, probes: Sequence[FieldProbe], is_valid: Callable[[str], bool]
) -> str | None:
    """Return the first candidate, in probe order, that passes ``is_valid``."""

    for probe in probes:
        for candidate in probe.candidates(text):
            if is_valid(candidate):
                logger.debug("Probe %s matched %r", probe.name, candidate)
                return candidate
            logger.debug("Probe %s rejected %r", probe.name, candidate)
    return None


def _override(value: str | None) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def extract_case_info(
    text: str,
    student_name: str | None = None,
    report_author: str | None = None,
) -> CaseInfo:
    name = _override(student_name) or first_match(text, NAME_PROBES, _valid_name)
    author = _override(report_author) or first_match(text, AUTHOR_PROBES, _valid_author)
    grade = first_match(text, GRADE_PROBES, _valid_grade)
    created = first_match(text, DATE_PROBES, _valid_date) or today_label()
    school_year = first_match(text, SCHOOL_YEAR_PROBES, _valid_date) or default_school_year()
    info = CaseInfo(
        student_name=name or DEFAULT_STUDENT_NAME,
        grade=grade or DEFAULT_GRADE,
        school_year=school_year,
        tutor=author or DEFAULT_AUTHOR,
        date_created=created,
        last_updated=created,
    )
    logger.debug("Extracted case info: %s", info)
    return info


def find_section(
    sections: Iterable[Section],
    title_terms: Sequence[str] = (),
    content_terms: Sequence[str] = (),
) -> Section | None:
    """First section whose title (or, failing that, content) mentions a term."""

    for section in sections:
        title = section.title.lower()
        content = section.content.lower()
        if any(term in title for term in title_terms):
            return section
        if any(term in content for term in content_terms):
            return section
    return None


def extract_documents(
    sections: Sequence[Section], document_names: Iterable[str] | None = None
) -> tuple[Document, ...]:
    today = today_label()
    names = [name.strip() for name in document_names or () if isinstance(name, str) and name.strip()]
    if names:
        return tuple(Document(name, DOCUMENT_AUTHOR, today) for name in names)

    section = find_section(sections, title_terms=("document",)) or find_section(
        sections, content_terms=("document",)
    )
    if section is None:
        logger.debug("No documents section found; using default document")
        return default_documents()

    documents: list[Document] = []
    for line in section.content.splitlines():
        stripped = line.strip()
        if not is_bullet(stripped):
            continue
        title = clean_text(strip_bullet(stripped))
        if title and len(title) <= 200 and not title.startswith("#"):
            documents.append(Document(title, DOCUMENT_AUTHOR, today))
    if not documents:
        logger.warning("Documents section %r listed no documents; using default", section.title)
        return default_documents()
    return tuple(documents)


OVERVIEW_TITLE_TERMS = ("overview", "student support report", "executive summary", "at a glance")
SUMMARY_TITLE_TERMS = ("executive", "summary")


def thematic_content(content: str, keywords: Sequence[str]) -> str | None:
    relevant = [
        sentence
        for sentence in split_sentences(content)
        if any(keyword in sentence.lower() for keyword in keywords)
    ]
    if not relevant:
        return None
    return clean_text(". ".join(relevant)) + "."


def extract_overview(sections: Sequence[Section]) -> Overview:
    section = find_section(
        sections, title_terms=OVERVIEW_TITLE_TERMS, content_terms=("at a glance",)
    )
    if section is None:
        summary = find_section(sections, title_terms=SUMMARY_TITLE_TERMS)
        if summary is None:
            logger.debug("No overview or summary section; using default overview")
            return default_overview()
        at_a_glance = clean_text(summary.content) or SUMMARY_AT_A_GLANCE
        return Overview(at_a_glance, default_thematic_sections())

    at_a_glance = next(
        (clean_text(paragraph) for paragraph in split_paragraphs(section.content) if len(paragraph) > 50),
        OVERVIEW_AT_A_GLANCE,
    )
    themes = tuple(
        ThematicSection(
            title=theme.title,
            color_tag=theme.color,
            bg_color=theme.bg_color,
            icon=theme.icon,
            content=thematic_content(section.content, theme.keywords) or theme.default,
        )
        for theme in THEMES
    )
    return Overview(at_a_glance or OVERVIEW_AT_A_GLANCE, themes)


STRATEGY_SECTION_TERMS = ("strateg", "support", "key", "implementation recommendations")
STRATEGY_LABELS = (
    ("Use Strengths", r"Use strengths"),
    ("Support Challenges", r"Support challenges"),
    ("Small Changes", r"Small changes"),
    ("Don't Underestimate", r"Don['’]t underestimate"),
)
STRATEGY_LABEL_PATTERNS = tuple(
    (name, re.compile(rf"{label}\s*(?:\*\*)?\s*:\s*(?:\*\*)?\s*(?P<value>[^\n]+)", re.IGNORECASE))
    for name, label in STRATEGY_LABELS
)
TOP_LEVEL_BULLET_RE = re.compile(r"^[-•*][ \t]+(?P<text>.+)$")


def _strategy_section(sections: Sequence[Section]) -> Section | None:
    for term in STRATEGY_SECTION_TERMS:
        section = find_section(sections, title_terms=(term,))
        if section is not None:
            return section
    return None


def extract_strategies(sections: Sequence[Section]) -> tuple[Strategy, ...]:
    section = _strategy_section(sections)
    if section is None:
        logger.debug("No strategies section found; using default strategies")
        return default_strategies()

    strategies: list[Strategy] = []
    for name, pattern in STRATEGY_LABEL_PATTERNS:
        match = pattern.search(section.content)
        if match:
            description = clean_text(match.group("value"))
            if description:
                strategies.append(Strategy(name, description))

    if not strategies:
        for line in section.content.splitlines():
            match = TOP_LEVEL_BULLET_RE.match(line.rstrip())
            if not match:
                continue
            text = clean_text(match.group("text"))
            if len(text) > 10:
                strategies.append(Strategy(limit_length(text, 30), text))

    if not strategies:
        logger.warning("Strategies section %r yielded nothing; using defaults", section.title)
        return default_strategies()
    return tuple(strategies)


BLOCK_HEADING_RE = re.compile(r"^#{3,4}[ \t]+(?P<title>.+?)[ \t#]*$")
BOLD_TITLE_RE = re.compile(r"^\*\*(?P<title>[^*]+)\*\*:?$")
LABEL_RE = re.compile(
    r"^(?:#{1,6}[ \t]*)?(?:\*\*|__)?(?P<label>what you see|what not to do|what to do)"
    r"(?:\*\*|__)?[ \t]*(?P<colon>:)?[ \t]*(?:\*\*|__)?[ \t]*(?P<rest>.*)$",
    re.IGNORECASE,
)
ANY_HEADING_RE = re.compile(r"^#{1,6}[ \t]")
ACTION_LINE_RE = re.compile(
    r"^(?:[✔✓✘✗]|[-*•+][ \t]|\d+[.)][ \t]|do\b|don['’]t\b|do not\b)", re.IGNORECASE
)

MIN_BLOCK_ACTION_LENGTH = 6
MIN_BLOCK_OBSERVATION_LENGTH = 6
MIN_SENTENCE_LENGTH = 21
MAX_SENTENCE_OBSERVATIONS = 3


def _label(line: str) -> tuple[str, str] | None:
    match = LABEL_RE.match(line)
    if not match:
        return None
    rest = match.group("rest").strip()
    if rest and not match.group("colon"):
        return None
    return match.group("label").lower(), rest


def _block_title(line: str) -> str | None:
    match = BLOCK_HEADING_RE.match(line) or BOLD_TITLE_RE.match(line)
    if match is None:
        return None
    return clean_text(match.group("title")) or None


def split_blocks(content: str) -> list[tuple[str, list[str]]]:
    """Split free text into ``(title, lines)`` item blocks."""

    blocks: list[tuple[str, list[str]]] = []
    title: str | None = None
    lines: list[str] = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if _label(line) is None:
            heading = _block_title(line)
            if heading is not None:
                if title is not None:
                    blocks.append((title, lines))
                title, lines = heading, []
                continue
        if title is not None:
            lines.append(line)
    if title is not None:
        blocks.append((title, lines))
    return blocks


def _block_actions(line: str, *, avoid: bool) -> list[ActionItem]:
    actions = parse_actions(line, min_length=MIN_BLOCK_ACTION_LENGTH)
    if not avoid or line.startswith(tuple(DO_GLYPHS)):
        return actions
    return [ActionItem(ActionKind.DONT, action.text) for action in actions]


def parse_block(title: str, lines: Sequence[str]) -> Finding:
    observations: list[str] = []
    actions: list[ActionItem] = []
    narrative: list[str] = []
    region: str | None = None
    for line in lines:
        label = _label(line)
        if label is not None:
            region, line = label
            if not line:
                continue
        elif ANY_HEADING_RE.match(line):
            region = None
            continue
        if region == "what you see":
            if is_bullet(line):
                observation = clean_text(strip_bullet(line))
                if len(observation) >= MIN_BLOCK_OBSERVATION_LENGTH:
                    observations.append(observation)
            else:
                narrative.append(line)
        elif region in ("what to do", "what not to do"):
            if ACTION_LINE_RE.match(line):
                actions.extend(_block_actions(line, avoid=region == "what not to do"))
        else:
            narrative.append(line)

    if not observations:
        for sentence in split_sentences(" ".join(narrative)):
            if len(sentence) >= MIN_SENTENCE_LENGTH and "what to do" not in sentence.lower():
                observations.append(clean_text(sentence))
                if len(observations) >= MAX_SENTENCE_OBSERVATIONS:
                    break
    return Finding(title, tuple(observations), tuple(actions))


def parse_findings(content: str) -> list[Finding]:
    """Parse a strengths/challenges section body, table first, then item blocks."""

    findings = parse_table(content)
    if findings:
        logger.debug("Parsed %d findings from table", len(findings))
        return findings
    findings = [parse_block(title, lines) for title, lines in split_blocks(content)]
    findings = [finding for finding in findings if finding.has_content]
    logger.debug("Parsed %d findings from item blocks", len(findings))
    return findings


STRENGTH_TITLE_TERMS = ("strength", "section 1")
CHALLENGE_TITLE_TERMS = ("challenge", "section 2", "areas of need")


def extract_strengths(sections: Sequence[Section]) -> tuple[Strength, ...]:
    section = find_section(sections, title_terms=STRENGTH_TITLE_TERMS)
    if section is None:
        logger.debug("No strengths section found; using default strengths")
        return default_strengths()
    findings = parse_findings(section.content)
    if not findings:
        logger.warning("Strengths section %r yielded nothing; using defaults", section.title)
        return default_strengths()
    return tuple(to_strength(finding, index) for index, finding in enumerate(findings))


def extract_challenges(sections: Sequence[Section]) -> tuple[Challenge, ...]:
    section = find_section(sections, title_terms=CHALLENGE_TITLE_TERMS)
    if section is None:
        logger.debug("No challenges section found; using default challenges")
        return default_challenges()
    findings = parse_findings(section.content)
    if not findings:
        logger.warning("Challenges section %r yielded nothing; using defaults", section.title)
        return default_challenges()
    return tuple(to_challenge(finding) for finding in findings)
