"""Fallback values that keep every parsed record renderable."""
from __future__ import annotations

from dataclasses import dataclass

from .models import (
    ActionItem,
    ActionKind,
    CaseInfo,
    Challenge,
    Document,
    Finding,
    Overview,
    ReportRecord,
    Strategy,
    Strength,
    ThematicSection,
)
from .normalize import default_school_year, today_label

DEFAULT_STUDENT_NAME = "Student"
DEFAULT_GRADE = "Grade Not Specified"
DEFAULT_AUTHOR = "Not Specified"
DOCUMENT_AUTHOR = "Assessment Team"
DEFAULT_DOCUMENT_TITLE = "Assessment Report"

DEFAULT_AT_A_GLANCE = (
    "This student demonstrates unique learning strengths and needs that benefit "
    "from individualized support strategies."
)
OVERVIEW_AT_A_GLANCE = (
    "This student demonstrates unique strengths and learning needs that benefit "
    "from targeted support strategies."
)
SUMMARY_AT_A_GLANCE = (
    "This K-12 educational assessment analysis identifies student strengths and "
    "areas of need, providing evidence-based support recommendations for academic success."
)

# (color, background) pairs cycled by a strength's ordinal position.
STRENGTH_PALETTE = (
    ("#2563eb", "#dbeafe"),
    ("#059669", "#d1fae5"),
    ("#dc2626", "#fee2e2"),
    ("#7c3aed", "#ede9fe"),
    ("#ea580c", "#fed7aa"),
)


@dataclass(frozen=True)
class Theme:
    title: str
    icon: str
    color: str
    bg_color: str
    keywords: tuple[str, ...]
    default: str


THEMES = (
    Theme(
        title="Academic & Learning Profile",
        icon="BookOpen",
        color="#2563eb",
        bg_color="#dbeafe",
        keywords=("academic", "learning", "reading", "writing", "math"),
        default="Academic profile will be determined based on assessment findings.",
    ),
    Theme(
        title="Challenges & Diagnosis",
        icon="AlertTriangle",
        color="#dc2626",
        bg_color="#fee2e2",
        keywords=("challenge", "difficulty", "struggle", "need"),
        default="Learning challenges will be identified through comprehensive assessment.",
    ),
    Theme(
        title="Social-Emotional & Supports",
        icon="Heart",
        color="#059669",
        bg_color="#d1fae5",
        keywords=("social", "emotional", "friend", "anxiety", "support"),
        default="Social-emotional needs and support strategies will be developed.",
    ),
)

DEFAULT_STRATEGIES = (
    Strategy(
        "Use Student Strengths",
        "Leverage identified strengths to support learning across all areas",
    ),
    Strategy(
        "Provide Targeted Support",
        "Implement specific accommodations for identified challenge areas",
    ),
    Strategy(
        "Monitor Progress",
        "Regular check-ins to assess strategy effectiveness and adjust as needed",
    ),
)

STRENGTH_PLACEHOLDER_OBSERVATION = "Strengths will be identified through comprehensive assessment"
STRENGTH_PLACEHOLDER_ACTION = "Build on identified strengths to support learning"
CHALLENGE_PLACEHOLDER_OBSERVATION = (
    "Challenge areas will be identified through comprehensive assessment"
)
CHALLENGE_PLACEHOLDER_ACTION = "Provide targeted support for identified challenge areas"


def strength_colors(index: int) -> tuple[str, str]:
    return STRENGTH_PALETTE[index % len(STRENGTH_PALETTE)]


def default_case_info() -> CaseInfo:
    today = today_label()
    return CaseInfo(
        student_name=DEFAULT_STUDENT_NAME,
        grade=DEFAULT_GRADE,
        school_year=default_school_year(),
        tutor=DEFAULT_AUTHOR,
        date_created=today,
        last_updated=today,
    )


def default_documents() -> tuple[Document, ...]:
    return (Document(DEFAULT_DOCUMENT_TITLE, DOCUMENT_AUTHOR, today_label()),)


def default_thematic_sections() -> tuple[ThematicSection, ...]:
    return tuple(
        ThematicSection(
            title=theme.title,
            color_tag=theme.color,
            bg_color=theme.bg_color,
            icon=theme.icon,
            content=theme.default,
        )
        for theme in THEMES
    )


def default_overview() -> Overview:
    return Overview(DEFAULT_AT_A_GLANCE, default_thematic_sections())


def default_strategies() -> tuple[Strategy, ...]:
    return DEFAULT_STRATEGIES


def default_strengths() -> tuple[Strength, ...]:
    color, bg_color = strength_colors(0)
    return (
        Strength(
            title="Individual Strengths",
            color=color,
            bg_color=bg_color,
            observations=(STRENGTH_PLACEHOLDER_OBSERVATION,),
            actions=(ActionItem(ActionKind.DO, STRENGTH_PLACEHOLDER_ACTION),),
        ),
    )


def default_challenges() -> tuple[Challenge, ...]:
    return (
        Challenge(
            title="Areas for Growth",
            observations=(CHALLENGE_PLACEHOLDER_OBSERVATION,),
            actions=(ActionItem(ActionKind.DO, CHALLENGE_PLACEHOLDER_ACTION),),
        ),
    )


def to_strength(finding: Finding, index: int) -> Strength:
    color, bg_color = strength_colors(index)
    return Strength(
        title=finding.title,
        color=color,
        bg_color=bg_color,
        observations=finding.observations or (STRENGTH_PLACEHOLDER_OBSERVATION,),
        actions=finding.actions or (ActionItem(ActionKind.DO, STRENGTH_PLACEHOLDER_ACTION),),
    )


def to_challenge(finding: Finding) -> Challenge:
    return Challenge(
        title=finding.title,
        observations=finding.observations or (CHALLENGE_PLACEHOLDER_OBSERVATION,),
        actions=finding.actions or (ActionItem(ActionKind.DO, CHALLENGE_PLACEHOLDER_ACTION),),
    )


def default_report() -> ReportRecord:
    """Record returned for empty or non-text input."""

    return ReportRecord(
        case_info=default_case_info(),
        documents=default_documents(),
        overview=default_overview(),
        strategies=DEFAULT_STRATEGIES[:1],
        strengths=default_strengths(),
        challenges=default_challenges(),
    )
