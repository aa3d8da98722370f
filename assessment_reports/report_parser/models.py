"""Typed records produced by the report parser."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ActionKind(str, Enum):
    DO = "do"
    DONT = "dont"


@dataclass(frozen=True)
class Section:
    """A heading-delimited chunk of the report body."""

    title: str
    content: str


@dataclass(frozen=True)
class CaseInfo:
    student_name: str
    grade: str
    school_year: str
    tutor: str
    date_created: str
    last_updated: str

    def to_dict(self) -> dict[str, str]:
        return {
            "studentName": self.student_name,
            "grade": self.grade,
            "schoolYear": self.school_year,
            "tutor": self.tutor,
            "dateCreated": self.date_created,
            "lastUpdated": self.last_updated,
        }


@dataclass(frozen=True)
class ActionItem:
    kind: ActionKind
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class Finding:
    """A strength or challenge item before it has been classified."""

    title: str
    observations: tuple[str, ...] = ()
    actions: tuple[ActionItem, ...] = ()

    @property
    def has_content(self) -> bool:
        return bool(self.observations or self.actions)


@dataclass(frozen=True)
class Strength:
    title: str
    color: str
    bg_color: str
    observations: tuple[str, ...]
    actions: tuple[ActionItem, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "color": self.color,
            "bgColor": self.bg_color,
            "whatYouSee": list(self.observations),
            "whatToDo": [action.to_dict() for action in self.actions],
        }


@dataclass(frozen=True)
class Challenge:
    title: str
    observations: tuple[str, ...]
    actions: tuple[ActionItem, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "whatYouSee": list(self.observations),
            "whatToDo": [action.to_dict() for action in self.actions],
        }


@dataclass(frozen=True)
class Strategy:
    name: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "description": self.description}


@dataclass(frozen=True)
class ThematicSection:
    title: str
    color_tag: str
    bg_color: str
    icon: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "colorTag": self.color_tag,
            "bgColor": self.bg_color,
            "icon": self.icon,
            "content": self.content,
        }


@dataclass(frozen=True)
class Overview:
    at_a_glance: str
    sections: tuple[ThematicSection, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "atAGlance": self.at_a_glance,
            "sections": [section.to_dict() for section in self.sections],
        }


@dataclass(frozen=True)
class Document:
    title: str
    author: str
    date: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "author": self.author, "date": self.date}


@dataclass(frozen=True)
class ReportRecord:
    """Fully populated result of parsing one report."""

    case_info: CaseInfo
    documents: tuple[Document, ...]
    overview: Overview
    strategies: tuple[Strategy, ...]
    strengths: tuple[Strength, ...]
    challenges: tuple[Challenge, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "caseInfo": self.case_info.to_dict(),
            "documentsReviewed": [document.to_dict() for document in self.documents],
            "studentOverview": self.overview.to_dict(),
            "supportStrategies": [strategy.to_dict() for strategy in self.strategies],
            "studentStrengths": [strength.to_dict() for strength in self.strengths],
            "studentChallenges": [challenge.to_dict() for challenge in self.challenges],
        }


@dataclass
class ValidatedFindings:
    """Output of the validated-findings pass, before merging with legacy results."""

    strengths: list[Strength] = field(default_factory=list)
    challenges: list[Challenge] = field(default_factory=list)
    strategies: list[Strategy] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.strengths or self.challenges)
