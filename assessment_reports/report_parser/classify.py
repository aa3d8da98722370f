"""Keyword heuristic deciding whether a finding is a strength or a challenge."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

STRENGTH_KEYWORDS = (
    "strength",
    "strong",
    "excels",
    "excellent",
    "proficient",
    "skilled",
    "ability",
    "capable",
    "competent",
    "advanced",
    "superior",
    "effective",
    "successful",
    "good at",
    "talent",
    "gifted",
)

CHALLENGE_KEYWORDS = (
    "challenge",
    "difficulty",
    "struggle",
    "weakness",
    "deficit",
    "impairment",
    "delay",
    "below",
    "poor",
    "limited",
    "needs support",
    "requires",
    "area of need",
    "concern",
)


class FindingKind(str, Enum):
    STRENGTH = "strength"
    CHALLENGE = "challenge"


@dataclass(frozen=True)
class KeywordScore:
    strength_hits: tuple[str, ...]
    challenge_hits: tuple[str, ...]

    @property
    def kind(self) -> FindingKind:
        # Ambiguous or empty signal is flagged as a challenge.
        if self.strength_hits and not self.challenge_hits:
            return FindingKind.STRENGTH
        return FindingKind.CHALLENGE


def score_text(title: str, description: str = "") -> KeywordScore:
    combined = f"{title.lower()} {description.lower()}"
    return KeywordScore(
        strength_hits=tuple(keyword for keyword in STRENGTH_KEYWORDS if keyword in combined),
        challenge_hits=tuple(keyword for keyword in CHALLENGE_KEYWORDS if keyword in combined),
    )


def classify_finding(title: str, description: str = "") -> FindingKind:
    score = score_text(title, description)
    logger.debug(
        "Classified %r as %s (strength: %s, challenge: %s)",
        title,
        score.kind.value,
        list(score.strength_hits),
        list(score.challenge_hits),
    )
    return score.kind
