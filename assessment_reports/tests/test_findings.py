from __future__ import annotations

from assessment_reports.report_parser import classify
from assessment_reports.report_parser.classify import FindingKind, classify_finding
from assessment_reports.report_parser.findings import find_region, parse_validated_findings
from assessment_reports.report_parser.models import ActionItem, ActionKind, Strategy

VALIDATED = """## Assessment Results

### Validated Findings

#### 1. Strong Visual Memory
**Evidence:** Visual memory index of 120
**Teacher-Friendly Description:** Excels at recalling diagrams.
**Observable Behaviors:** Redraws maps from memory
**Primary Support Strategy:** Use diagrams for new concepts
**Secondary Support Strategy:** Provide picture schedules

#### 2. Working Memory Difficulty
**Evidence:** Working memory index of 78
**Teacher-Friendly Description:** Struggles to hold multi-step directions.
**Primary Support Strategy:** Give one direction at a time
**Implementation Caution:** Avoid long verbal instructions

#### 3. Unlabelled Note
Some text without labels.

### Recommendations
- **Primary Support Strategy:** Outside region
"""


def test_classification_tie_break_is_challenge() -> None:
    assert classify_finding("Excels at math", "but struggles with writing") is FindingKind.CHALLENGE


def test_classification_strength_and_neither() -> None:
    assert classify_finding("Strong vocabulary") is FindingKind.STRENGTH
    assert classify_finding("Handwriting") is FindingKind.CHALLENGE


def test_score_reports_matched_keywords() -> None:
    score = classify.score_text("Reading difficulty")
    assert score.challenge_hits == ("difficulty",)
    assert score.strength_hits == ()


def test_region_stops_at_next_heading() -> None:
    region = find_region(VALIDATED)
    assert region is not None
    assert "Unlabelled Note" in region
    assert "Outside region" not in region


def test_validated_findings_are_classified() -> None:
    result = parse_validated_findings(VALIDATED)
    assert result.found
    assert [strength.title for strength in result.strengths] == ["Strong Visual Memory"]
    strength = result.strengths[0]
    assert strength.observations == (
        "Redraws maps from memory",
        "Evidence: Visual memory index of 120",
    )
    assert strength.actions == (
        ActionItem(ActionKind.DO, "Use diagrams for new concepts"),
        ActionItem(ActionKind.DO, "Provide picture schedules"),
    )
    assert [challenge.title for challenge in result.challenges] == ["Working Memory Difficulty"]
    challenge = result.challenges[0]
    assert challenge.observations[0] == "Struggles to hold multi-step directions."
    assert challenge.actions[-1] == ActionItem(ActionKind.DONT, "Avoid long verbal instructions")


def test_each_unique_primary_support_becomes_strategy() -> None:
    result = parse_validated_findings(VALIDATED)
    assert result.strategies == [
        Strategy("Strong Visual Memory", "Use diagrams for new concepts"),
        Strategy("Working Memory Difficulty", "Give one direction at a time"),
    ]


def test_level_two_region_heading_is_accepted() -> None:
    text = (
        "## Validated Findings\n\n#### Limited Stamina\n"
        "**Observable Behaviors:** Tires after ten minutes of writing\n"
    )
    result = parse_validated_findings(text)
    assert [challenge.title for challenge in result.challenges] == ["Limited Stamina"]


def test_missing_region_yields_nothing() -> None:
    result = parse_validated_findings("## Strengths\n**Reading**")
    assert not result.found
    assert result.strategies == []


def test_support_strategy_is_kept_for_block_without_observations() -> None:
    text = (
        "### Validated Findings\n\n#### Planning Support\n"
        "**Primary Support Strategy:** Break projects into dated checkpoints\n"
    )
    result = parse_validated_findings(text)
    assert result.strategies == [
        Strategy("Planning Support", "Break projects into dated checkpoints")
    ]
    assert result.strengths == []
    assert result.challenges == []
