"""Pipe-table and do/don't action parsing for strength and challenge blocks."""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, replace

from .models import ActionItem, ActionKind, Finding
from .normalize import clean_text, strip_bullet, strip_emphasis

logger = logging.getLogger(__name__)

DO_GLYPHS = "✔✓"
DONT_GLYPHS = "✘✗"
GLYPH_SPLIT_RE = re.compile(rf"(?=[{DO_GLYPHS}{DONT_GLYPHS}])")
LINE_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
OBSERVATION_SPLIT_RE = re.compile(r";|<br\s*/?>", re.IGNORECASE)
SEPARATOR_CELL_RE = re.compile(r"^:?-+:?$")
DO_LABEL_RE = re.compile(r"^do\s*:\s*", re.IGNORECASE)
DONT_LABEL_RE = re.compile(r"^(?:don['’]t|do not)\s*:\s*", re.IGNORECASE)
DONT_PREFIX_RE = re.compile(r"^(?:don['’]t|do not)\b", re.IGNORECASE)

MIN_OBSERVATION_LENGTH = 6
MIN_TABLE_ACTION_LENGTH = 4


def classify_action(segment: str, *, min_length: int = MIN_TABLE_ACTION_LENGTH) -> ActionItem | None:
    text = segment.strip()
    if not text:
        return None
    if text[0] in DO_GLYPHS:
        kind = ActionKind.DO
        text = text[1:]
    elif text[0] in DONT_GLYPHS:
        kind = ActionKind.DONT
        text = text[1:]
    else:
        text = strip_bullet(text)
        if DONT_LABEL_RE.match(text):
            kind = ActionKind.DONT
            text = DONT_LABEL_RE.sub("", text, count=1)
        elif DO_LABEL_RE.match(text):
            kind = ActionKind.DO
            text = DO_LABEL_RE.sub("", text, count=1)
        elif DONT_PREFIX_RE.match(text):
            kind = ActionKind.DONT
        else:
            kind = ActionKind.DO
    text = clean_text(text.lstrip("\ufe0f "))
    if len(text) < min_length:
        return None
    return ActionItem(kind, text)


def parse_actions(text: str, *, min_length: int = MIN_TABLE_ACTION_LENGTH) -> list[ActionItem]:
    """Split ``text`` before each do/don't glyph and classify every segment."""

    actions: list[ActionItem] = []
    for piece in LINE_BREAK_RE.split(text):
        for segment in GLYPH_SPLIT_RE.split(piece):
            action = classify_action(segment, min_length=min_length)
            if action is not None:
                actions.append(action)
    return actions


def parse_observations(text: str) -> list[str]:
    observations: list[str] = []
    for piece in OBSERVATION_SPLIT_RE.split(text):
        cleaned = clean_text(strip_bullet(piece))
        if len(cleaned) >= MIN_OBSERVATION_LENGTH:
            observations.append(cleaned)
    return observations


def split_row(line: str) -> list[str] | None:
    stripped = line.strip()
    if len(stripped) < 2 or not (stripped.startswith("|") and stripped.endswith("|")):
        return None
    return [cell.strip() for cell in stripped[1:-1].split("|")]


def is_separator_row(cells: list[str]) -> bool:
    return bool(cells) and all(SEPARATOR_CELL_RE.match(cell) for cell in cells)


@dataclass(frozen=True)
class Idle:
    """No record is being built."""


@dataclass(frozen=True)
class Building:
    title: str
    observations: tuple[str, ...] = ()
    actions: tuple[ActionItem, ...] = ()

    def extend(self, observations: Iterable[str], actions: Iterable[ActionItem]) -> Building:
        return replace(
            self,
            observations=self.observations + tuple(observations),
            actions=self.actions + tuple(actions),
        )


RowState = Idle | Building

IDLE = Idle()


def flush(state: RowState, results: list[Finding]) -> Idle:
    if isinstance(state, Building):
        finding = Finding(state.title, state.observations, state.actions)
        if finding.has_content:
            results.append(finding)
            logger.debug(
                "Completed row %r (%d observations, %d actions)",
                finding.title,
                len(finding.observations),
                len(finding.actions),
            )
        else:
            logger.debug("Dropped empty row %r", finding.title)
    return IDLE


def apply_data_row(state: RowState, cells: list[str], results: list[Finding]) -> RowState:
    title = clean_text(strip_emphasis(cells[0])) if cells else ""
    observations = parse_observations(cells[1]) if len(cells) > 1 else []
    actions = parse_actions(cells[2]) if len(cells) > 2 else []
    if title:
        flush(state, results)
        state = Building(title)
    if isinstance(state, Building):
        return state.extend(observations, actions)
    if observations or actions:
        logger.debug("Continuation row before any titled row; skipped")
    return state


def parse_table(content: str) -> list[Finding]:
    """Turn a three-column pipe table into findings.

    Columns are (title, observations, actions). A row with an empty first cell
    continues the record above it. Returns an empty list when ``content`` holds no
    separator row, so callers can fall back to free-text parsing.
    """

    results: list[Finding] = []
    state: RowState = IDLE
    in_table = False
    saw_separator = False
    for raw_line in content.splitlines():
        cells = split_row(raw_line)
        if cells is None:
            if in_table and raw_line.strip():
                state = flush(state, results)
                in_table = False
            continue
        if is_separator_row(cells):
            in_table = True
            saw_separator = True
            continue
        if not in_table:
            continue
        state = apply_data_row(state, cells, results)
    flush(state, results)
    if not saw_separator:
        return []
    logger.debug("Table parsing extracted %d rows", len(results))
    return results
