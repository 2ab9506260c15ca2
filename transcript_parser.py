"""Turn transcribed utterances into structured training intents.

Two parsers live here. The workout parser extracts a repetition count and/or
a weight from phrases such as ``"doce reps y quince kilos"``. The
substitution parser matches navigation and counting keywords by substring,
ignoring any quantities.

Neither parser raises on unrecognised input; they return ``None``.
"""
from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass
from typing import Optional, Union

import lexicon
from models import WorkoutEntry, utcnow


class Direction(enum.Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    ACCEPT = "accept"


class Action(enum.Enum):
    REP_DONE = "rep_done"
    FINISH_SERIES = "finish_series"
    FINISH_EXERCISE = "finish_exercise"
    SKIP_REST = "skip_rest"


@dataclass(frozen=True)
class QuantityIntent:
    reps: Optional[str] = None
    weight: Optional[str] = None


@dataclass(frozen=True)
class NavigationIntent:
    direction: Direction


@dataclass(frozen=True)
class ControlIntent:
    action: Action


Intent = Union[QuantityIntent, NavigationIntent, ControlIntent]


def resolve(word: str) -> Optional[str]:
    """Return the digit string for ``word`` or ``None``."""
    if lexicon.DIGITS.match(word):
        return word
    return lexicon.NUMBER_WORDS.get(word.lower())


def _unit_adjacent(words: list[str]) -> tuple[Optional[str], Optional[str]]:
    reps = weight = None
    for i in range(len(words) - 1):
        number = resolve(words[i])
        if number is None:
            continue
        unit = words[i + 1]
        # later pairs overwrite earlier ones of the same kind
        if lexicon.REPS_UNIT.match(unit):
            reps = number
        elif lexicon.WEIGHT_UNIT.match(unit):
            weight = number
    return reps, weight


def _first_bare_number(words: list[str]) -> Optional[str]:
    for word in words:
        m = lexicon.BARE_NUMBER.search(word)
        if m:
            return m.group(1)
        number = resolve(word)
        if number is not None:
            return number
    return None


def parse_quantity(text: str) -> Optional[QuantityIntent]:
    """Extract reps and weight from ``text``.

    Unit-adjacent pairs (``"diez kilos"``) take priority over the numeric
    regexes (``"10kg"``), which take priority over a lone number. A lone
    number is read as repetitions.
    """
    words = text.split()
    reps, weight = _unit_adjacent(words)
    if reps is None and weight is None:
        m = lexicon.REPS_PHRASE.search(text)
        if m:
            reps = m.group(1)
        m = lexicon.WEIGHT_PHRASE.search(text)
        if m:
            weight = m.group(1)
        if reps is None and weight is None:
            reps = _first_bare_number(words)
    if reps is None and weight is None:
        return None
    return QuantityIntent(reps=reps, weight=weight)


def parse_workout_utterance(text: str) -> Optional[Intent]:
    """Parse one utterance spoken during a regular workout."""
    text = text.lower().strip()
    if not text:
        return None
    quantity = parse_quantity(text)
    if quantity is not None:
        return quantity
    if lexicon.contains_any(text, lexicon.WORKOUT_ADVANCE_WORDS):
        return ControlIntent(Action.FINISH_EXERCISE)
    if lexicon.contains_any(text, lexicon.WORKOUT_RETREAT_WORDS):
        return NavigationIntent(Direction.PREVIOUS)
    return None


def parse_navigation(text: str) -> Optional[NavigationIntent]:
    text = text.lower()
    if lexicon.contains_any(text, lexicon.NEXT_WORDS):
        return NavigationIntent(Direction.NEXT)
    if lexicon.contains_any(text, lexicon.PREVIOUS_WORDS):
        return NavigationIntent(Direction.PREVIOUS)
    if lexicon.contains_any(text, lexicon.ACCEPT_WORDS):
        return NavigationIntent(Direction.ACCEPT)
    return None


def parse_control(text: str) -> Optional[ControlIntent]:
    text = text.lower()
    if lexicon.contains_any(text, lexicon.REP_DONE_WORDS):
        return ControlIntent(Action.REP_DONE)
    if lexicon.contains_any(text, lexicon.FINISH_SERIES_WORDS):
        return ControlIntent(Action.FINISH_SERIES)
    if lexicon.contains_any(text, lexicon.FINISH_EXERCISE_WORDS):
        return ControlIntent(Action.FINISH_EXERCISE)
    if lexicon.contains_any(text, lexicon.SKIP_REST_WORDS):
        return ControlIntent(Action.SKIP_REST)
    return None


def build_entry(
    intent: QuantityIntent,
    exercise: str,
    now: datetime.datetime | None = None,
) -> WorkoutEntry:
    return WorkoutEntry(
        exercise=exercise,
        reps=intent.reps,
        weight=intent.weight,
        timestamp=now or utcnow(),
    )
