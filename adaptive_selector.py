# -*- coding: utf-8 -*-
########################
# adaptive_selector.py
########################
# Purpose:
# - Rank characters by weakness for targeted practice drills.
#
# Design notes:
# - No Qt usage. Reads a snapshot of CharacterStat values; never writes statistics.
# - Characters with zero attempts carry no signal and are dropped.
# - Keys are normalized to one upper-case character; stats stored under "a" and "A" are merged.
# - Ranking: mistake rate descending, then average answer time descending. Remaining ties keep
#   character order so results are deterministic.
# - An empty result means "insufficient data", not an error.
#
########################
# Interfaces:
# Public dataclasses:
# - CharacterScore(character: str, mistake_rate: float, avg_time_ms: float, attempts: int)
# - DrillStep(kind: str, character: str)   kind is "teach" or "quiz"
#
# Public functions:
# - rank_characters(stats: Mapping[str, CharacterStat]) -> list[CharacterScore]
# - weakest_characters(stats: Mapping[str, CharacterStat], count: int = 3) -> list[str]
# - targeted_drill_plan(characters: Sequence[str]) -> list[DrillStep]
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from trainer_models import CharacterStat

DEFAULT_WEAKEST_COUNT = 3

STEP_TEACH = "teach"
STEP_QUIZ = "quiz"


@dataclass(frozen=True)
class CharacterScore:
    character: str
    mistake_rate: float
    avg_time_ms: float
    attempts: int


@dataclass(frozen=True)
class DrillStep:
    kind: str
    character: str


def _merge_by_character(stats: Mapping[str, CharacterStat]) -> Dict[str, CharacterStat]:
    merged: Dict[str, CharacterStat] = {}
    for key, stat in stats.items():
        character = str(key)[:1].upper()
        if not character:
            continue
        previous = merged.get(character, CharacterStat())
        merged[character] = CharacterStat(
            attempts=previous.attempts + int(stat.attempts),
            mistakes=previous.mistakes + int(stat.mistakes),
            total_time_ms=previous.total_time_ms + int(stat.total_time_ms),
        )
    return merged


def rank_characters(stats: Mapping[str, CharacterStat]) -> List[CharacterScore]:
    merged = _merge_by_character(stats)
    scores: List[CharacterScore] = []
    for character in sorted(merged.keys()):
        stat = merged[character]
        attempts = int(stat.attempts)
        if attempts <= 0:
            continue
        scores.append(
            CharacterScore(
                character=character,
                mistake_rate=float(stat.mistakes) / attempts,
                avg_time_ms=float(stat.total_time_ms) / attempts,
                attempts=attempts,
            )
        )
    scores.sort(key=lambda item: (item.mistake_rate, item.avg_time_ms), reverse=True)
    return scores


def weakest_characters(stats: Mapping[str, CharacterStat], count: int = DEFAULT_WEAKEST_COUNT) -> List[str]:
    if int(count) < 0:
        raise ValueError("count must not be negative")
    return [score.character for score in rank_characters(stats)[: int(count)]]


def targeted_drill_plan(characters: Sequence[str]) -> List[DrillStep]:
    steps: List[DrillStep] = []
    for character in characters:
        steps.append(DrillStep(kind=STEP_TEACH, character=character))
        steps.append(DrillStep(kind=STEP_QUIZ, character=character))
    return steps


def _run_unit_tests() -> None:
    stats = {
        "A": CharacterStat(attempts=10, mistakes=5, total_time_ms=500),
        "B": CharacterStat(attempts=10, mistakes=5, total_time_ms=300),
        "C": CharacterStat(attempts=4, mistakes=0, total_time_ms=4000),
        "D": CharacterStat(attempts=0, mistakes=0, total_time_ms=0),
        "E": CharacterStat(attempts=2, mistakes=2, total_time_ms=100),
    }
    assert weakest_characters(stats) == ["E", "A", "B"]
    assert weakest_characters(stats, count=10) == ["E", "A", "B", "C"]
    assert weakest_characters({}) == []
    assert weakest_characters({"D": stats["D"]}) == []

    mixed_case = rank_characters({"a": CharacterStat(2, 1, 10), "A": CharacterStat(2, 2, 10)})
    assert [(score.character, score.attempts, score.mistake_rate) for score in mixed_case] == [("A", 4, 0.75)]

    plan = targeted_drill_plan(["E", "A"])
    assert [(step.kind, step.character) for step in plan] == [
        ("teach", "E"), ("quiz", "E"), ("teach", "A"), ("quiz", "A"),
    ]


if __name__ == "__main__":
    _run_unit_tests()
    print("adaptive_selector.py: ok")
