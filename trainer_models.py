# -*- coding: utf-8 -*-
########################
# trainer_models.py
########################
# Purpose:
# - Core data models shared by the codec, keyer, scoring and practice modules.
# - Defines difficulty profiles, per-character statistics and completed runs.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - No Qt usage. These are plain dataclasses and enums.
# - Presets are the only DifficultyProfile values a session may run with unless config overrides them.
#
########################
# Interfaces:
# Public dataclasses:
# - DifficultyProfile(name: str, dit_threshold_ms: int, letter_gap_ms: int, word_gap_ms: int, description: str)
#   - classify_hold(held_ms: int) -> str
# - CharacterStat(attempts: int, mistakes: int, total_time_ms: int)
# - ScoreRun(wpm: float, accuracy: float, timestamp_ms: int)
#
# Public enums:
# - SignalToken(DOT, DASH, LETTER_SPACE, WORD_SPACE, UNKNOWN)
#   - UNKNOWN is the placeholder code for a character outside the code table
# - StreakMode(STANDARD, REVERSE, LISTENING, DAILY)
#
# Public functions:
# - profile_by_name(name: str) -> DifficultyProfile
#
# Inputs/Outputs:
# - These types are exchanged between MorseCodec, KeyerSession, scoring, AdaptiveSelector
#   and ProgressRecorder.
#
########################

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Tuple

DOT = "."
DASH = "-"
LETTER_SEPARATOR = " "
WORD_SEPARATOR = " / "
UNKNOWN_SIGNAL = "?"


class SignalToken(enum.Enum):
    DOT = DOT
    DASH = DASH
    LETTER_SPACE = LETTER_SEPARATOR
    WORD_SPACE = WORD_SEPARATOR
    UNKNOWN = UNKNOWN_SIGNAL


class StreakMode(enum.Enum):
    STANDARD = "standard"
    REVERSE = "reverse"
    LISTENING = "listening"
    DAILY = "daily"


@dataclass(frozen=True)
class DifficultyProfile:
    name: str
    dit_threshold_ms: int
    letter_gap_ms: int
    word_gap_ms: int
    description: str = ""

    def __post_init__(self) -> None:
        if int(self.dit_threshold_ms) <= 0:
            raise ValueError("dit_threshold_ms must be positive")
        if int(self.letter_gap_ms) <= 0:
            raise ValueError("letter_gap_ms must be positive")
        if int(self.word_gap_ms) <= int(self.letter_gap_ms):
            raise ValueError("word_gap_ms must be greater than letter_gap_ms")

    def classify_hold(self, held_ms: int) -> str:
        return DOT if int(held_ms) < int(self.dit_threshold_ms) else DASH


RELAXED = DifficultyProfile("RELAXED", 300, 600, 1500, "Slower timing, great for learning")
NORMAL = DifficultyProfile("NORMAL", 200, 400, 1000, "Standard Morse timing")
FAST = DifficultyProfile("FAST", 120, 250, 600, "Challenge yourself!")

PRESET_PROFILES: Tuple[DifficultyProfile, ...] = (RELAXED, NORMAL, FAST)
_PROFILES_BY_NAME: Dict[str, DifficultyProfile] = {profile.name: profile for profile in PRESET_PROFILES}


def profile_by_name(name: str) -> DifficultyProfile:
    key = (name or "").strip().upper()
    profile = _PROFILES_BY_NAME.get(key)
    if profile is None:
        raise ValueError(f"Unknown difficulty profile: {name!r}")
    return profile


@dataclass(frozen=True)
class CharacterStat:
    attempts: int = 0
    mistakes: int = 0
    total_time_ms: int = 0

    def with_attempt(self, *, correct: bool, elapsed_ms: int) -> "CharacterStat":
        return CharacterStat(
            attempts=self.attempts + 1,
            mistakes=self.mistakes + (0 if correct else 1),
            total_time_ms=self.total_time_ms + max(0, int(elapsed_ms)),
        )


@dataclass(frozen=True)
class ScoreRun:
    wpm: float
    accuracy: float
    timestamp_ms: int


def _run_unit_tests() -> None:
    assert NORMAL.classify_hold(199) == DOT
    assert NORMAL.classify_hold(200) == DASH
    assert profile_by_name("fast") is FAST

    try:
        DifficultyProfile("BROKEN", 100, 500, 400)
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for word gap below letter gap")

    stat = CharacterStat().with_attempt(correct=False, elapsed_ms=420)
    assert stat == CharacterStat(attempts=1, mistakes=1, total_time_ms=420)


if __name__ == "__main__":
    _run_unit_tests()
    print("trainer_models.py: ok")
