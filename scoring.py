# -*- coding: utf-8 -*-
########################
# scoring.py
########################
# Purpose:
# - Session scoring: words-per-minute, append accuracy and per-mode streaks.
#
# Design notes:
# - No Qt usage. Pure gameplay logic with no I/O. Persisting high streaks and runs is the job of
#   progress_recorder.ProgressRecorder.
# - WPM uses the standard 5 characters per word and counts the target phrase including spaces.
#   Elapsed time is floored at one second.
# - Accuracy counts only appends. Backspaces are never attempts.
# - A hint reveal resets the streak immediately, before the answer is checked, and a correct
#   answer after a hint does not count.
# - Rounding is half-up to one decimal.
#
########################
# Interfaces:
# Public functions:
# - words_per_minute(target_phrase: str, elapsed_ms: int) -> float
# - accuracy_percent(attempts: int, mistakes: int) -> float
# - average_rounded(values: Iterable[float]) -> Optional[float]
# - build_score_run(*, target_phrase: str, elapsed_ms: int, tracker: AccuracyTracker, timestamp_ms: int) -> ScoreRun
#
# Public classes:
# - class AccuracyTracker
#   - record_append(stream_after: str, target_stream: str) -> bool
#   - record_backspace() -> None
#   - attempts, mistakes, backspaces, accuracy
# - class StreakCounter
#   - begin_prompt() -> None
#   - reveal_hint() -> None
#   - record_answer(correct: bool) -> int
#   - value, high, hint_shown
# - class StreakBook
#   - counter(mode: StreakMode) -> StreakCounter
#
########################

from __future__ import annotations

import math
from typing import Dict, Iterable, Optional

import morse_codec
from trainer_models import ScoreRun, StreakMode

CHARACTERS_PER_WORD = 5.0
MIN_ELAPSED_MINUTES = 1.0 / 60.0


def _round_half_up(value: float, digits: int = 1) -> float:
    scale = 10 ** digits
    return math.floor(float(value) * scale + 0.5) / scale


def words_per_minute(target_phrase: str, elapsed_ms: int) -> float:
    elapsed_minutes = max(float(elapsed_ms) / 60000.0, MIN_ELAPSED_MINUTES)
    return _round_half_up(len(target_phrase or "") / CHARACTERS_PER_WORD / elapsed_minutes)


def accuracy_percent(attempts: int, mistakes: int) -> float:
    if attempts <= 0:
        return 100.0
    return math.floor((attempts - mistakes) / attempts * 1000 + 0.5) / 10


def average_rounded(values: Iterable[float]) -> Optional[float]:
    items = [float(value) for value in values]
    if not items:
        return None
    return _round_half_up(sum(items) / len(items))


class AccuracyTracker:
    def __init__(self) -> None:
        self.attempts = 0
        self.mistakes = 0
        self.backspaces = 0

    def record_append(self, stream_after: str, target_stream: str) -> bool:
        """Count one append. Returns True when it was a mistake."""
        self.attempts += 1
        mistaken = not morse_codec.is_prefix_of_target(stream_after, target_stream)
        if mistaken:
            self.mistakes += 1
        return mistaken

    def record_backspace(self) -> None:
        self.backspaces += 1

    @property
    def accuracy(self) -> float:
        return accuracy_percent(self.attempts, self.mistakes)

    def reset(self) -> None:
        self.attempts = 0
        self.mistakes = 0
        self.backspaces = 0


def build_score_run(*, target_phrase: str, elapsed_ms: int, tracker: AccuracyTracker, timestamp_ms: int) -> ScoreRun:
    return ScoreRun(
        wpm=words_per_minute(target_phrase, elapsed_ms),
        accuracy=tracker.accuracy,
        timestamp_ms=int(timestamp_ms),
    )


class StreakCounter:
    def __init__(self, mode: StreakMode) -> None:
        self.mode = mode
        self.value = 0
        self.high = 0
        self.hint_shown = False

    def begin_prompt(self) -> None:
        self.hint_shown = False

    def reveal_hint(self) -> None:
        self.hint_shown = True
        self.value = 0

    def record_answer(self, correct: bool) -> int:
        if not correct:
            self.value = 0
        elif not self.hint_shown:
            self.value += 1
            if self.value > self.high:
                self.high = self.value
        return self.value


class StreakBook:
    def __init__(self) -> None:
        self._counters: Dict[StreakMode, StreakCounter] = {mode: StreakCounter(mode) for mode in StreakMode}

    def counter(self, mode: StreakMode) -> StreakCounter:
        return self._counters[mode]


def _run_unit_tests() -> None:
    assert words_per_minute("HELLO WORLD", 60_000) == 2.2
    assert words_per_minute("SOS", 10) == words_per_minute("SOS", 1000)

    tracker = AccuracyTracker()
    target = morse_codec.encode("SOS")
    stream = ""
    for symbol in "..-":
        stream += symbol
        tracker.record_append(stream, target)
    tracker.record_backspace()
    assert tracker.attempts == 3
    assert tracker.mistakes == 1
    assert tracker.accuracy == 66.7
    assert AccuracyTracker().accuracy == 100.0

    streak = StreakCounter(StreakMode.STANDARD)
    for _ in range(4):
        streak.begin_prompt()
        streak.record_answer(True)
    assert streak.value == 4
    streak.begin_prompt()
    streak.reveal_hint()
    assert streak.value == 0
    assert streak.record_answer(True) == 0
    assert streak.high == 4


if __name__ == "__main__":
    _run_unit_tests()
    print("scoring.py: ok")
