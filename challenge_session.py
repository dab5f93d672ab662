# -*- coding: utf-8 -*-
########################
# challenge_session.py
########################
# Purpose:
# - Phrase challenge with discrete buttons (dot, dash, letter space, word space, backspace).
# - Tracks live error state and accuracy, and produces a ScoreRun when the phrase is completed.
#
# Design notes:
# - No Qt usage. Time comes from Clock.
# - The stream is edited only through morse_codec helpers so it stays in canonical form.
# - Every append is scored against the target prefix. Backspace is free.
# - Completion is an exact match of the stream against the encoded target. Once complete the
#   session ignores further input until start() is called again.
# - Persisting the run is optional and never affects the session result.
#
########################
# Interfaces:
# Public classes:
# - class ChallengeSession
#   - __init__(*, clock: Clock, recorder: Optional[ProgressRecorder] = None)
#   - start(target_phrase: str) -> None
#   - target_phrase() -> str
#   - target_stream() -> str
#   - current_stream() -> str
#   - decoded_text() -> str
#   - append_dot() / append_dash() / append_letter_space() / append_word_space() -> bool
#   - backspace() -> None
#   - is_error() -> bool
#   - is_complete() -> bool
#   - result() -> Optional[ScoreRun]
#   - tracker() -> AccuracyTracker
#
########################

from __future__ import annotations

import logging
from typing import Callable, Optional

import morse_codec
import scoring
from progress_recorder import ProgressRecorder
from trainer_clock import Clock
from trainer_models import DASH, DOT, ScoreRun

logger = logging.getLogger(__name__)


class ChallengeSession:
    def __init__(self, *, clock: Clock, recorder: Optional[ProgressRecorder] = None) -> None:
        self._clock = clock
        self._recorder = recorder
        self._target_phrase = ""
        self._target_stream = ""
        self._stream = ""
        self._start_ms = 0
        self._tracker = scoring.AccuracyTracker()
        self._result: Optional[ScoreRun] = None

    def start(self, target_phrase: str) -> None:
        self._target_phrase = (target_phrase or "").strip().upper()
        if not self._target_phrase:
            raise ValueError("target_phrase must be a non-empty string")
        self._target_stream = morse_codec.encode(self._target_phrase)
        self._stream = ""
        self._tracker.reset()
        self._result = None
        self._start_ms = self._clock.now_ms()

    def target_phrase(self) -> str:
        return self._target_phrase

    def target_stream(self) -> str:
        return self._target_stream

    def current_stream(self) -> str:
        return self._stream

    def decoded_text(self) -> str:
        return morse_codec.decode(self._stream)

    def tracker(self) -> scoring.AccuracyTracker:
        return self._tracker

    def result(self) -> Optional[ScoreRun]:
        return self._result

    def is_complete(self) -> bool:
        return self._result is not None

    def is_error(self) -> bool:
        return not morse_codec.is_prefix_of_target(self._stream, self._target_stream)

    def append_dot(self) -> bool:
        return self._append(lambda stream: morse_codec.append_symbol(stream, DOT))

    def append_dash(self) -> bool:
        return self._append(lambda stream: morse_codec.append_symbol(stream, DASH))

    def append_letter_space(self) -> bool:
        return self._append(morse_codec.append_letter_space)

    def append_word_space(self) -> bool:
        return self._append(morse_codec.append_word_space)

    def backspace(self) -> None:
        if self.is_complete() or not self._stream:
            return
        self._stream = morse_codec.backspace(self._stream)
        self._tracker.record_backspace()

    def _append(self, edit: Callable[[str], str]) -> bool:
        """Apply one append. Returns True when the append matched the target prefix."""
        if not self._target_stream or self.is_complete():
            return False
        self._stream = edit(self._stream)
        mistaken = self._tracker.record_append(self._stream, self._target_stream)
        if not mistaken and self._stream == self._target_stream:
            self._finish()
        return not mistaken

    def _finish(self) -> None:
        now_ms = self._clock.now_ms()
        self._result = scoring.build_score_run(
            target_phrase=self._target_phrase,
            elapsed_ms=now_ms - self._start_ms,
            tracker=self._tracker,
            timestamp_ms=now_ms,
        )
        logger.debug("Challenge complete: %s wpm=%s accuracy=%s", self._target_phrase, self._result.wpm, self._result.accuracy)
        if self._recorder is not None:
            self._recorder.record_run(self._result)


def _run_unit_tests() -> None:
    from trainer_clock import FakeClock

    clock = FakeClock(start_ms=5_000)
    session = ChallengeSession(clock=clock)
    session.start("e t")
    assert session.target_stream() == ". / -"

    session.append_dash()
    assert session.is_error()
    session.backspace()
    assert not session.is_error()
    session.append_dot()
    session.append_word_space()
    clock.advance_ms(30_000)
    session.append_dash()
    assert session.is_complete()

    run = session.result()
    assert run is not None
    assert run.wpm == 1.2
    assert run.accuracy == 75.0
    assert session.append_dot() is False


if __name__ == "__main__":
    _run_unit_tests()
    print("challenge_session.py: ok")
