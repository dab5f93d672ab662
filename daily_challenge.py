# -*- coding: utf-8 -*-
########################
# daily_challenge.py
########################
# Purpose:
# - One word per calendar day, one attempt, no hints.
# - Keeps the daily streak: a correct answer extends it, a wrong answer resets it to zero.
#
# Design notes:
# - No Qt usage. The caller passes today's date so tests never depend on the wall clock.
# - "Already played" is a plain string compare of ISO dates (YYYY-MM-DD). A missed day does not
#   reset the streak by itself; only a wrong answer does.
# - The answer is the code stream for the word, compared after trimming outer whitespace.
#
########################
# Interfaces:
# Public functions:
# - already_played(last_date_text: str, today_text: str) -> bool
#
# Public classes:
# - class DailyChallenge
#   - __init__(recorder: ProgressRecorder, today: datetime.date)
#   - today_word() -> str
#   - target_stream() -> str
#   - current_streak() -> int
#   - is_locked() -> bool
#   - submit(answer: str) -> bool
#
########################

from __future__ import annotations

import datetime as _dt
import logging
from typing import Optional

import morse_codec
import phrases
from progress_recorder import ProgressRecorder

logger = logging.getLogger(__name__)


def already_played(last_date_text: str, today_text: str) -> bool:
    return bool(last_date_text) and last_date_text == today_text


class DailyChallenge:
    def __init__(self, recorder: ProgressRecorder, today: _dt.date) -> None:
        self._recorder = recorder
        self._today_text = today.isoformat()
        self._word = phrases.daily_word(today)
        self._target_stream = morse_codec.encode(self._word)

        streak, last_date = recorder.daily_challenge_info()
        self._streak = streak
        self._locked = already_played(last_date, self._today_text)
        self._result: Optional[bool] = None

    def today_text(self) -> str:
        return self._today_text

    def today_word(self) -> str:
        return self._word

    def target_stream(self) -> str:
        return self._target_stream

    def current_streak(self) -> int:
        return self._streak

    def result(self) -> Optional[bool]:
        return self._result

    def is_locked(self) -> bool:
        return self._locked

    def submit(self, answer: str) -> bool:
        if self._locked:
            raise RuntimeError(f"Daily challenge already played on {self._today_text}")
        correct = (answer or "").strip() == self._target_stream
        self._streak = self._streak + 1 if correct else 0
        self._result = correct
        self._locked = True
        logger.debug("Daily challenge %s: correct=%s streak=%d", self._today_text, correct, self._streak)
        self._recorder.record_daily_challenge(self._today_text, self._streak)
        return correct


def _run_unit_tests() -> None:
    from document_store import InMemoryDocumentStore

    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "daily")
    day = _dt.date(2024, 3, 1)

    challenge = DailyChallenge(recorder, day)
    assert not challenge.is_locked()
    assert challenge.submit(challenge.target_stream() + " ")
    assert challenge.current_streak() == 1
    assert challenge.is_locked()

    again = DailyChallenge(recorder, day)
    assert again.is_locked()

    tomorrow = DailyChallenge(recorder, day + _dt.timedelta(days=1))
    assert not tomorrow.is_locked()
    assert tomorrow.current_streak() == 1
    assert tomorrow.submit("...") is False
    assert tomorrow.current_streak() == 0
    assert recorder.daily_challenge_info() == (0, "2024-03-02")
    assert store.get("users/daily")["dailyHighStreak"] == 1

    assert already_played("", "") is False
    assert already_played("2024-03-01", "2024-03-01")


if __name__ == "__main__":
    _run_unit_tests()
    print("daily_challenge.py: ok")
