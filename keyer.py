# -*- coding: utf-8 -*-
########################
# keyer.py
########################
# Purpose:
# - Real-time single-button keyer.
# - Turns press/release events into dots and dashes by hold duration, and pauses into letter and
#   word boundaries by elapsed time.
# - Maintains the finalized signal stream, the in-progress letter and a live decoded preview.
#
# Design notes:
# - No Qt usage. Time comes from Clock, deferred checks go through TimerScheduler.
# - At most one debounce chain is live per session: letter check, then word check. A new press
#   always cancels the chain before anything else happens.
# - Completion is sticky. Any timer callback that runs after completion is a no-op.
# - A profile switch aborts the buffer and timers and starts a fresh stream. Thresholds are never
#   mixed within one stream.
# - Actuation while pressed is a repeating short pulse on its own timer token, separate from the
#   debounce chain.
#
########################
# Interfaces:
# Public enums:
# - KeyerState(IDLE, PRESSING, LETTER_PENDING, WORD_PENDING, COMPLETE)
#
# Public classes:
# - class KeyerSession
#   - __init__(*, clock, scheduler, actuator=None, profile=NORMAL, target_stream="", tone_pulse_ms=100,
#              tone_repeat_ms=90, on_complete=None, on_boundary=None)
#   - state() -> KeyerState
#   - profile() -> DifficultyProfile
#   - target_stream() -> str
#   - finalized_stream() -> str
#   - letter_buffer() -> str
#   - displayed_code() -> str
#   - decoded_text() -> str
#   - is_complete() -> bool
#   - is_error() -> bool
#   - press() -> bool
#   - release() -> Optional[str]
#   - set_profile(profile: DifficultyProfile) -> None
#   - reset(target_stream: Optional[str] = None) -> None
#
# Inputs:
# - press/release calls from keyer_input.KeyerInput or tests.
#
# Outputs:
# - Actuator.emit_pulse calls while pressed.
# - on_boundary("LETTER" | "WORD") and on_complete() callbacks.
#
########################

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

import morse_codec
from trainer_clock import Actuator, Clock, NullActuator, TimerScheduler
from trainer_models import NORMAL, DifficultyProfile

logger = logging.getLogger(__name__)

BOUNDARY_LETTER = "LETTER"
BOUNDARY_WORD = "WORD"


class KeyerState(enum.Enum):
    IDLE = "idle"
    PRESSING = "pressing"
    LETTER_PENDING = "letter_pending"
    WORD_PENDING = "word_pending"
    COMPLETE = "complete"


class KeyerSession:
    def __init__(
        self,
        *,
        clock: Clock,
        scheduler: TimerScheduler,
        actuator: Optional[Actuator] = None,
        profile: DifficultyProfile = NORMAL,
        target_stream: str = "",
        tone_pulse_ms: int = 100,
        tone_repeat_ms: int = 90,
        on_complete: Optional[Callable[[], None]] = None,
        on_boundary: Optional[Callable[[str], None]] = None,
    ) -> None:
        if int(tone_repeat_ms) <= 0:
            raise ValueError("tone_repeat_ms must be positive")
        self._clock = clock
        self._scheduler = scheduler
        self._actuator: Actuator = actuator if actuator is not None else NullActuator()
        self._tone_pulse_ms = int(tone_pulse_ms)
        self._tone_repeat_ms = int(tone_repeat_ms)
        self._on_complete = on_complete
        self._on_boundary = on_boundary

        self._profile = profile
        self._target_stream = morse_codec.strip_trailing_separator(target_stream)
        self._state = KeyerState.IDLE
        self._stream = ""
        self._letter_buffer = ""
        self._press_start_ms = 0
        self._chain_token: Optional[int] = None
        self._tone_token: Optional[int] = None

        # Diagnostics for tests and overlays.
        self.cancelled_timer_count = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def state(self) -> KeyerState:
        return self._state

    def profile(self) -> DifficultyProfile:
        return self._profile

    def target_stream(self) -> str:
        return self._target_stream

    def finalized_stream(self) -> str:
        return self._stream

    def letter_buffer(self) -> str:
        return self._letter_buffer

    def displayed_code(self) -> str:
        return morse_codec.join_letter(self._stream, self._letter_buffer)

    def decoded_text(self) -> str:
        return morse_codec.decode(self.displayed_code())

    def is_complete(self) -> bool:
        return self._state is KeyerState.COMPLETE

    def is_error(self) -> bool:
        trimmed = morse_codec.strip_trailing_separator(self._stream)
        if not trimmed or not self._target_stream:
            return False
        return not morse_codec.is_prefix_of_target(trimmed, self._target_stream)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def press(self) -> bool:
        """Key down. Returns False when the press is ignored."""
        if self._state in (KeyerState.COMPLETE, KeyerState.PRESSING):
            return False
        self._cancel_chain()
        self._press_start_ms = self._clock.now_ms()
        self._state = KeyerState.PRESSING
        self._start_tone()
        return True

    def release(self) -> Optional[str]:
        """Key up. Returns the classified symbol, or None when there was no active press."""
        if self._state is not KeyerState.PRESSING:
            return None
        self._stop_tone()
        held_ms = self._clock.now_ms() - self._press_start_ms
        symbol = self._profile.classify_hold(held_ms)
        self._letter_buffer += symbol
        self._state = KeyerState.LETTER_PENDING
        self._chain_token = self._scheduler.schedule(self._profile.letter_gap_ms, self._on_letter_gap)
        return symbol

    def set_profile(self, profile: DifficultyProfile) -> None:
        logger.debug("Keyer profile switch %s -> %s", self._profile.name, profile.name)
        self._profile = profile
        self.reset()

    def reset(self, target_stream: Optional[str] = None) -> None:
        self._cancel_chain()
        self._stop_tone()
        if target_stream is not None:
            self._target_stream = morse_codec.strip_trailing_separator(target_stream)
        self._stream = ""
        self._letter_buffer = ""
        self._press_start_ms = 0
        self._state = KeyerState.IDLE

    # ------------------------------------------------------------------
    # Debounce chain
    # ------------------------------------------------------------------

    def _cancel_chain(self) -> None:
        if self._chain_token is None:
            return
        if self._scheduler.cancel(self._chain_token):
            self.cancelled_timer_count += 1
        self._chain_token = None

    def _on_letter_gap(self) -> None:
        self._chain_token = None
        if self._state is not KeyerState.LETTER_PENDING:
            return
        if self._letter_buffer:
            self._stream = morse_codec.join_letter(self._stream, self._letter_buffer)
            self._letter_buffer = ""
            self._notify_boundary(BOUNDARY_LETTER)
        if self._check_completion():
            return
        self._state = KeyerState.WORD_PENDING
        delay_ms = self._profile.word_gap_ms - self._profile.letter_gap_ms
        self._chain_token = self._scheduler.schedule(delay_ms, self._on_word_gap)

    def _on_word_gap(self) -> None:
        self._chain_token = None
        if self._state is not KeyerState.WORD_PENDING:
            return
        promoted = morse_codec.promote_word_boundary(self._stream)
        self._state = KeyerState.IDLE
        if promoted != self._stream:
            self._stream = promoted
            self._notify_boundary(BOUNDARY_WORD)

    def _check_completion(self) -> bool:
        if not self._target_stream:
            return False
        if morse_codec.strip_trailing_separator(self._stream) != self._target_stream:
            return False
        self._state = KeyerState.COMPLETE
        self._cancel_chain()
        self._stop_tone()
        logger.debug("Keyer phrase complete: %s", self._target_stream)
        if self._on_complete is not None:
            self._on_complete()
        return True

    def _notify_boundary(self, kind: str) -> None:
        if self._on_boundary is not None:
            self._on_boundary(kind)

    # ------------------------------------------------------------------
    # Actuation
    # ------------------------------------------------------------------

    def _start_tone(self) -> None:
        self._actuator.emit_pulse(self._tone_pulse_ms)
        self._tone_token = self._scheduler.schedule(self._tone_repeat_ms, self._on_tone_tick)

    def _on_tone_tick(self) -> None:
        self._tone_token = None
        if self._state is not KeyerState.PRESSING:
            return
        self._actuator.emit_pulse(self._tone_pulse_ms)
        self._tone_token = self._scheduler.schedule(self._tone_repeat_ms, self._on_tone_tick)

    def _stop_tone(self) -> None:
        if self._tone_token is not None:
            self._scheduler.cancel(self._tone_token)
            self._tone_token = None


def _run_unit_tests() -> None:
    from trainer_clock import FakeClock, ManualTimerScheduler, RecordingActuator

    clock = FakeClock()
    scheduler = ManualTimerScheduler(clock)
    actuator = RecordingActuator(clock)
    completions = []
    session = KeyerSession(
        clock=clock,
        scheduler=scheduler,
        actuator=actuator,
        target_stream=morse_codec.encode("E T"),
        on_complete=lambda: completions.append(clock.now_ms()),
    )

    # E: one short press, then a word gap.
    assert session.press()
    scheduler.advance(50)
    assert session.release() == "."
    assert session.displayed_code() == "."
    scheduler.advance(NORMAL.letter_gap_ms)
    assert session.finalized_stream() == "."
    scheduler.advance(NORMAL.word_gap_ms - NORMAL.letter_gap_ms)
    assert session.finalized_stream() == ". / "

    # T: one long press completes the phrase.
    session.press()
    scheduler.advance(NORMAL.dit_threshold_ms)
    assert session.release() == "-"
    assert session.decoded_text() == "E T"
    scheduler.advance(NORMAL.letter_gap_ms)
    assert session.is_complete()
    assert completions == [clock.now_ms()]
    assert session.press() is False
    assert len(actuator.pulses) >= 2


if __name__ == "__main__":
    _run_unit_tests()
    print("keyer.py: ok")
