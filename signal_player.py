# -*- coding: utf-8 -*-
########################
# signal_player.py
########################
# Purpose:
# - Play a signal stream through an Actuator (tone, vibration or flash) for listening practice
#   and for sending translated text.
#
# Design notes:
# - No Qt usage. Timing goes through TimerScheduler so playback is testable with a fake clock.
# - The timeline is computed up front from the canonical stream, one character at a time:
#   "." and "-" are a pulse followed by the symbol gap, " " is a letter gap, "/" is a word gap.
# - Playing again while a playback is running stops the running one first.
#
########################
# Interfaces:
# Public dataclasses:
# - PlaybackTiming(dit_ms: int, dah_ms: int, symbol_gap_ms: int, letter_gap_ms: int, word_gap_ms: int)
# - PulseEvent(offset_ms: int, duration_ms: int, stream_index: int)
#
# Public functions:
# - build_timeline(stream: str, timing: PlaybackTiming) -> tuple[list[PulseEvent], int]
#
# Public classes:
# - class SignalPlayer
#   - __init__(scheduler: TimerScheduler, actuator: Actuator, timing: PlaybackTiming = DEFAULT_TIMING)
#   - play(stream: str, on_index: Optional[Callable[[int], None]] = None,
#          on_finished: Optional[Callable[[], None]] = None) -> int
#   - stop() -> None
#   - is_playing() -> bool
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from trainer_clock import Actuator, TimerScheduler
from trainer_models import DASH, DOT


@dataclass(frozen=True)
class PlaybackTiming:
    dit_ms: int = 200
    dah_ms: int = 600
    symbol_gap_ms: int = 200
    letter_gap_ms: int = 600
    word_gap_ms: int = 1200


DEFAULT_TIMING = PlaybackTiming()


@dataclass(frozen=True)
class PulseEvent:
    offset_ms: int
    duration_ms: int
    stream_index: int


def build_timeline(stream: str, timing: PlaybackTiming = DEFAULT_TIMING) -> Tuple[List[PulseEvent], int]:
    """Returns the pulses and the total playback length in milliseconds."""
    pulses: List[PulseEvent] = []
    cursor_ms = 0
    for index, character in enumerate(stream or ""):
        if character == DOT:
            pulses.append(PulseEvent(offset_ms=cursor_ms, duration_ms=timing.dit_ms, stream_index=index))
            cursor_ms += timing.dit_ms + timing.symbol_gap_ms
        elif character == DASH:
            pulses.append(PulseEvent(offset_ms=cursor_ms, duration_ms=timing.dah_ms, stream_index=index))
            cursor_ms += timing.dah_ms + timing.symbol_gap_ms
        elif character == " ":
            cursor_ms += timing.letter_gap_ms
        elif character == "/":
            cursor_ms += timing.word_gap_ms
    return pulses, cursor_ms


class SignalPlayer:
    def __init__(self, scheduler: TimerScheduler, actuator: Actuator, timing: PlaybackTiming = DEFAULT_TIMING) -> None:
        self._scheduler = scheduler
        self._actuator = actuator
        self._timing = timing
        self._tokens: List[int] = []

    def is_playing(self) -> bool:
        return bool(self._tokens)

    def play(
        self,
        stream: str,
        on_index: Optional[Callable[[int], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> int:
        """Schedule playback of stream. Returns the total playback length in milliseconds."""
        self.stop()
        pulses, total_ms = build_timeline(stream, self._timing)

        for pulse in pulses:
            self._tokens.append(self._scheduler.schedule(pulse.offset_ms, self._pulse_callback(pulse, on_index)))

        def finish() -> None:
            self._tokens.clear()
            if on_finished is not None:
                on_finished()

        self._tokens.append(self._scheduler.schedule(total_ms, finish))
        return total_ms

    def stop(self) -> None:
        for token in self._tokens:
            self._scheduler.cancel(token)
        self._tokens.clear()

    def _pulse_callback(self, pulse: PulseEvent, on_index: Optional[Callable[[int], None]]) -> Callable[[], None]:
        def fire() -> None:
            if on_index is not None:
                on_index(pulse.stream_index)
            self._actuator.emit_pulse(pulse.duration_ms)

        return fire


def _run_unit_tests() -> None:
    from trainer_clock import FakeClock, ManualTimerScheduler, RecordingActuator

    pulses, total_ms = build_timeline(".- / -")
    assert [(pulse.offset_ms, pulse.duration_ms) for pulse in pulses] == [(0, 200), (400, 600), (3600, 600)]
    assert total_ms == 4400

    clock = FakeClock()
    scheduler = ManualTimerScheduler(clock)
    actuator = RecordingActuator(clock)
    player = SignalPlayer(scheduler, actuator)
    finished = []
    player.play("..", on_finished=lambda: finished.append(clock.now_ms()))
    assert player.is_playing()
    scheduler.advance(10_000)
    assert actuator.pulses == [(0, 200), (400, 200)]
    assert finished == [800]
    assert not player.is_playing()


if __name__ == "__main__":
    _run_unit_tests()
    print("signal_player.py: ok")
