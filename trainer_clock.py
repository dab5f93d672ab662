# -*- coding: utf-8 -*-
########################
# trainer_clock.py
########################
# Purpose:
# - Single source of time and deferred actions for trainer sessions.
# - Defines the Clock, TimerScheduler and Actuator seams the keyer and scoring code depend on.
#
# Design notes:
# - Session code must read time only through Clock.now_ms and defer work only through
#   TimerScheduler.schedule. This keeps sessions testable with FakeClock + ManualTimerScheduler.
# - No Qt usage here. The Qt event loop implementation lives in qt_timer_scheduler.py.
# - ManualTimerScheduler fires due timers in (deadline, schedule order) order and moves the fake
#   clock to each deadline before firing, so callbacks observe their own deadline as "now".
# - Cancelling an unknown or already fired token is a no-op that returns False.
#
########################
# Interfaces:
# Public protocols:
# - Clock: now_ms() -> int
# - TimerScheduler: schedule(delay_ms: int, callback: Callable[[], None]) -> int, cancel(token: int) -> bool
# - Actuator: emit_pulse(duration_ms: int) -> None
#
# Public classes:
# - class MonotonicClock
# - class FakeClock
#   - set_ms(now_ms: int) -> None
#   - advance_ms(delta_ms: int) -> int
# - class ManualTimerScheduler
#   - __init__(clock: FakeClock)
#   - pending_count() -> int
#   - advance(delta_ms: int) -> int
# - class NullActuator
# - class RecordingActuator
#   - pulses: list[tuple[int, int]]   (now_ms, duration_ms)
#
########################

from __future__ import annotations

import heapq
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Protocol, Tuple, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now_ms(self) -> int:
        ...


@runtime_checkable
class TimerScheduler(Protocol):
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        ...

    def cancel(self, token: int) -> bool:
        ...


@runtime_checkable
class Actuator(Protocol):
    def emit_pulse(self, duration_ms: int) -> None:
        ...


class MonotonicClock:
    def now_ms(self) -> int:
        return time.monotonic_ns() // 1_000_000


class FakeClock:
    def __init__(self, start_ms: int = 0) -> None:
        self._now_ms = int(start_ms)

    def now_ms(self) -> int:
        return self._now_ms

    def set_ms(self, now_ms: int) -> None:
        value = int(now_ms)
        if value < self._now_ms:
            raise ValueError("FakeClock cannot move backwards")
        self._now_ms = value

    def advance_ms(self, delta_ms: int) -> int:
        self.set_ms(self._now_ms + int(delta_ms))
        return self._now_ms


@dataclass(order=True)
class _PendingTimer:
    deadline_ms: int
    token: int
    callback: Callable[[], None] = field(compare=False)


class ManualTimerScheduler:
    """Deterministic scheduler driven by a FakeClock.

    Nothing fires on its own. Tests call advance(delta_ms) and every timer whose deadline
    falls inside the window fires, including timers scheduled by callbacks during the same
    advance.
    """

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self._heap: List[_PendingTimer] = []
        self._live: Dict[int, _PendingTimer] = {}
        self._next_token = 1

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        token = self._next_token
        self._next_token += 1
        pending = _PendingTimer(
            deadline_ms=self._clock.now_ms() + max(0, int(delay_ms)),
            token=token,
            callback=callback,
        )
        heapq.heappush(self._heap, pending)
        self._live[token] = pending
        return token

    def cancel(self, token: int) -> bool:
        return self._live.pop(int(token), None) is not None

    def pending_count(self) -> int:
        return len(self._live)

    def advance(self, delta_ms: int) -> int:
        """Advance the clock by delta_ms, firing due timers. Returns the number fired."""
        target_ms = self._clock.now_ms() + int(delta_ms)
        fired = 0
        while True:
            self._discard_cancelled_head()
            if not self._heap or self._heap[0].deadline_ms > target_ms:
                break
            pending = heapq.heappop(self._heap)
            del self._live[pending.token]
            self._clock.set_ms(max(self._clock.now_ms(), pending.deadline_ms))
            pending.callback()
            fired += 1
        self._clock.set_ms(target_ms)
        return fired

    def _discard_cancelled_head(self) -> None:
        while self._heap and self._heap[0].token not in self._live:
            heapq.heappop(self._heap)


class NullActuator:
    def emit_pulse(self, duration_ms: int) -> None:
        return None


class RecordingActuator:
    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self.pulses: List[Tuple[int, int]] = []

    def emit_pulse(self, duration_ms: int) -> None:
        self.pulses.append((self._clock.now_ms(), int(duration_ms)))


def _run_unit_tests() -> None:
    clock = FakeClock()
    scheduler = ManualTimerScheduler(clock)
    fired: List[Tuple[str, int]] = []

    scheduler.schedule(100, lambda: fired.append(("a", clock.now_ms())))
    cancelled = scheduler.schedule(50, lambda: fired.append(("b", clock.now_ms())))
    assert scheduler.cancel(cancelled) is True
    assert scheduler.cancel(cancelled) is False

    def chain() -> None:
        fired.append(("c", clock.now_ms()))
        scheduler.schedule(30, lambda: fired.append(("d", clock.now_ms())))

    scheduler.schedule(60, chain)
    assert scheduler.advance(99) == 2
    assert fired == [("c", 60), ("d", 90)]
    assert clock.now_ms() == 99
    assert scheduler.advance(1) == 1
    assert fired[-1] == ("a", 100)
    assert scheduler.pending_count() == 0

    actuator = RecordingActuator(clock)
    actuator.emit_pulse(100)
    assert actuator.pulses == [(100, 100)]


if __name__ == "__main__":
    _run_unit_tests()
    print("trainer_clock.py: ok")
