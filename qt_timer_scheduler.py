# -*- coding: utf-8 -*-
########################
# qt_timer_scheduler.py
########################
# Purpose:
# - TimerScheduler implementation on the Qt event loop.
# - Lets KeyerSession and SignalPlayer run in a live Qt application with the same code paths the
#   tests drive through ManualTimerScheduler.
#
# Design notes:
# - Each scheduled callback owns one single-shot QTimer parented to this QObject.
# - Everything runs on the GUI thread, so a cancel always happens-before a later timeout delivery.
#   A timer that was stopped never calls back.
#
########################
# Interfaces:
# Public classes:
# - class QtTimerScheduler(PyQt6.QtCore.QObject)
#   - schedule(delay_ms: int, callback: Callable[[], None]) -> int
#   - cancel(token: int) -> bool
#   - pending_count() -> int
#   - cancel_all() -> None
#
########################

from __future__ import annotations

from typing import Callable, Dict, Optional

from PyQt6.QtCore import QObject, QTimer


class QtTimerScheduler(QObject):
    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._timers: Dict[int, QTimer] = {}
        self._next_token = 1

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        token = self._next_token
        self._next_token += 1

        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(delay_ms)))
        timer.timeout.connect(lambda: self._fire(token, callback))
        self._timers[token] = timer
        timer.start()
        return token

    def cancel(self, token: int) -> bool:
        timer = self._timers.pop(int(token), None)
        if timer is None:
            return False
        timer.stop()
        timer.deleteLater()
        return True

    def pending_count(self) -> int:
        return len(self._timers)

    def cancel_all(self) -> None:
        for token in list(self._timers.keys()):
            self.cancel(token)

    def _fire(self, token: int, callback: Callable[[], None]) -> None:
        timer = self._timers.pop(token, None)
        if timer is None:
            return
        timer.deleteLater()
        callback()
