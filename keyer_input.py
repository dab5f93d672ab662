# -*- coding: utf-8 -*-
########################
# keyer_input.py
########################
# Purpose:
# - Single keyboard listener for the straight-key keyer.
# - Translates QKeyEvent press/release into KeyerSession.press/release and emits Qt signals.
#
# Design notes:
# - This must be the only keyer input source. No duplicate key mapping elsewhere.
# - Debounce rules:
#   - Ignore auto repeat, so holding the key is one long press, not many short ones.
#   - Track pressed keys to avoid duplicate presses from two bound keys at once.
# - Focus loss releases the key so a held press never leaks into the next session.
#
########################
# Interfaces:
# Public classes:
# - class KeyerInput(PyQt6.QtCore.QObject)
#   - Signals:
#     - keyStateChanged(bool)   True on key down, False on key up
#     - symbolKeyed(str)        "." or "-" after each release
#   - Methods:
#     - handle_key_press(event: QKeyEvent) -> bool
#     - handle_key_release(event: QKeyEvent) -> bool
#     - clear_pressed_keys() -> None
#     - reset_stats() -> None
#
# Inputs:
# - Raw QKeyEvent from the Qt event loop.
#
# Outputs:
# - press/release calls on the bound KeyerSession.
#
########################

from __future__ import annotations

from typing import Iterable, Optional, Set

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent

from keyer import KeyerSession


def _default_key_codes() -> Set[int]:
    """Space is the straight key. Return and Enter act as a second key for accessibility."""
    return {int(Qt.Key.Key_Space), int(Qt.Key.Key_Return), int(Qt.Key.Key_Enter)}


class KeyerInput(QObject):
    keyStateChanged = pyqtSignal(bool)
    symbolKeyed = pyqtSignal(str)

    def __init__(
        self,
        session: KeyerSession,
        parent: Optional[QObject] = None,
        key_codes: Optional[Iterable[int]] = None,
    ) -> None:
        super().__init__(parent)
        self._session = session
        self._key_codes: Set[int] = (
            {int(code) for code in key_codes} if key_codes is not None else _default_key_codes()
        )
        self._pressed_keys: Set[int] = set()

        self._total_presses: int = 0
        self._ignored_presses: int = 0

    # ------------------------------------------------------------------
    # Public API used by keyer_harness
    # ------------------------------------------------------------------

    def handle_key_press(self, event: QKeyEvent) -> bool:
        """Returns True if this router consumed the event."""
        key_code = int(event.key())
        if key_code not in self._key_codes:
            return False

        if event.isAutoRepeat() or self._pressed_keys:
            self._ignored_presses += 1
            self._pressed_keys.add(key_code)
            return True

        self._pressed_keys.add(key_code)
        if self._session.press():
            self._total_presses += 1
            self.keyStateChanged.emit(True)
        else:
            self._ignored_presses += 1
        return True

    def handle_key_release(self, event: QKeyEvent) -> bool:
        key_code = int(event.key())
        if key_code not in self._key_codes:
            return False
        if event.isAutoRepeat():
            return True

        self._pressed_keys.discard(key_code)
        if self._pressed_keys:
            return True
        self._release_session()
        return True

    def clear_pressed_keys(self) -> None:
        """Called on focus loss or window deactivation."""
        had_pressed = bool(self._pressed_keys)
        self._pressed_keys.clear()
        if had_pressed:
            self._release_session()

    def reset_stats(self) -> None:
        self._total_presses = 0
        self._ignored_presses = 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _release_session(self) -> None:
        symbol = self._session.release()
        if symbol is None:
            return
        self.keyStateChanged.emit(False)
        self.symbolKeyed.emit(symbol)

    @property
    def key_codes(self) -> Set[int]:
        return set(self._key_codes)

    @property
    def total_presses(self) -> int:
        return self._total_presses

    @property
    def ignored_presses(self) -> int:
        return self._ignored_presses
