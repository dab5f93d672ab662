# -*- coding: utf-8 -*-
########################
# keyer_harness.py
########################
# Purpose:
# - Keyer practice window for local testing and iteration.
# - Integrates KeyerInput + QtTimerScheduler + KeyerSession + MonotonicClock + ProgressRecorder.
#
# Design notes:
# - All timing decisions stay inside KeyerSession. The window only forwards key events and repaints
#   labels from session queries.
# - Controls never take keyboard focus, so Space and Return always reach the window.
# - Focus loss releases any held key, so a press can never be stuck across window switches.
# - Actuation is a visual flash of the key indicator, driven by single-shot QTimers.
# - The profile selector offers the presets, except that the configured profile keeps its
#   overridden timings when selected again.
#
########################
# Interfaces:
# Public classes:
# - class KeyerHarnessWindow(PyQt6.QtWidgets.QMainWindow)
#   - __init__(*, profile: DifficultyProfile, recorder: Optional[ProgressRecorder] = None,
#              tone_pulse_ms: int = 100, tone_repeat_ms: int = 90)
#   - session -> KeyerSession
#
# Public functions:
# - profile_choices(configured: DifficultyProfile) -> dict[str, DifficultyProfile]
# - main() -> int
#
# Inputs:
# - Space / Return key press and release (KeyerInput handles QKeyEvent).
#
# Outputs:
# - Target phrase, keyed code, decoded preview, error and completion status.
#
########################

from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import phrases
from progress_recorder import ProgressRecorder
from trainer_models import NORMAL, PRESET_PROFILES, DifficultyProfile, profile_by_name

logger = logging.getLogger(__name__)


def profile_choices(configured: DifficultyProfile) -> Dict[str, DifficultyProfile]:
    """Preset profiles by name, with the configured profile standing in for its preset."""
    choices: Dict[str, DifficultyProfile] = {item.name: item for item in PRESET_PROFILES}
    choices[configured.name] = configured
    return choices


class KeyerHarnessWindow:
    pass


def _create_window_class():
    from PyQt6.QtCore import QEvent, QObject, Qt, QTimer
    from PyQt6.QtWidgets import (
        QComboBox,
        QHBoxLayout,
        QLabel,
        QMainWindow,
        QPushButton,
        QVBoxLayout,
        QWidget,
    )

    import morse_codec
    from keyer import BOUNDARY_WORD, KeyerSession
    from keyer_input import KeyerInput
    from qt_timer_scheduler import QtTimerScheduler
    from trainer_clock import MonotonicClock

    class _FlashActuator:
        """Lights the key indicator for the pulse duration."""

        def __init__(self, indicator: QLabel) -> None:
            self._indicator = indicator
            self._lit_until_serial = 0

        def emit_pulse(self, duration_ms: int) -> None:
            self._lit_until_serial += 1
            serial = self._lit_until_serial
            self._indicator.setStyleSheet("background: #f5c542; border-radius: 8px;")
            QTimer.singleShot(int(duration_ms), lambda: self._dim(serial))

        def _dim(self, serial: int) -> None:
            if serial == self._lit_until_serial:
                self._indicator.setStyleSheet("background: #333333; border-radius: 8px;")

    class _KeyerHarnessWindow(QMainWindow):
        def __init__(
            self,
            *,
            profile: DifficultyProfile = NORMAL,
            recorder: Optional[ProgressRecorder] = None,
            tone_pulse_ms: int = 100,
            tone_repeat_ms: int = 90,
        ) -> None:
            super().__init__()
            self.setWindowTitle("Morse Trainer Keyer")
            self._recorder = recorder

            root = QWidget(self)
            root_layout = QVBoxLayout(root)
            controls = QWidget(root)
            controls_layout = QHBoxLayout(controls)

            self._profile_combo = QComboBox(controls)
            self._profiles = profile_choices(profile)
            self._profile_combo.addItems(list(self._profiles.keys()))
            self._profile_combo.setCurrentText(profile.name)
            self._new_phrase_button = QPushButton("New phrase", controls)
            self._clear_button = QPushButton("Clear", controls)
            self._indicator = QLabel("", controls)
            self._indicator.setFixedSize(24, 24)
            self._indicator.setStyleSheet("background: #333333; border-radius: 8px;")

            controls_layout.addWidget(QLabel("Profile:", controls))
            controls_layout.addWidget(self._profile_combo)
            controls_layout.addWidget(self._new_phrase_button)
            controls_layout.addWidget(self._clear_button)
            controls_layout.addWidget(self._indicator)
            for control in (self._profile_combo, self._new_phrase_button, self._clear_button):
                control.setFocusPolicy(Qt.FocusPolicy.NoFocus)

            self._target_label = QLabel("", root)
            self._target_code_label = QLabel("", root)
            self._code_label = QLabel("", root)
            self._decoded_label = QLabel("", root)
            self._status_label = QLabel("", root)

            root_layout.addWidget(controls)
            root_layout.addWidget(self._target_label)
            root_layout.addWidget(self._target_code_label)
            root_layout.addWidget(self._code_label)
            root_layout.addWidget(self._decoded_label)
            root_layout.addWidget(self._status_label)
            self.setCentralWidget(root)

            self._scheduler = QtTimerScheduler(self)
            self._session = KeyerSession(
                clock=MonotonicClock(),
                scheduler=self._scheduler,
                actuator=_FlashActuator(self._indicator),
                profile=profile,
                tone_pulse_ms=tone_pulse_ms,
                tone_repeat_ms=tone_repeat_ms,
                on_complete=self._on_complete,
                on_boundary=self._on_boundary,
            )
            self._input = KeyerInput(self._session, parent=self)
            self._input.symbolKeyed.connect(lambda _symbol: self._refresh())
            self._input.keyStateChanged.connect(lambda _pressed: self._refresh())

            self._profile_combo.currentTextChanged.connect(self._on_profile_changed)
            self._new_phrase_button.clicked.connect(self._new_phrase)
            self._clear_button.clicked.connect(self._clear)

            self._phrase = ""
            self._new_phrase()
            self.installEventFilter(self)

        @property
        def session(self) -> KeyerSession:
            return self._session

        def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
            if event.type() == QEvent.Type.WindowDeactivate:
                self._input.clear_pressed_keys()
            return super().eventFilter(watched, event)

        def keyPressEvent(self, event) -> None:  # noqa: N802
            if not self._input.handle_key_press(event):
                super().keyPressEvent(event)

        def keyReleaseEvent(self, event) -> None:  # noqa: N802
            if not self._input.handle_key_release(event):
                super().keyReleaseEvent(event)

        def closeEvent(self, event) -> None:  # noqa: N802
            self._scheduler.cancel_all()
            super().closeEvent(event)

        # ------------------------------------------------------------------
        # Handlers
        # ------------------------------------------------------------------

        def _on_profile_changed(self, name: str) -> None:
            self._session.set_profile(self._profiles[name])
            self._new_phrase()

        def _new_phrase(self) -> None:
            self._phrase = phrases.pick_phrase(self._session.profile(), exclude=self._phrase)
            self._session.reset(target_stream=morse_codec.encode(self._phrase))
            self._input.reset_stats()
            self._refresh()

        def _clear(self) -> None:
            self._session.reset()
            self._refresh()

        def _on_boundary(self, kind: str) -> None:
            if kind == BOUNDARY_WORD:
                logger.debug("Word boundary keyed")
            self._refresh()

        def _on_complete(self) -> None:
            if self._recorder is not None:
                self._recorder.increment_keyer_completion(self._session.profile().name)
            self._refresh()

        def _refresh(self) -> None:
            profile = self._session.profile()
            self._target_label.setText(f"Target: {self._phrase}")
            self._target_code_label.setText(f"Code: {self._session.target_stream()}")
            self._code_label.setText(f"Keyed: {self._session.displayed_code()}")
            self._decoded_label.setText(f"Decoded: {self._session.decoded_text()}")
            if self._session.is_complete():
                status = "Complete! Press New phrase to continue."
            elif self._session.is_error():
                status = "Mismatch. Press Clear to start over."
            else:
                status = (
                    f"{profile.name}: dot < {profile.dit_threshold_ms} ms, "
                    f"letter {profile.letter_gap_ms} ms, word {profile.word_gap_ms} ms"
                )
            self._status_label.setText(status)

    return _KeyerHarnessWindow


KeyerHarnessWindow = _create_window_class()


def _run_chunk_tests() -> None:
    import keyer
    import morse_codec
    from trainer_clock import FakeClock, ManualTimerScheduler

    # Keyed "SOS" end to end with the relaxed profile.
    clock = FakeClock()
    scheduler = ManualTimerScheduler(clock)
    relaxed = profile_by_name("relaxed")
    session = keyer.KeyerSession(clock=clock, scheduler=scheduler, profile=relaxed, target_stream=morse_codec.encode("SOS"))

    def key(symbol: str) -> None:
        session.press()
        scheduler.advance(100 if symbol == "." else relaxed.dit_threshold_ms + 50)
        session.release()
        scheduler.advance(50)

    for letter_code in ("...", "---", "..."):
        for symbol in letter_code:
            key(symbol)
        scheduler.advance(relaxed.letter_gap_ms)
    assert session.is_complete()
    assert session.decoded_text() == "SOS"

    tuned = DifficultyProfile("NORMAL", dit_threshold_ms=150, letter_gap_ms=500, word_gap_ms=1500)
    choices = profile_choices(tuned)
    assert choices["NORMAL"] is tuned
    assert choices["FAST"] is profile_by_name("fast")


def _run_gui(profile: DifficultyProfile) -> int:
    import sys

    from PyQt6.QtWidgets import QApplication

    from document_store import InMemoryDocumentStore

    app = QApplication(sys.argv)
    window = KeyerHarnessWindow(profile=profile, recorder=ProgressRecorder(InMemoryDocumentStore(), "local"))
    window.resize(640, 260)
    window.show()
    return int(app.exec())


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--run-tests",
        action="store_true",
        help="Run pure logic tests (no Qt).",
    )
    parser.add_argument(
        "--profile",
        default=NORMAL.name,
        help="Keyer profile: RELAXED, NORMAL or FAST.",
    )
    return parser


def main() -> int:
    args = build_argument_parser().parse_args()
    if args.run_tests:
        _run_chunk_tests()
        print("Chunk tests passed.")
        return 0
    return _run_gui(profile_by_name(args.profile))


if __name__ == "__main__":
    raise SystemExit(main())
