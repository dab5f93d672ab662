# -*- coding: utf-8 -*-
########################
# practice_quiz.py
########################
# Purpose:
# - Single-character practice quizzes with streaks, hints and per-character statistics.
# - Targeted drills that teach and then quiz the user's weakest characters.
#
# Design notes:
# - No Qt usage. Time comes from Clock, playback goes through SignalPlayer.
# - Modes:
#   - STANDARD: character shown, answer is its code.
#   - REVERSE: code shown, answer is the character.
#   - LISTENING: code is played, answer the code first, then the character.
# - Hint rule: revealing the hint resets the mode streak at once, and a correct answer after a
#   hint neither increments nor restores it.
# - Unaided correct answers persist the high streak through ProgressRecorder (max-merge).
# - Random prompts never repeat the previous character.
#
########################
# Interfaces:
# Public dataclasses:
# - QuizPrompt(character: str, code: str)
# - QuizResult(correct: bool, streak: int, expected: str, elapsed_ms: int)
#
# Public classes:
# - class PracticeQuiz
#   - __init__(mode: StreakMode, *, clock: Clock, recorder: Optional[ProgressRecorder] = None,
#              player: Optional[SignalPlayer] = None, characters: Optional[Sequence[str]] = None,
#              rng: Optional[random.Random] = None, track_streak: bool = True,
#              record_char_stats: Optional[bool] = None)
#   - next_prompt(character: Optional[str] = None) -> QuizPrompt
#   - current_prompt() -> Optional[QuizPrompt]
#   - reveal_hint() -> str
#   - play_prompt() -> int
#   - submit(answer: str) -> QuizResult
#   - streak() -> StreakCounter
# - class TargetedDrill
#   - __init__(recorder: ProgressRecorder, *, clock: Clock, count: int = 3)
#   - has_data() -> bool
#   - current_step() -> Optional[DrillStep]
#   - submit(answer: str) -> QuizResult
#   - advance() -> Optional[DrillStep]
#
########################

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

import adaptive_selector
import morse_codec
from progress_recorder import ProgressRecorder
from scoring import StreakCounter
from signal_player import SignalPlayer
from trainer_clock import Clock
from trainer_models import StreakMode

logger = logging.getLogger(__name__)

QUIZ_MODES = (StreakMode.STANDARD, StreakMode.REVERSE, StreakMode.LISTENING)


@dataclass(frozen=True)
class QuizPrompt:
    character: str
    code: str


@dataclass(frozen=True)
class QuizResult:
    correct: bool
    streak: int
    expected: str
    elapsed_ms: int


class PracticeQuiz:
    def __init__(
        self,
        mode: StreakMode,
        *,
        clock: Clock,
        recorder: Optional[ProgressRecorder] = None,
        player: Optional[SignalPlayer] = None,
        characters: Optional[Sequence[str]] = None,
        rng: Optional[random.Random] = None,
        track_streak: bool = True,
        record_char_stats: Optional[bool] = None,
    ) -> None:
        if mode not in QUIZ_MODES:
            raise ValueError(f"Unsupported quiz mode: {mode}")
        pool = [str(item).upper() for item in (characters if characters is not None else morse_codec.CODE_TABLE.keys())]
        pool = [item for item in pool if item in morse_codec.CODE_TABLE]
        if not pool:
            raise ValueError("characters must contain at least one encodable character")

        self._mode = mode
        self._clock = clock
        self._recorder = recorder
        self._player = player
        self._characters = pool
        self._rng = rng if rng is not None else random.Random()
        self._track_streak = bool(track_streak)
        self._record_char_stats = (mode is StreakMode.STANDARD) if record_char_stats is None else bool(record_char_stats)
        self._streak = StreakCounter(mode)

        self._prompt: Optional[QuizPrompt] = None
        self._prompt_start_ms = 0
        self._code_confirmed = False
        self._answered = False

    def mode(self) -> StreakMode:
        return self._mode

    def streak(self) -> StreakCounter:
        return self._streak

    def current_prompt(self) -> Optional[QuizPrompt]:
        return self._prompt

    def awaiting_character(self) -> bool:
        """LISTENING only: the code was answered correctly and the character is next."""
        return self._mode is StreakMode.LISTENING and self._code_confirmed and not self._answered

    def next_prompt(self, character: Optional[str] = None) -> QuizPrompt:
        if character is not None:
            chosen = str(character).upper()
            if chosen not in morse_codec.CODE_TABLE:
                raise ValueError(f"No code for character {character!r}")
        else:
            previous = self._prompt.character if self._prompt is not None else None
            candidates = [item for item in self._characters if item != previous] or list(self._characters)
            chosen = self._rng.choice(candidates)

        self._prompt = QuizPrompt(character=chosen, code=morse_codec.code_for(chosen))
        self._prompt_start_ms = self._clock.now_ms()
        self._code_confirmed = False
        self._answered = False
        self._streak.begin_prompt()
        return self._prompt

    def reveal_hint(self) -> str:
        prompt = self._require_prompt()
        self._streak.reveal_hint()
        if self._mode is StreakMode.REVERSE:
            return prompt.character
        return prompt.code

    def play_prompt(self) -> int:
        prompt = self._require_prompt()
        if self._player is None:
            raise RuntimeError("play_prompt requires a SignalPlayer")
        return self._player.play(prompt.code)

    def submit(self, answer: str) -> QuizResult:
        prompt = self._require_prompt()
        if self._answered:
            raise RuntimeError("Prompt already answered; call next_prompt() first")
        elapsed_ms = self._clock.now_ms() - self._prompt_start_ms
        text = (answer or "").strip()

        if self._mode is StreakMode.REVERSE:
            return self._finish(text.upper() == prompt.character, prompt.character, elapsed_ms)

        if self._mode is StreakMode.LISTENING and self._code_confirmed:
            return self._finish(text.upper() == prompt.character, prompt.character, elapsed_ms)

        correct = text == prompt.code
        if self._mode is StreakMode.LISTENING and correct:
            # Code phase passed; the character answer decides the prompt.
            self._code_confirmed = True
            return QuizResult(correct=True, streak=self._streak.value, expected=prompt.code, elapsed_ms=elapsed_ms)
        return self._finish(correct, prompt.code, elapsed_ms)

    def _finish(self, correct: bool, expected: str, elapsed_ms: int) -> QuizResult:
        prompt = self._require_prompt()
        self._answered = True
        if self._record_char_stats and self._recorder is not None:
            self._recorder.record_char_attempt(prompt.character, correct=correct, elapsed_ms=elapsed_ms)

        streak_value = self._streak.value
        if self._track_streak:
            hint_shown = self._streak.hint_shown
            streak_value = self._streak.record_answer(correct)
            if correct and not hint_shown and self._recorder is not None:
                self._recorder.update_high_streak(self._mode, streak_value)
        return QuizResult(correct=correct, streak=streak_value, expected=expected, elapsed_ms=elapsed_ms)

    def _require_prompt(self) -> QuizPrompt:
        if self._prompt is None:
            raise RuntimeError("No active prompt; call next_prompt() first")
        return self._prompt


class TargetedDrill:
    """Teach-then-quiz walk over the weakest characters."""

    def __init__(self, recorder: ProgressRecorder, *, clock: Clock, count: int = adaptive_selector.DEFAULT_WEAKEST_COUNT) -> None:
        self._recorder = recorder
        self._clock = clock
        self._characters = adaptive_selector.weakest_characters(recorder.char_stats(), count=count)
        self._steps: List[adaptive_selector.DrillStep] = adaptive_selector.targeted_drill_plan(self._characters)
        self._index = 0
        self._quiz = PracticeQuiz(
            StreakMode.STANDARD,
            clock=clock,
            recorder=recorder,
            characters=self._characters or None,
            track_streak=False,
            record_char_stats=True,
        )
        self._enter_step()

    def characters(self) -> List[str]:
        return list(self._characters)

    def has_data(self) -> bool:
        return bool(self._steps)

    def is_finished(self) -> bool:
        return self._index >= len(self._steps)

    def current_step(self) -> Optional[adaptive_selector.DrillStep]:
        if self.is_finished():
            return None
        return self._steps[self._index]

    def submit(self, answer: str) -> QuizResult:
        step = self.current_step()
        if step is None or step.kind != adaptive_selector.STEP_QUIZ:
            raise RuntimeError("The current drill step is not a quiz")
        return self._quiz.submit(answer)

    def advance(self) -> Optional[adaptive_selector.DrillStep]:
        if not self.is_finished():
            self._index += 1
        self._enter_step()
        return self.current_step()

    def _enter_step(self) -> None:
        step = self.current_step()
        if step is not None and step.kind == adaptive_selector.STEP_QUIZ:
            self._quiz.next_prompt(step.character)


def _run_unit_tests() -> None:
    from document_store import InMemoryDocumentStore
    from trainer_clock import FakeClock

    clock = FakeClock()
    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "quiz")
    quiz = PracticeQuiz(StreakMode.STANDARD, clock=clock, recorder=recorder, rng=random.Random(7))

    for _ in range(3):
        prompt = quiz.next_prompt()
        clock.advance_ms(800)
        assert quiz.submit(prompt.code).correct
    assert quiz.streak().value == 3
    assert store.get("users/quiz")["practiceHighStreak"] == 3

    prompt = quiz.next_prompt("K")
    assert quiz.reveal_hint() == "-.-"
    assert quiz.streak().value == 0
    assert quiz.submit("-.-").streak == 0

    quiz.next_prompt("K")
    assert quiz.submit("...").correct is False
    assert recorder.char_stats()["K"].mistakes == 1

    drill = TargetedDrill(recorder, clock=clock)
    assert drill.characters()[0] == "K"
    assert drill.current_step().kind == "teach"
    assert drill.advance().kind == "quiz"
    assert drill.submit("-.-").correct


if __name__ == "__main__":
    _run_unit_tests()
    print("practice_quiz.py: ok")
