# -*- coding: utf-8 -*-
########################
# lessons.py
########################
# Purpose:
# - Ordered lesson catalog for the Learn path.
# - LessonSession walks one lesson: teach each character, then quiz its code.
#
# Design notes:
# - No Qt usage. The catalog is static content; only completion is persisted.
# - A lesson uses the same teach-then-quiz plan as targeted drills, over the lesson's characters
#   in catalog order.
# - Lesson quizzes do not touch mode streaks or per-character statistics.
# - Reaching the end of the plan marks the lesson complete through ProgressRecorder exactly once per
#   session. The recorder set-merges, so finishing a lesson again never duplicates the id.
#
########################
# Interfaces:
# Public dataclasses:
# - Lesson(lesson_id: str, title: str, characters: tuple[str, ...])
#
# Public constants:
# - LESSONS: tuple[Lesson, ...]   (catalog order)
#
# Public functions:
# - lesson_by_id(lesson_id: str) -> Lesson
# - next_lesson(completed: Iterable[str]) -> Optional[Lesson]
#
# Public classes:
# - class LessonSession
#   - __init__(lesson: Lesson, *, clock: Clock, recorder: Optional[ProgressRecorder] = None)
#   - current_step() -> Optional[DrillStep]
#   - submit(answer: str) -> QuizResult
#   - advance() -> Optional[DrillStep]
#   - is_finished() -> bool
#
########################

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import adaptive_selector
import morse_codec
from practice_quiz import PracticeQuiz, QuizResult
from progress_recorder import ProgressRecorder
from trainer_clock import Clock
from trainer_models import StreakMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Lesson:
    lesson_id: str
    title: str
    characters: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.characters:
            raise ValueError(f"Lesson {self.lesson_id} has no characters")
        for character in self.characters:
            if character not in morse_codec.CODE_TABLE:
                raise ValueError(f"Lesson {self.lesson_id} uses {character!r}, which has no code")


def _lesson(lesson_id: str, title: str, characters: str) -> Lesson:
    return Lesson(lesson_id=lesson_id, title=title, characters=tuple(characters.split()))


LESSONS: Tuple[Lesson, ...] = (
    _lesson("lesson_01", "The Basics", "E T I M"),
    _lesson("lesson_02", "Common Letters", "A N S O H"),
    _lesson("lesson_03", "Mirrors & Opposites", "R K D U G W"),
    _lesson("lesson_04", "Rhythm & Flow", "B V F L P"),
    _lesson("lesson_05", "Complex Characters", "Q J X Y Z C"),
    _lesson("lesson_06", "Numbers 1-5", "1 2 3 4 5"),
    _lesson("lesson_07", "Numbers 6-0", "6 7 8 9 0"),
)


def lesson_by_id(lesson_id: str) -> Lesson:
    for lesson in LESSONS:
        if lesson.lesson_id == lesson_id:
            return lesson
    raise ValueError(f"Unknown lesson: {lesson_id!r}")


def next_lesson(completed: Iterable[str]) -> Optional[Lesson]:
    """First lesson in catalog order that is not completed yet."""
    done = set(completed)
    for lesson in LESSONS:
        if lesson.lesson_id not in done:
            return lesson
    return None


class LessonSession:
    def __init__(self, lesson: Lesson, *, clock: Clock, recorder: Optional[ProgressRecorder] = None) -> None:
        self._lesson = lesson
        self._recorder = recorder
        self._steps: List[adaptive_selector.DrillStep] = adaptive_selector.targeted_drill_plan(lesson.characters)
        self._index = 0
        self._completion_recorded = False
        self._quiz = PracticeQuiz(
            StreakMode.STANDARD,
            clock=clock,
            characters=lesson.characters,
            track_streak=False,
            record_char_stats=False,
        )
        self._enter_step()

    @property
    def lesson(self) -> Lesson:
        return self._lesson

    def is_finished(self) -> bool:
        return self._index >= len(self._steps)

    def current_step(self) -> Optional[adaptive_selector.DrillStep]:
        if self.is_finished():
            return None
        return self._steps[self._index]

    def submit(self, answer: str) -> QuizResult:
        step = self.current_step()
        if step is None or step.kind != adaptive_selector.STEP_QUIZ:
            raise RuntimeError("The current lesson step is not a quiz")
        return self._quiz.submit(answer)

    def advance(self) -> Optional[adaptive_selector.DrillStep]:
        if not self.is_finished():
            self._index += 1
        self._enter_step()
        return self.current_step()

    def _enter_step(self) -> None:
        step = self.current_step()
        if step is None:
            self._record_completion()
        elif step.kind == adaptive_selector.STEP_QUIZ:
            self._quiz.next_prompt(step.character)

    def _record_completion(self) -> None:
        if self._completion_recorded:
            return
        self._completion_recorded = True
        logger.info("Lesson %s finished", self._lesson.lesson_id)
        if self._recorder is not None:
            self._recorder.mark_lesson_complete(self._lesson.lesson_id)


def _run_unit_tests() -> None:
    from document_store import InMemoryDocumentStore
    from trainer_clock import FakeClock

    assert [lesson.lesson_id for lesson in LESSONS] == [f"lesson_0{index}" for index in range(1, 8)]
    assert lesson_by_id("lesson_02").characters == ("A", "N", "S", "O", "H")
    assert next_lesson([]) is LESSONS[0]
    assert next_lesson(["lesson_01"]) is LESSONS[1]
    assert next_lesson(lesson.lesson_id for lesson in LESSONS) is None

    try:
        lesson_by_id("lesson_99")
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for an unknown lesson id")

    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "learner")
    session = LessonSession(LESSONS[0], clock=FakeClock(), recorder=recorder)
    assert (session.current_step().kind, session.current_step().character) == ("teach", "E")
    assert session.advance().kind == "quiz"
    assert session.submit(".").correct
    while not session.is_finished():
        session.advance()
    session.advance()
    assert recorder.completed_lessons() == ["lesson_01"]
    assert recorder.char_stats() == {}


if __name__ == "__main__":
    _run_unit_tests()
    print("lessons.py: ok")
