# -*- coding: utf-8 -*-
########################
# progress_recorder.py
########################
# Purpose:
# - Persist trainer progress for one user against a DocumentStore.
# - Owns the storage protocols: bounded run history, personal best, lifetime aggregates,
#   per-mode high streaks, per-character statistics, keyer completions, completed lessons and
#   daily challenge state.
#
# Design notes:
# - Sessions never depend on persistence outcome. Every store failure is caught here, logged, and
#   reported through the return value. Nothing raises into a running exercise.
# - Personal best and high streaks are max-merged inside run_transaction: read, compare, write only
#   when strictly greater. Retrying never lowers a stored value and never double-applies.
# - Completed lessons are a set-merge inside run_transaction: an id already present is never added twice.
# - Lifetime totals and keyer completions use the store's atomic increment, never read-modify-write.
# - Run history ids are derived from the run contents so a duplicate append overwrites itself.
# - Bounded history: after each append fetch the newest max_history runs (time descending). When the
#   page is full, every run after the last one on that page is deleted in one batch.
#
########################
# Interfaces:
# Public dataclasses:
# - RunRecordResult(ok: bool, new_personal_best: bool, pruned_count: int)
# - StatsSummary(personal_best_wpm, recent_avg_wpm, recent_avg_accuracy, lifetime_runs,
#                lifetime_avg_wpm, lifetime_avg_accuracy, high_streaks, keyer_completions, lessons_completed)
#
# Public classes:
# - class ProgressRecorder
#   - __init__(store: DocumentStore, user_id: str, *, max_history: int = 10)
#   - record_run(run: ScoreRun) -> RunRecordResult
#   - recent_runs(limit: Optional[int] = None) -> list[ScoreRun]
#   - update_high_streak(mode: StreakMode, streak: int) -> bool
#   - record_char_attempt(character: str, *, correct: bool, elapsed_ms: int) -> bool
#   - char_stats() -> dict[str, CharacterStat]
#   - increment_keyer_completion(profile_name: str) -> bool
#   - daily_challenge_info() -> tuple[int, str]
#   - record_daily_challenge(date_text: str, streak: int) -> bool
#   - completed_lessons() -> list[str]
#   - mark_lesson_complete(lesson_id: str) -> bool
#   - stats_summary() -> StatsSummary
#
########################

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

import scoring
from document_store import Document, DocumentStore, InMemoryDocumentStore, Transaction
from trainer_models import PRESET_PROFILES, CharacterStat, ScoreRun, StreakMode

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_HISTORY = 10

FIELD_PERSONAL_BEST = "highScore"
FIELD_LIFETIME_RUNS = "lifetimeRuns"
FIELD_LIFETIME_WPM_SUM = "lifetimeWpmSum"
FIELD_LIFETIME_ACCURACY_SUM = "lifetimeAccuracySum"
FIELD_CHAR_STATS = "charStats"
FIELD_DAILY_STREAK = "dailyChallengeStreak"
FIELD_DAILY_LAST_DATE = "lastDailyChallengeDate"
FIELD_COMPLETED_LESSONS = "completedLessons"

HIGH_STREAK_FIELDS: Dict[StreakMode, str] = {
    StreakMode.STANDARD: "practiceHighStreak",
    StreakMode.REVERSE: "reverseHighStreak",
    StreakMode.LISTENING: "listeningHighStreak",
    StreakMode.DAILY: "dailyHighStreak",
}


def keyer_completion_field(profile_name: str) -> str:
    return "keyer" + str(profile_name).strip().capitalize() + "Completions"


@dataclass(frozen=True)
class RunRecordResult:
    ok: bool
    new_personal_best: bool = False
    pruned_count: int = 0


@dataclass(frozen=True)
class StatsSummary:
    personal_best_wpm: Optional[float]
    recent_avg_wpm: Optional[float]
    recent_avg_accuracy: Optional[float]
    lifetime_runs: int
    lifetime_avg_wpm: Optional[float]
    lifetime_avg_accuracy: Optional[float]
    high_streaks: Dict[str, int] = field(default_factory=dict)
    keyer_completions: Dict[str, int] = field(default_factory=dict)
    lessons_completed: int = 0


def _number(document: Optional[Document], name: str, default: float = 0) -> float:
    if not document:
        return default
    value = document.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


class ProgressRecorder:
    def __init__(self, store: DocumentStore, user_id: str, *, max_history: int = DEFAULT_MAX_HISTORY) -> None:
        user_text = str(user_id or "").strip()
        if not user_text or "/" in user_text:
            raise ValueError("user_id must be a non-empty string without '/'")
        if int(max_history) <= 0:
            raise ValueError("max_history must be positive")
        self._store = store
        self._user_key = f"users/{user_text}"
        self._history_collection = f"{self._user_key}/run_history"
        self._max_history = int(max_history)

    @property
    def max_history(self) -> int:
        return self._max_history

    def _guard(self, action: str, fn: Callable[[], T], default: T) -> Tuple[bool, T]:
        try:
            return True, fn()
        except Exception as exc:
            logger.warning("Progress store %s failed for %s: %s", action, self._user_key, exc)
            return False, default

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def _run_key(self, run: ScoreRun) -> str:
        digest = hashlib.sha1(f"{run.timestamp_ms}|{run.wpm}|{run.accuracy}".encode("utf-8")).hexdigest()[:10]
        return f"{self._history_collection}/{int(run.timestamp_ms):013d}-{digest}"

    def record_run(self, run: ScoreRun) -> RunRecordResult:
        appended, _ = self._guard("history append", lambda: self._append_history(run), None)
        pruned_ok, pruned_count = self._guard("history prune", self._prune_history, 0) if appended else (False, 0)
        best_ok, new_best = self._guard("personal best", lambda: self._max_merge(FIELD_PERSONAL_BEST, run.wpm), False)
        totals_ok, _ = self._guard("lifetime totals", lambda: self._add_lifetime_totals(run), None)
        return RunRecordResult(
            ok=appended and pruned_ok and best_ok and totals_ok,
            new_personal_best=bool(new_best),
            pruned_count=int(pruned_count),
        )

    def _append_history(self, run: ScoreRun) -> None:
        self._store.set(
            self._run_key(run),
            {"wpm": float(run.wpm), "accuracy": float(run.accuracy), "timestamp": int(run.timestamp_ms)},
            merge=False,
        )

    def _prune_history(self) -> int:
        newest = self._store.query(
            self._history_collection,
            order_by="timestamp",
            descending=True,
            limit=self._max_history,
        )
        if len(newest) < self._max_history:
            return 0
        older = self._store.query(
            self._history_collection,
            order_by="timestamp",
            descending=True,
            start_after=newest[-1][0],
        )
        if not older:
            return 0
        self._store.delete_batch(key for key, _document in older)
        logger.debug("Pruned %d runs from %s", len(older), self._history_collection)
        return len(older)

    def _add_lifetime_totals(self, run: ScoreRun) -> None:
        self._store.increment(self._user_key, FIELD_LIFETIME_RUNS, 1)
        self._store.increment(self._user_key, FIELD_LIFETIME_WPM_SUM, float(run.wpm))
        self._store.increment(self._user_key, FIELD_LIFETIME_ACCURACY_SUM, float(run.accuracy))

    def _max_merge(self, field_name: str, value: float) -> bool:
        def apply(transaction: Transaction) -> bool:
            current = _number(transaction.get(self._user_key), field_name, default=0)
            if value > current:
                transaction.set(self._user_key, {field_name: value}, merge=True)
                return True
            return False

        return bool(self._store.run_transaction(apply))

    def recent_runs(self, limit: Optional[int] = None) -> List[ScoreRun]:
        page = self._max_history if limit is None else int(limit)
        _ok, rows = self._guard(
            "history read",
            lambda: self._store.query(self._history_collection, order_by="timestamp", descending=True, limit=page),
            [],
        )
        runs: List[ScoreRun] = []
        for _key, document in rows:
            try:
                runs.append(
                    ScoreRun(
                        wpm=float(document["wpm"]),
                        accuracy=float(document["accuracy"]),
                        timestamp_ms=int(document["timestamp"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                continue
        return runs

    # ------------------------------------------------------------------
    # Streaks and keyer
    # ------------------------------------------------------------------

    def update_high_streak(self, mode: StreakMode, streak: int) -> bool:
        """Returns True when a new high streak was stored."""
        field_name = HIGH_STREAK_FIELDS[mode]
        _ok, stored = self._guard("high streak", lambda: self._max_merge(field_name, int(streak)), False)
        return bool(stored)

    def increment_keyer_completion(self, profile_name: str) -> bool:
        field_name = keyer_completion_field(profile_name)
        ok, _ = self._guard("keyer completion", lambda: self._store.increment(self._user_key, field_name, 1), None)
        return ok

    # ------------------------------------------------------------------
    # Per-character statistics
    # ------------------------------------------------------------------

    def record_char_attempt(self, character: str, *, correct: bool, elapsed_ms: int) -> bool:
        key = str(character)[:1].upper()
        if not key:
            return False

        def apply(transaction: Transaction) -> None:
            document = transaction.get(self._user_key) or {}
            all_stats: Dict[str, Any] = dict(document.get(FIELD_CHAR_STATS) or {})
            previous = _stat_from_fields(all_stats.get(key))
            updated = previous.with_attempt(correct=correct, elapsed_ms=elapsed_ms)
            all_stats[key] = {
                "attempts": updated.attempts,
                "mistakes": updated.mistakes,
                "totalTimeMs": updated.total_time_ms,
            }
            transaction.set(self._user_key, {FIELD_CHAR_STATS: all_stats}, merge=True)

        ok, _ = self._guard("char attempt", lambda: self._store.run_transaction(apply), None)
        return ok

    def char_stats(self) -> Dict[str, CharacterStat]:
        _ok, document = self._guard("char stats read", lambda: self._store.get(self._user_key), None)
        raw = (document or {}).get(FIELD_CHAR_STATS) or {}
        if not isinstance(raw, dict):
            return {}
        return {str(key): _stat_from_fields(value) for key, value in raw.items() if key}

    # ------------------------------------------------------------------
    # Lessons
    # ------------------------------------------------------------------

    def completed_lessons(self) -> List[str]:
        _ok, document = self._guard("lessons read", lambda: self._store.get(self._user_key), None)
        return _lesson_ids((document or {}).get(FIELD_COMPLETED_LESSONS))

    def mark_lesson_complete(self, lesson_id: str) -> bool:
        """Adds lesson_id to the completed set. Returns True when the store was written."""
        lesson_text = str(lesson_id or "").strip()
        if not lesson_text:
            return False

        def apply(transaction: Transaction) -> bool:
            completed = _lesson_ids((transaction.get(self._user_key) or {}).get(FIELD_COMPLETED_LESSONS))
            if lesson_text in completed:
                return False
            transaction.set(self._user_key, {FIELD_COMPLETED_LESSONS: completed + [lesson_text]}, merge=True)
            return True

        _ok, stored = self._guard("lesson complete", lambda: self._store.run_transaction(apply), False)
        return bool(stored)

    # ------------------------------------------------------------------
    # Daily challenge
    # ------------------------------------------------------------------

    def daily_challenge_info(self) -> Tuple[int, str]:
        _ok, document = self._guard("daily info read", lambda: self._store.get(self._user_key), None)
        streak = int(_number(document, FIELD_DAILY_STREAK, default=0))
        last_date = (document or {}).get(FIELD_DAILY_LAST_DATE)
        return streak, last_date if isinstance(last_date, str) else ""

    def record_daily_challenge(self, date_text: str, streak: int) -> bool:
        ok, _ = self._guard(
            "daily record",
            lambda: self._store.set(
                self._user_key,
                {FIELD_DAILY_STREAK: int(streak), FIELD_DAILY_LAST_DATE: str(date_text)},
                merge=True,
            ),
            None,
        )
        if ok:
            self.update_high_streak(StreakMode.DAILY, int(streak))
        return ok

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def stats_summary(self) -> StatsSummary:
        _ok, document = self._guard("summary read", lambda: self._store.get(self._user_key), None)
        recent = self.recent_runs()

        lifetime_runs = int(_number(document, FIELD_LIFETIME_RUNS))
        lifetime_avg_wpm: Optional[float] = None
        lifetime_avg_accuracy: Optional[float] = None
        if lifetime_runs > 0:
            lifetime_avg_wpm = scoring.average_rounded([_number(document, FIELD_LIFETIME_WPM_SUM) / lifetime_runs])
            lifetime_avg_accuracy = scoring.average_rounded(
                [_number(document, FIELD_LIFETIME_ACCURACY_SUM) / lifetime_runs]
            )

        personal_best = (document or {}).get(FIELD_PERSONAL_BEST)
        return StatsSummary(
            personal_best_wpm=float(personal_best) if isinstance(personal_best, (int, float)) else None,
            recent_avg_wpm=scoring.average_rounded(run.wpm for run in recent),
            recent_avg_accuracy=scoring.average_rounded(run.accuracy for run in recent),
            lifetime_runs=lifetime_runs,
            lifetime_avg_wpm=lifetime_avg_wpm,
            lifetime_avg_accuracy=lifetime_avg_accuracy,
            high_streaks={mode.value: int(_number(document, name)) for mode, name in HIGH_STREAK_FIELDS.items()},
            keyer_completions={
                profile.name: int(_number(document, keyer_completion_field(profile.name))) for profile in PRESET_PROFILES
            },
            lessons_completed=len(_lesson_ids((document or {}).get(FIELD_COMPLETED_LESSONS))),
        )


def _lesson_ids(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, str) and item]


def _stat_from_fields(fields: Any) -> CharacterStat:
    if not isinstance(fields, dict):
        return CharacterStat()
    return CharacterStat(
        attempts=int(_number(fields, "attempts")),
        mistakes=int(_number(fields, "mistakes")),
        total_time_ms=int(_number(fields, "totalTimeMs")),
    )


def _run_unit_tests() -> None:
    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "u1", max_history=3)

    for index in range(5):
        result = recorder.record_run(ScoreRun(wpm=5.0 + index, accuracy=90.0, timestamp_ms=1000 + index))
        assert result.ok
    assert [run.timestamp_ms for run in recorder.recent_runs(limit=10)] == [1004, 1003, 1002]

    assert recorder.record_run(ScoreRun(wpm=1.0, accuracy=50.0, timestamp_ms=2000)).new_personal_best is False
    assert store.get("users/u1")[FIELD_PERSONAL_BEST] == 9.0

    assert recorder.update_high_streak(StreakMode.STANDARD, 4) is True
    assert recorder.update_high_streak(StreakMode.STANDARD, 2) is False
    assert store.get("users/u1")["practiceHighStreak"] == 4

    recorder.record_char_attempt("a", correct=False, elapsed_ms=700)
    recorder.record_char_attempt("A", correct=True, elapsed_ms=300)
    assert recorder.char_stats()["A"] == CharacterStat(attempts=2, mistakes=1, total_time_ms=1000)

    assert recorder.increment_keyer_completion("NORMAL")
    assert recorder.mark_lesson_complete("lesson_01") is True
    assert recorder.mark_lesson_complete("lesson_01") is False
    assert recorder.completed_lessons() == ["lesson_01"]

    summary = recorder.stats_summary()
    assert summary.lifetime_runs == 6
    assert summary.keyer_completions["NORMAL"] == 1
    assert summary.lessons_completed == 1


if __name__ == "__main__":
    _run_unit_tests()
    print("progress_recorder.py: ok")
