"""
test_trainer.py

pytest suite for the Morse trainer core: codec, keyer timing, scoring, adaptive selection,
persistence protocols, game modes, configuration and the CLI.

Every module's inline _run_unit_tests() is collected as well, so `python <module>.py` and pytest
exercise the same checks.
"""

from __future__ import annotations

import datetime as dt
import importlib
import json
import random

import pytest

import adaptive_selector
import morse_codec
import scoring
from challenge_session import ChallengeSession
from config import AppConfig, load_config
from daily_challenge import DailyChallenge
from document_store import InMemoryDocumentStore, StoreError
from keyer import BOUNDARY_LETTER, BOUNDARY_WORD, KeyerSession, KeyerState
from lessons import LESSONS, LessonSession, lesson_by_id, next_lesson
from practice_quiz import PracticeQuiz
from progress_recorder import ProgressRecorder
from signal_player import SignalPlayer
from trainer_clock import FakeClock, ManualTimerScheduler, RecordingActuator
from trainer_models import FAST, NORMAL, PRESET_PROFILES, RELAXED, CharacterStat, ScoreRun, SignalToken, StreakMode


SELF_TESTED_MODULES = [
    "trainer_models",
    "morse_codec",
    "trainer_clock",
    "keyer",
    "scoring",
    "signal_player",
    "adaptive_selector",
    "document_store",
    "progress_recorder",
    "challenge_session",
    "practice_quiz",
    "daily_challenge",
    "phrases",
    "lessons",
]


def make_keyer(profile=NORMAL, target_text: str = "", **kwargs):
    clock = FakeClock()
    scheduler = ManualTimerScheduler(clock)
    session = KeyerSession(
        clock=clock,
        scheduler=scheduler,
        profile=profile,
        target_stream=morse_codec.encode(target_text) if target_text else "",
        **kwargs,
    )
    return clock, scheduler, session


def key_symbol(scheduler: ManualTimerScheduler, session: KeyerSession, held_ms: int) -> str:
    assert session.press()
    scheduler.advance(held_ms)
    return session.release()


class FailingStore(InMemoryDocumentStore):
    def set(self, key, fields, *, merge=True):
        raise StoreError("offline")

    def increment(self, key, field, delta):
        raise StoreError("offline")

    def run_transaction(self, fn):
        raise StoreError("offline")

    def query(self, collection, **kwargs):
        raise StoreError("offline")


# =============================================================================
# Inline self-tests
# =============================================================================


@pytest.mark.parametrize("module_name", SELF_TESTED_MODULES)
def test_inline_self_tests(module_name):
    module = importlib.import_module(module_name)
    module._run_unit_tests()


# =============================================================================
# Codec
# =============================================================================


def test_round_trip_for_table_characters():
    rng = random.Random(1234)
    alphabet = sorted(morse_codec.CODE_TABLE.keys())
    samples = ["sos", "Hello World", "cq cq de k1abc", "what hath god wrought?"]
    for _ in range(50):
        words = ["".join(rng.choice(alphabet) for _ in range(rng.randint(1, 6))) for _ in range(rng.randint(1, 4))]
        samples.append(" ".join(words))
    for text in samples:
        assert morse_codec.decode(morse_codec.encode(text)) == text.upper()


def test_encode_uses_canonical_separators():
    assert morse_codec.encode("hi there") == ".... .. / - .... . .-. ."


def test_unknown_characters_and_codes_use_placeholders():
    assert morse_codec.encode("A#") == ".- " + morse_codec.UNKNOWN_CODE
    assert morse_codec.decode("........") == morse_codec.UNKNOWN_GLYPH


def test_decode_accepts_trailing_separator():
    assert morse_codec.decode("... --- ... / ") == "SOS"
    assert morse_codec.decode("") == ""


def test_word_boundary_promotion_is_idempotent():
    once = morse_codec.promote_word_boundary("... ---")
    assert once == "... --- / "
    assert morse_codec.promote_word_boundary(once) == once
    assert morse_codec.promote_word_boundary(morse_codec.promote_word_boundary(once)) == once
    assert morse_codec.promote_word_boundary("") == ""


def test_backspace_removes_word_separator_atomically():
    assert morse_codec.backspace(".- / ") == ".-"
    assert morse_codec.backspace(".- -") == ".- "
    assert morse_codec.backspace("") == ""


def test_tokenize_and_serialize():
    tokens = morse_codec.tokenize(".- / -")
    assert tokens == [SignalToken.DOT, SignalToken.DASH, SignalToken.WORD_SPACE, SignalToken.DASH]
    assert morse_codec.serialize(tokens) == ".- / -"


def test_tokenize_accepts_unknown_placeholder():
    stream = morse_codec.encode("A#")
    tokens = morse_codec.tokenize(stream)
    assert tokens == [SignalToken.DOT, SignalToken.DASH, SignalToken.LETTER_SPACE, SignalToken.UNKNOWN]
    assert morse_codec.serialize(tokens) == stream
    with pytest.raises(ValueError):
        morse_codec.tokenize(".-x")


# =============================================================================
# Keyer
# =============================================================================


@pytest.mark.parametrize("profile", PRESET_PROFILES, ids=lambda profile: profile.name)
def test_dit_dash_boundary_for_every_profile(profile):
    assert profile.classify_hold(profile.dit_threshold_ms - 1) == "."
    assert profile.classify_hold(profile.dit_threshold_ms) == "-"

    _clock, scheduler, session = make_keyer(profile)
    assert key_symbol(scheduler, session, profile.dit_threshold_ms - 1) == "."
    assert key_symbol(scheduler, session, profile.dit_threshold_ms) == "-"
    assert key_symbol(scheduler, session, profile.dit_threshold_ms + 500) == "-"


def test_letter_and_word_boundaries_are_not_early():
    boundaries = []
    _clock, scheduler, session = make_keyer(NORMAL, on_boundary=boundaries.append)

    key_symbol(scheduler, session, 50)
    scheduler.advance(NORMAL.letter_gap_ms - 1)
    assert session.finalized_stream() == ""
    assert session.letter_buffer() == "."
    scheduler.advance(1)
    assert session.finalized_stream() == "."
    assert boundaries == [BOUNDARY_LETTER]

    scheduler.advance(NORMAL.word_gap_ms - NORMAL.letter_gap_ms - 1)
    assert session.finalized_stream() == "."
    scheduler.advance(1)
    assert session.finalized_stream() == ". / "
    assert boundaries == [BOUNDARY_LETTER, BOUNDARY_WORD]
    assert session.state() is KeyerState.IDLE


def test_press_between_letter_and_word_gap_cancels_word_promotion_once():
    _clock, scheduler, session = make_keyer(NORMAL)

    key_symbol(scheduler, session, 50)
    scheduler.advance(NORMAL.letter_gap_ms + 100)
    assert session.finalized_stream() == "."
    assert session.state() is KeyerState.WORD_PENDING

    assert session.press()
    assert session.cancelled_timer_count == 1
    scheduler.advance(NORMAL.word_gap_ms * 2)
    assert session.finalized_stream() == "."
    assert session.release() == "-"
    assert session.displayed_code() == ". -"
    assert session.cancelled_timer_count == 1


def test_press_inside_letter_gap_extends_the_letter():
    _clock, scheduler, session = make_keyer(NORMAL)
    key_symbol(scheduler, session, 50)
    scheduler.advance(NORMAL.letter_gap_ms - 10)
    key_symbol(scheduler, session, 300)
    scheduler.advance(NORMAL.letter_gap_ms)
    assert session.finalized_stream() == ".-"
    assert session.decoded_text() == "A"


def test_completion_is_sticky_and_stale_timers_do_nothing():
    completions = []
    _clock, scheduler, session = make_keyer(NORMAL, target_text="E", on_complete=lambda: completions.append(True))

    key_symbol(scheduler, session, 50)
    scheduler.advance(NORMAL.letter_gap_ms)
    assert session.is_complete()
    assert completions == [True]

    scheduler.advance(NORMAL.word_gap_ms * 3)
    assert session.finalized_stream() == "."
    assert session.press() is False
    assert session.release() is None
    assert completions == [True]
    assert scheduler.pending_count() == 0


def test_profile_switch_starts_a_fresh_stream():
    _clock, scheduler, session = make_keyer(RELAXED)
    key_symbol(scheduler, session, 250)
    assert session.letter_buffer() == "."

    session.set_profile(FAST)
    assert session.letter_buffer() == ""
    assert session.finalized_stream() == ""
    assert scheduler.pending_count() == 0
    assert key_symbol(scheduler, session, 250) == "-"


def test_keyer_error_flag_tracks_target_prefix():
    _clock, scheduler, session = make_keyer(NORMAL, target_text="SOS")
    key_symbol(scheduler, session, 400)
    scheduler.advance(NORMAL.letter_gap_ms)
    assert session.is_error()


def test_tone_pulses_repeat_while_pressed():
    clock = FakeClock()
    scheduler = ManualTimerScheduler(clock)
    actuator = RecordingActuator(clock)
    session = KeyerSession(clock=clock, scheduler=scheduler, actuator=actuator, tone_pulse_ms=100, tone_repeat_ms=90)
    session.press()
    scheduler.advance(275)
    session.release()
    scheduler.advance(5000)
    assert [offset for offset, _duration in actuator.pulses] == [0, 90, 180, 270]


# =============================================================================
# Keyer input (Qt)
# =============================================================================


class _FakeKeyEvent:
    def __init__(self, key_code: int, auto_repeat: bool = False) -> None:
        self._key_code = key_code
        self._auto_repeat = auto_repeat

    def key(self) -> int:
        return self._key_code

    def isAutoRepeat(self) -> bool:  # noqa: N802
        return self._auto_repeat


def test_keyer_input_routes_space_to_session():
    pytest.importorskip("PyQt6")
    from PyQt6.QtCore import Qt

    from keyer_input import KeyerInput

    _clock, scheduler, session = make_keyer(NORMAL)
    router = KeyerInput(session)
    symbols = []
    router.symbolKeyed.connect(symbols.append)
    space = int(Qt.Key.Key_Space)

    assert router.handle_key_press(_FakeKeyEvent(space))
    assert router.handle_key_press(_FakeKeyEvent(space, auto_repeat=True))
    scheduler.advance(400)
    assert router.handle_key_release(_FakeKeyEvent(space, auto_repeat=True))
    assert session.state() is KeyerState.PRESSING
    assert router.handle_key_release(_FakeKeyEvent(space))
    assert symbols == ["-"]
    assert router.total_presses == 1
    assert router.ignored_presses == 1

    assert router.handle_key_press(_FakeKeyEvent(int(Qt.Key.Key_A))) is False

    router.handle_key_press(_FakeKeyEvent(space))
    router.clear_pressed_keys()
    assert session.state() is KeyerState.LETTER_PENDING
    assert symbols == ["-", "."]


# =============================================================================
# Scoring
# =============================================================================


def test_wpm_example():
    assert scoring.words_per_minute("HELLO WORLD", 60_000) == 2.2


def test_wpm_floors_elapsed_time_at_one_second():
    assert scoring.words_per_minute("SOS", 0) == scoring.words_per_minute("SOS", 1000)


def test_accuracy_example():
    session = ChallengeSession(clock=FakeClock())
    session.start("SOS")
    for append in (session.append_dot, session.append_dot, session.append_dot, session.append_letter_space):
        assert append()
    for _ in range(3):
        assert session.append_dash()
    for _ in range(3):
        assert session.append_dot() is False
        session.backspace()
    assert session.tracker().attempts == 10
    assert session.tracker().mistakes == 3
    assert session.tracker().accuracy == 70.0
    assert scoring.accuracy_percent(10, 3) == 70.0
    assert scoring.accuracy_percent(0, 0) == 100.0


def test_backspace_is_not_an_attempt():
    clock = FakeClock()
    session = ChallengeSession(clock=clock)
    session.start("E")
    session.append_dash()
    session.backspace()
    session.append_dot()
    assert session.is_complete()
    assert session.tracker().attempts == 2
    assert session.result().accuracy == 50.0


def test_hint_resets_streak_even_when_answer_is_correct():
    counter = scoring.StreakCounter(StreakMode.STANDARD)
    for _ in range(4):
        counter.begin_prompt()
        counter.record_answer(True)
    assert counter.value == 4

    counter.begin_prompt()
    counter.reveal_hint()
    assert counter.value == 0
    assert counter.record_answer(True) == 0
    assert counter.high == 4


def test_reverse_quiz_hint_and_high_streak_persistence():
    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "reverse")
    quiz = PracticeQuiz(StreakMode.REVERSE, clock=FakeClock(), recorder=recorder)

    for character in "ABCD":
        quiz.next_prompt(character)
        assert quiz.submit(character.lower()).correct
    assert quiz.streak().value == 4

    quiz.next_prompt("E")
    assert quiz.reveal_hint() == "E"
    result = quiz.submit("E")
    assert result.correct and result.streak == 0
    assert store.get("users/reverse")["reverseHighStreak"] == 4
    assert "charStats" not in store.get("users/reverse")


def test_listening_quiz_needs_code_then_character():
    clock = FakeClock()
    scheduler = ManualTimerScheduler(clock)
    actuator = RecordingActuator(clock)
    quiz = PracticeQuiz(StreakMode.LISTENING, clock=clock, player=SignalPlayer(scheduler, actuator))

    quiz.next_prompt("N")
    assert quiz.play_prompt() > 0
    scheduler.advance(10_000)
    assert [duration for _offset, duration in actuator.pulses] == [600, 200]

    first = quiz.submit("-.")
    assert first.correct and quiz.awaiting_character()
    assert quiz.submit("n").streak == 1

    quiz.next_prompt("N")
    assert quiz.submit("..").correct is False
    assert quiz.streak().value == 0


def test_random_prompts_never_repeat():
    quiz = PracticeQuiz(StreakMode.STANDARD, clock=FakeClock(), characters="ET", rng=random.Random(5))
    previous = None
    for _ in range(20):
        prompt = quiz.next_prompt()
        assert prompt.character != previous
        previous = prompt.character


# =============================================================================
# Adaptive selection
# =============================================================================


def test_adaptive_slower_character_ranks_first_on_equal_mistake_rate():
    stats = {
        "A": CharacterStat(attempts=10, mistakes=5, total_time_ms=500),
        "B": CharacterStat(attempts=10, mistakes=5, total_time_ms=300),
    }
    assert adaptive_selector.weakest_characters(stats) == ["A", "B"]


def test_adaptive_rejects_negative_count():
    with pytest.raises(ValueError):
        adaptive_selector.weakest_characters({}, count=-1)


def test_adaptive_merges_keys_that_differ_only_in_case():
    stats = {
        "a": CharacterStat(attempts=2, mistakes=1, total_time_ms=10),
        "A": CharacterStat(attempts=2, mistakes=2, total_time_ms=10),
    }
    ranked = adaptive_selector.rank_characters(stats)
    assert [score.character for score in ranked] == ["A"]
    assert ranked[0].attempts == 4
    assert ranked[0].mistake_rate == 0.75
    assert adaptive_selector.weakest_characters(stats) == ["A"]


# =============================================================================
# Persistence
# =============================================================================


def test_bounded_history_keeps_ten_most_recent():
    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "history", max_history=10)
    for index in range(1, 12):
        result = recorder.record_run(ScoreRun(wpm=float(index), accuracy=90.0, timestamp_ms=index * 1000))
        assert result.ok
    assert result.pruned_count == 1

    runs = recorder.recent_runs(limit=50)
    assert len(runs) == 10
    assert [run.timestamp_ms for run in runs] == [index * 1000 for index in range(11, 1, -1)]
    assert len(store.query("users/history/run_history", order_by="timestamp")) == 10


def test_personal_best_only_increases():
    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "best")
    assert recorder.record_run(ScoreRun(wpm=12.0, accuracy=90.0, timestamp_ms=1)).new_personal_best
    assert not recorder.record_run(ScoreRun(wpm=8.0, accuracy=95.0, timestamp_ms=2)).new_personal_best
    assert store.get("users/best")["highScore"] == 12.0

    summary = recorder.stats_summary()
    assert summary.lifetime_runs == 2
    assert summary.lifetime_avg_wpm == 10.0
    assert summary.recent_avg_accuracy == 92.5


def test_store_failures_never_reach_the_session():
    recorder = ProgressRecorder(FailingStore(), "offline")
    result = recorder.record_run(ScoreRun(wpm=5.0, accuracy=80.0, timestamp_ms=1))
    assert result.ok is False
    assert recorder.update_high_streak(StreakMode.STANDARD, 3) is False
    assert recorder.record_char_attempt("A", correct=True, elapsed_ms=100) is False
    assert recorder.recent_runs() == []

    clock = FakeClock()
    session = ChallengeSession(clock=clock, recorder=recorder)
    session.start("T")
    clock.advance_ms(2000)
    assert session.append_dash()
    assert session.is_complete()
    assert session.result().accuracy == 100.0


def test_char_stats_accumulate():
    recorder = ProgressRecorder(InMemoryDocumentStore(), "chars")
    recorder.record_char_attempt("a", correct=True, elapsed_ms=400)
    recorder.record_char_attempt("A", correct=False, elapsed_ms=600)
    assert recorder.char_stats() == {"A": CharacterStat(attempts=2, mistakes=1, total_time_ms=1000)}


def test_keyer_completion_counters():
    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "keyer")
    recorder.increment_keyer_completion("relaxed")
    recorder.increment_keyer_completion("RELAXED")
    assert store.get("users/keyer")["keyerRelaxedCompletions"] == 2
    assert recorder.stats_summary().keyer_completions["RELAXED"] == 2


# =============================================================================
# Daily challenge
# =============================================================================


def test_daily_challenge_once_per_day():
    recorder = ProgressRecorder(InMemoryDocumentStore(), "daily")
    day = dt.date(2025, 6, 15)
    challenge = DailyChallenge(recorder, day)
    assert challenge.submit(challenge.target_stream())
    with pytest.raises(RuntimeError):
        challenge.submit(challenge.target_stream())
    assert DailyChallenge(recorder, day).is_locked()


# =============================================================================
# Lessons
# =============================================================================


def test_lesson_catalog_order_and_lookup():
    assert len(LESSONS) == 7
    assert LESSONS[0].characters == ("E", "T", "I", "M")
    assert lesson_by_id("lesson_07").characters == ("6", "7", "8", "9", "0")
    assert next_lesson(["lesson_01", "lesson_02"]).lesson_id == "lesson_03"
    with pytest.raises(ValueError):
        lesson_by_id("missing")


def test_lesson_session_teaches_then_quizzes_each_character():
    recorder = ProgressRecorder(InMemoryDocumentStore(), "learner")
    session = LessonSession(lesson_by_id("lesson_02"), clock=FakeClock(), recorder=recorder)

    seen = []
    step = session.current_step()
    while step is not None:
        seen.append((step.kind, step.character))
        if step.kind == "teach":
            with pytest.raises(RuntimeError):
                session.submit("")
        step = session.advance()
    assert seen[:4] == [("teach", "A"), ("quiz", "A"), ("teach", "N"), ("quiz", "N")]
    assert len(seen) == 10


def test_lesson_quiz_checks_the_code_without_touching_stats():
    recorder = ProgressRecorder(InMemoryDocumentStore(), "learner")
    session = LessonSession(lesson_by_id("lesson_01"), clock=FakeClock(), recorder=recorder)
    with pytest.raises(RuntimeError):
        session.submit(".")
    session.advance()
    assert session.submit("-").correct is False
    assert recorder.char_stats() == {}
    assert recorder.stats_summary().high_streaks["standard"] == 0


def test_finishing_a_lesson_marks_it_complete_once():
    store = InMemoryDocumentStore()
    recorder = ProgressRecorder(store, "learner")
    for _ in range(2):
        session = LessonSession(lesson_by_id("lesson_01"), clock=FakeClock(), recorder=recorder)
        while session.advance() is not None:
            pass
        assert session.is_finished()
    assert store.get("users/learner")["completedLessons"] == ["lesson_01"]
    assert recorder.stats_summary().lessons_completed == 1


def test_completed_lessons_set_merge_and_store_failures():
    recorder = ProgressRecorder(InMemoryDocumentStore(), "learner")
    assert recorder.completed_lessons() == []
    assert recorder.mark_lesson_complete("lesson_02") is True
    assert recorder.mark_lesson_complete("lesson_01") is True
    assert recorder.mark_lesson_complete("lesson_02") is False
    assert recorder.mark_lesson_complete("  ") is False
    assert recorder.completed_lessons() == ["lesson_02", "lesson_01"]

    offline = ProgressRecorder(FailingStore(), "offline")
    assert offline.mark_lesson_complete("lesson_01") is False
    session = LessonSession(LESSONS[0], clock=FakeClock(), recorder=offline)
    while session.advance() is not None:
        pass
    assert session.is_finished()


# =============================================================================
# Configuration and CLI
# =============================================================================


def test_missing_config_file_uses_defaults(tmp_path, monkeypatch):
    for name in ("MORSE_TRAINER_KEYER_PROFILE", "MORSE_TRAINER_MAX_HISTORY", "MORSE_TRAINER_WEAKEST_COUNT", "MORSE_TRAINER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    config, path = load_config(tmp_path / "absent.json")
    assert config == AppConfig()
    assert path == tmp_path / "absent.json"
    assert config.keyer.resolve_profile() is NORMAL


def test_config_file_and_environment_overrides(tmp_path, monkeypatch):
    config_path = tmp_path / "morse_trainer_config.json"
    config_path.write_text(
        json.dumps({"keyer": {"profile": "relaxed", "letter_gap_ms": 700}, "scoring": {"max_history": 5}}),
        encoding="utf-8",
    )
    monkeypatch.setenv("MORSE_TRAINER_MAX_HISTORY", "7")
    monkeypatch.setenv("MORSE_TRAINER_LOG_LEVEL", "debug")

    config, _path = load_config(config_path)
    profile = config.keyer.resolve_profile()
    assert profile.name == "RELAXED"
    assert profile.letter_gap_ms == 700
    assert profile.word_gap_ms == RELAXED.word_gap_ms
    assert config.scoring.max_history == 7
    assert config.logging.level == "DEBUG"


def test_invalid_config_raises_value_error(tmp_path, monkeypatch):
    monkeypatch.delenv("MORSE_TRAINER_KEYER_PROFILE", raising=False)
    config_path = tmp_path / "bad.json"
    config_path.write_text(json.dumps({"keyer": {"profile": "turbo"}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(config_path)

    config_path.write_text(json.dumps({"keyer": {"letter_gap_ms": 2000}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(config_path)


def test_cli_encode_and_decode(tmp_path, capsys):
    import morse_trainer

    config_arg = ["--config", str(tmp_path / "absent.json")]
    assert morse_trainer.main(config_arg + ["encode", "sos"]) == 0
    assert capsys.readouterr().out.strip() == "... --- ..."
    assert morse_trainer.main(config_arg + ["decode", ".... .. / - .... . .-. ."]) == 0
    assert capsys.readouterr().out.strip() == "HI THERE"


def test_cli_config_edit_creates_file_and_opens_editor(tmp_path, monkeypatch, capsys):
    import config as config_module
    import morse_trainer

    opened = []
    monkeypatch.setattr(config_module, "_launch_editor", opened.append)
    config_path = tmp_path / "nested" / "morse_trainer_config.json"

    assert morse_trainer.main(["--config", str(config_path), "config", "--edit"]) == 0
    assert opened == [config_path.resolve()]
    assert capsys.readouterr().out.strip() == str(config_path.resolve())
    assert json.loads(config_path.read_text(encoding="utf-8")) == AppConfig().model_dump()

    config_path.write_text(json.dumps({"keyer": {"profile": "FAST"}}), encoding="utf-8")
    assert morse_trainer.main(["--config", str(config_path), "config", "--edit"]) == 0
    assert json.loads(config_path.read_text(encoding="utf-8")) == {"keyer": {"profile": "FAST"}}
    assert len(opened) == 2


def test_cli_lists_lessons(tmp_path, capsys):
    import morse_trainer

    assert morse_trainer.main(["--config", str(tmp_path / "absent.json"), "lessons"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 7
    assert lines[0] == "lesson_01  The Basics: E .  T -  I ..  M --"


def test_harness_profile_choices_keep_configured_overrides():
    pytest.importorskip("PyQt6.QtWidgets")
    from keyer_harness import profile_choices

    config = AppConfig.model_validate({"keyer": {"profile": "RELAXED", "letter_gap_ms": 700}})
    configured = config.keyer.resolve_profile()
    choices = profile_choices(configured)
    assert list(choices) == [item.name for item in PRESET_PROFILES]
    assert choices["RELAXED"].letter_gap_ms == 700
    assert choices["NORMAL"] is NORMAL
    assert choices["FAST"] is FAST
