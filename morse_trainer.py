"""
morse_trainer.py

Command line entrypoint for the Morse trainer.

Subcommands
- encode TEXT          print the signal stream for TEXT
- decode STREAM        print the text for a signal stream
- timeline STREAM      print the playback pulses and total length
- phrase               pick a challenge phrase for a profile
- daily [--date]       print the word of the day and its code
- weakest STATS.json   rank characters from a stats file ({"A": {"attempts": 4, "mistakes": 1, "totalTimeMs": 900}})
- lessons              list the Learn path lessons and their characters
- keyer                launch the keyer window (PyQt6)
- config [--edit]      print the resolved configuration, or open it in an editor
- --run-tests          run every module's inline self-tests

Logging is configured from the [logging] section of the config file.
"""

from __future__ import annotations

import argparse
import datetime as _dt
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import adaptive_selector
import config as config_module
import lessons
import morse_codec
import phrases
import signal_player
from config import AppConfig, get_config, load_config, to_json
from trainer_models import CharacterStat, profile_by_name

logger = logging.getLogger(__name__)

SELF_TEST_MODULES = (
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
)


def _configure_logging(app_config: AppConfig) -> None:
    logging.basicConfig(
        level=app_config.logging.numeric_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_stats_file(stats_path: Path) -> Dict[str, CharacterStat]:
    try:
        parsed = json.loads(stats_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exception:
        raise ValueError(f"Stats file is not valid JSON: {stats_path}. Error: {exception}") from exception
    if not isinstance(parsed, dict):
        raise ValueError(f"Stats file root must be a JSON object: {stats_path}")

    stats: Dict[str, CharacterStat] = {}
    for character, fields in parsed.items():
        if not isinstance(fields, dict):
            continue
        stats[str(character)] = CharacterStat(
            attempts=int(fields.get("attempts", 0)),
            mistakes=int(fields.get("mistakes", 0)),
            total_time_ms=int(fields.get("totalTimeMs", 0)),
        )
    return stats


def run_self_tests() -> List[str]:
    import importlib

    passed: List[str] = []
    for module_name in SELF_TEST_MODULES:
        module = importlib.import_module(module_name)
        module._run_unit_tests()
        passed.append(module_name)
    return passed


def build_argument_parser() -> argparse.ArgumentParser:
    argument_parser = argparse.ArgumentParser(prog="morse-trainer", description="Morse code trainer")
    argument_parser.add_argument("--config", type=Path, default=None, help="Use this config file instead of the default lookup.")
    argument_parser.add_argument("--run-tests", action="store_true", help="Run inline self-tests (no Qt).")

    subparsers = argument_parser.add_subparsers(dest="command")

    encode_parser = subparsers.add_parser("encode", help="Text to signal stream.")
    encode_parser.add_argument("text")

    decode_parser = subparsers.add_parser("decode", help="Signal stream to text.")
    decode_parser.add_argument("stream")

    timeline_parser = subparsers.add_parser("timeline", help="Playback pulses for a signal stream.")
    timeline_parser.add_argument("stream")

    phrase_parser = subparsers.add_parser("phrase", help="Pick a challenge phrase.")
    phrase_parser.add_argument("--profile", default=None, help="RELAXED, NORMAL or FAST (default: config).")

    daily_parser = subparsers.add_parser("daily", help="Word of the day.")
    daily_parser.add_argument("--date", default=None, help="ISO date, default today.")

    weakest_parser = subparsers.add_parser("weakest", help="Rank the weakest characters from a stats file.")
    weakest_parser.add_argument("stats", type=Path)
    weakest_parser.add_argument("--count", type=int, default=None)

    subparsers.add_parser("lessons", help="List the Learn path lessons and their characters.")

    keyer_parser = subparsers.add_parser("keyer", help="Launch the keyer window.")
    keyer_parser.add_argument("--profile", default=None)

    config_parser = subparsers.add_parser("config", help="Print the resolved configuration.")
    config_parser.add_argument("--edit", action="store_true", help="Create the config file if needed and open it in the system editor.")
    return argument_parser


def main(argv: Optional[List[str]] = None) -> int:
    parsed_args = build_argument_parser().parse_args(argv)

    if parsed_args.run_tests:
        for module_name in run_self_tests():
            print(f"{module_name}.py: ok")
        return 0

    try:
        if parsed_args.config is not None:
            app_config, config_path = load_config(parsed_args.config)
        else:
            app_config, config_path = get_config()
    except (OSError, ValueError) as exception:
        print(json.dumps({"ok": False, "error": str(exception)}, ensure_ascii=False, indent=2))
        return 2

    _configure_logging(app_config)
    logger.debug("Using config %s", config_path)

    command = parsed_args.command
    try:
        if command == "encode":
            print(morse_codec.encode(parsed_args.text))
        elif command == "decode":
            print(morse_codec.decode(parsed_args.stream))
        elif command == "timeline":
            pulses, total_ms = signal_player.build_timeline(parsed_args.stream, app_config.playback.to_timing())
            payload: Dict[str, Any] = {
                "total_ms": total_ms,
                "pulses": [
                    {"offset_ms": pulse.offset_ms, "duration_ms": pulse.duration_ms, "index": pulse.stream_index}
                    for pulse in pulses
                ],
            }
            print(json.dumps(payload, indent=2))
        elif command == "phrase":
            profile_name = parsed_args.profile or app_config.keyer.profile
            phrase = phrases.pick_phrase(profile_by_name(profile_name))
            print(f"{phrase}\n{morse_codec.encode(phrase)}")
        elif command == "daily":
            day = _dt.date.fromisoformat(parsed_args.date) if parsed_args.date else _dt.date.today()
            word = phrases.daily_word(day)
            print(f"{day.isoformat()} {word}\n{morse_codec.encode(word)}")
        elif command == "weakest":
            count = parsed_args.count if parsed_args.count is not None else app_config.scoring.weakest_count
            stats = _load_stats_file(parsed_args.stats)
            ranked = adaptive_selector.rank_characters(stats)[: max(0, int(count))]
            if not ranked:
                print("Not enough practice data yet.")
            for score in ranked:
                print(f"{score.character}  mistakes={score.mistake_rate:.0%}  avg={score.avg_time_ms:.0f} ms  attempts={score.attempts}")
        elif command == "lessons":
            for lesson in lessons.LESSONS:
                codes = "  ".join(f"{character} {morse_codec.code_for(character)}" for character in lesson.characters)
                print(f"{lesson.lesson_id}  {lesson.title}: {codes}")
        elif command == "keyer":
            return _launch_keyer(app_config, parsed_args.profile)
        elif command == "config" and parsed_args.edit:
            print(config_module.open_config_json_in_editor(config_path))
        elif command == "config":
            print(json.dumps({"config_path": str(config_path), "config": json.loads(to_json(app_config))}, indent=2))
        else:
            build_argument_parser().print_help()
            return 1
    except (OSError, ValueError) as exception:
        print(f"error: {exception}", file=sys.stderr)
        return 2
    return 0


def _launch_keyer(app_config: AppConfig, profile_name: Optional[str]) -> int:
    from PyQt6.QtWidgets import QApplication

    from document_store import InMemoryDocumentStore
    from keyer_harness import KeyerHarnessWindow
    from progress_recorder import ProgressRecorder

    profile = profile_by_name(profile_name) if profile_name else app_config.keyer.resolve_profile()
    recorder = ProgressRecorder(InMemoryDocumentStore(), "local", max_history=app_config.scoring.max_history)

    qt_application = QApplication(sys.argv)
    window = KeyerHarnessWindow(
        profile=profile,
        recorder=recorder,
        tone_pulse_ms=app_config.keyer.tone_pulse_ms,
        tone_repeat_ms=app_config.keyer.tone_repeat_ms,
    )
    window.resize(640, 260)
    window.show()
    return int(qt_application.exec())


if __name__ == "__main__":
    raise SystemExit(main())
