"""
config.py

Typed configuration loading and validation for the Morse trainer.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- A missing config file is not an error: every setting has a default

Config file location
- If MORSE_TRAINER_CONFIG_PATH is set, that file is used.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./morse_trainer_config.json (current working directory)
  2) <user config dir>/MorseTrainer/morse_trainer_config.json
- When none exists, defaults are used and the second location is reported as the config path.

Example config file (morse_trainer_config.json)
{
  "keyer": {
    "profile": "NORMAL",
    "dit_threshold_ms": null,
    "letter_gap_ms": null,
    "word_gap_ms": null,
    "tone_pulse_ms": 100,
    "tone_repeat_ms": 90
  },
  "scoring": {
    "max_history": 10,
    "weakest_count": 3
  },
  "playback": {
    "dit_ms": 200,
    "dah_ms": 600,
    "symbol_gap_ms": 200,
    "letter_gap_ms": 600,
    "word_gap_ms": 1200
  },
  "logging": {
    "level": "WARNING"
  }
}
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from signal_player import PlaybackTiming
from trainer_models import DifficultyProfile, profile_by_name

CONFIG_FILE_NAME = "morse_trainer_config.json"


class KeyerConfig(BaseModel):
    profile: str = Field(default="NORMAL", description="RELAXED, NORMAL or FAST")
    dit_threshold_ms: Optional[int] = Field(default=None, gt=0, description="Override: holds shorter than this are dots.")
    letter_gap_ms: Optional[int] = Field(default=None, gt=0, description="Override: silence that finalizes a letter.")
    word_gap_ms: Optional[int] = Field(default=None, gt=0, description="Override: silence that inserts a word break.")
    tone_pulse_ms: int = Field(default=100, gt=0, description="Length of each tone pulse while the key is held.")
    tone_repeat_ms: int = Field(default=90, gt=0, description="Interval between tone pulses while the key is held.")

    @field_validator("profile")
    @classmethod
    def validate_profile(cls, value: str) -> str:
        return profile_by_name(value).name

    @model_validator(mode="after")
    def validate_gaps(self) -> "KeyerConfig":
        # Surfaces an inconsistent override at load time rather than at session start.
        self.resolve_profile()
        return self

    def resolve_profile(self) -> DifficultyProfile:
        base = profile_by_name(self.profile)
        if self.dit_threshold_ms is None and self.letter_gap_ms is None and self.word_gap_ms is None:
            return base
        return DifficultyProfile(
            name=base.name,
            dit_threshold_ms=self.dit_threshold_ms if self.dit_threshold_ms is not None else base.dit_threshold_ms,
            letter_gap_ms=self.letter_gap_ms if self.letter_gap_ms is not None else base.letter_gap_ms,
            word_gap_ms=self.word_gap_ms if self.word_gap_ms is not None else base.word_gap_ms,
            description=base.description,
        )


class ScoringConfig(BaseModel):
    max_history: int = Field(default=10, ge=1, description="Runs kept in the recent history.")
    weakest_count: int = Field(default=3, ge=0, description="Characters picked for targeted practice.")


class PlaybackConfig(BaseModel):
    dit_ms: int = Field(default=200, gt=0)
    dah_ms: int = Field(default=600, gt=0)
    symbol_gap_ms: int = Field(default=200, ge=0)
    letter_gap_ms: int = Field(default=600, ge=0)
    word_gap_ms: int = Field(default=1200, ge=0)

    def to_timing(self) -> PlaybackTiming:
        return PlaybackTiming(
            dit_ms=self.dit_ms,
            dah_ms=self.dah_ms,
            symbol_gap_ms=self.symbol_gap_ms,
            letter_gap_ms=self.letter_gap_ms,
            word_gap_ms=self.word_gap_ms,
        )


class LoggingConfig(BaseModel):
    level: str = Field(default="WARNING", description="DEBUG, INFO, WARNING, ERROR or CRITICAL")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError("level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return normalized

    def numeric_level(self) -> int:
        return int(getattr(logging, self.level))


class AppConfig(BaseModel):
    keyer: KeyerConfig = Field(default_factory=KeyerConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("MorseTrainer", appauthor=False))
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        config_directory / CONFIG_FILE_NAME,
    ]


def _resolve_config_path() -> Path:
    explicit_path_text = os.environ.get("MORSE_TRAINER_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    candidates = _default_config_candidates()
    for candidate_path in candidates:
        if candidate_path.exists():
            return candidate_path
    return candidates[-1]


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    if not raw_text.strip():
        return {}

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - MORSE_TRAINER_KEYER_PROFILE
    - MORSE_TRAINER_MAX_HISTORY
    - MORSE_TRAINER_WEAKEST_COUNT
    - MORSE_TRAINER_LOG_LEVEL
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    keyer_section = ensure_nested(updated_config, "keyer")
    scoring_section = ensure_nested(updated_config, "scoring")
    logging_section = ensure_nested(updated_config, "logging")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_int(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = int(value_text)
        except ValueError:
            return

    override_string("MORSE_TRAINER_KEYER_PROFILE", keyer_section, "profile")
    override_int("MORSE_TRAINER_MAX_HISTORY", scoring_section, "max_history")
    override_int("MORSE_TRAINER_WEAKEST_COUNT", scoring_section, "weakest_count")
    override_string("MORSE_TRAINER_LOG_LEVEL", logging_section, "level")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Path]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        raise ValueError(f"Config validation failed for {resolved_path}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[AppConfig, Path]:
    return load_config()


def to_json(config: AppConfig) -> str:
    return json.dumps(config.model_dump(), ensure_ascii=False, indent=2)


def ensure_config_file(config_path: Path) -> Path:
    """Create the config file with default settings when it does not exist yet."""
    resolved_path = Path(config_path).expanduser().resolve()
    resolved_path.parent.mkdir(parents=True, exist_ok=True)
    if not resolved_path.exists():
        resolved_path.write_text(to_json(AppConfig()), encoding="utf-8")
    return resolved_path


def _launch_editor(config_path: Path) -> None:
    if sys.platform.startswith("win"):
        os.startfile(str(config_path))
    elif sys.platform == "darwin":
        subprocess.run(["open", str(config_path)], check=False)
    else:
        subprocess.run(["xdg-open", str(config_path)], check=False)


def open_config_json_in_editor(config_path: Optional[Path] = None) -> Path:
    if config_path is None:
        _config, config_path = get_config()

    resolved_path = ensure_config_file(config_path)
    _launch_editor(resolved_path)
    return resolved_path


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path),
        "config_exists": resolved_path.exists(),
        "config": config.model_dump(),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
