# phrases.py
from __future__ import annotations

import datetime as _dt
import random
from typing import List, Optional, Sequence

from trainer_models import FAST, NORMAL, RELAXED, DifficultyProfile

CHALLENGE_PHRASES: Sequence[str] = (
    # Short phrases (good for beginners)
    "SOS", "HI", "OK", "CQ", "TEST", "HELLO", "MORSE", "HI THERE", "HELLO WORLD", "CQ CQ CQ",
    "GOOD MORNING", "THANK YOU", "WELL DONE", "COPY THAT", "ROGER THAT", "OVER AND OUT",
    # Medium phrases
    "SOS TITANIC", "THE QUICK BROWN FOX", "MORSE CODE IS FUN", "RADIO SILENCE", "CALL FOR HELP",
    "SEND BACKUP NOW", "MESSAGE RECEIVED", "STAND BY PLEASE", "REPEAT LAST MESSAGE",
    # Classic/Historic
    "WHAT HATH GOD WROUGHT", "COME HERE WATSON", "PARIS PARIS PARIS",
    # Ham radio
    "QTH IS HOME", "RST FIVE NINE", "SEVENTY THREE",
)

DAILY_WORDS: Sequence[str] = (
    "ALPHA", "BRAVO", "CHARLIE", "DELTA", "ECHO", "FOXTROT", "GOLF", "HOTEL", "INDIA", "JULIET",
    "KILO", "LIMA", "MIKE", "NOVEMBER", "OSCAR", "PAPA", "QUEBEC", "ROMEO", "SIERRA", "TANGO",
    "UNIFORM", "VICTOR", "WHISKEY", "XRAY", "YANKEE", "ZULU", "HELLO", "WORLD", "MORSE", "CODE",
    "SIGNAL", "BEACON", "ROGER", "COPY", "OVER", "MAYDAY", "RESCUE", "TOWER", "PILOT", "RADIO",
    "STATION", "WAVE", "PULSE", "SPARK", "DECODE", "CIPHER", "RELAY", "PATROL", "HARBOR", "VOYAGE",
    "ANCHOR", "STORM", "HORIZON", "COMPASS", "NIGHT", "DAWN", "ALERT", "DANGER", "CAPTAIN", "MISSION",
    "TARGET", "FLEET", "GUARD", "BRIDGE", "COAST", "EAGLE", "FALCON", "HUNTER", "SHADOW", "THUNDER",
    "BLAZE", "FROST", "SUMMIT", "VALLEY", "RIVER", "OCEAN", "ISLAND", "DESERT", "FOREST", "PLAINS",
    "NORTH", "SOUTH", "EAST", "WEST", "CENTER", "RAPID", "STEADY", "SILENT", "STRIKE", "SHIELD",
    "ORBIT", "LAUNCH", "ROCKET", "FLIGHT", "CLOUD", "NEXUS", "PRISM", "QUARTZ", "VERTEX", "MATRIX",
    "CIPHER", "ENIGMA", "VORTEX", "ZENITH", "APEX", "OMEGA", "TITAN", "ATLAS", "HYDRA", "PHOENIX",
    "COMET", "LUNAR", "SOLAR", "GAMMA", "DELTA", "SIGMA", "THETA", "KAPPA", "LAMBDA", "RETURN",
    "MARCH", "BRAVE", "SWIFT", "SHARP", "STEEL", "AMBER", "CORAL", "IVORY", "SLATE", "ONYX",
    "JADE", "OPAL", "RUBY", "TOPAZ", "PEARL", "FLARE", "DRIFT", "SURGE", "CREST", "DEPTH",
    "FIELD", "SCOUT", "WATCH", "TRACE", "FORCE", "SCALE", "RANGE", "FRONT", "RECON", "SQUAD",
    "RALLY", "CLASH", "FORGE", "VAULT", "HAVEN", "RIDGE", "STONE", "FLAME", "LIGHT", "SPARK",
    "ARC", "BOLT", "CORE", "DOME", "EDGE", "GLOW", "HAZE", "IRON", "JET", "KNOT",
    "LORE", "MIST", "NODE", "ORE", "PIKE", "RIFT", "SILO", "TIDE", "URN", "VINE",
    "WREN", "AXIS", "YOKE", "ZONE",
)


def phrases_for_profile(profile: DifficultyProfile) -> List[str]:
    if profile.name == RELAXED.name:
        return [phrase for phrase in CHALLENGE_PHRASES if len(phrase) <= 10]
    if profile.name == NORMAL.name:
        return [phrase for phrase in CHALLENGE_PHRASES if 5 <= len(phrase) <= 20]
    if profile.name == FAST.name:
        # Only multi-word phrases.
        return [phrase for phrase in CHALLENGE_PHRASES if " " in phrase]
    return list(CHALLENGE_PHRASES)


def pick_phrase(
    profile: Optional[DifficultyProfile] = None,
    *,
    exclude: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    chooser = rng if rng is not None else random.Random()
    pool = phrases_for_profile(profile) if profile is not None else list(CHALLENGE_PHRASES)
    candidates = [phrase for phrase in pool if phrase != exclude]
    if not candidates:
        # Fall back to the full pool when the filter leaves nothing.
        candidates = [phrase for phrase in CHALLENGE_PHRASES if phrase != exclude]
    return chooser.choice(candidates)


def daily_word(day: _dt.date) -> str:
    day_of_year = day.timetuple().tm_yday
    index = (day_of_year * 31 + day.year * 7) % len(DAILY_WORDS)
    return DAILY_WORDS[index]


def _run_unit_tests() -> None:
    assert all(len(phrase) <= 10 for phrase in phrases_for_profile(RELAXED))
    assert all(5 <= len(phrase) <= 20 for phrase in phrases_for_profile(NORMAL))
    assert all(" " in phrase for phrase in phrases_for_profile(FAST))

    rng = random.Random(3)
    for _ in range(20):
        assert pick_phrase(RELAXED, exclude="SOS", rng=rng) != "SOS"

    # 2024-01-01: day 1, (31 + 2024 * 7) % len
    assert daily_word(_dt.date(2024, 1, 1)) == DAILY_WORDS[(31 + 2024 * 7) % len(DAILY_WORDS)]


if __name__ == "__main__":
    _run_unit_tests()
    print("phrases.py: ok")
