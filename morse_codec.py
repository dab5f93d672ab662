# -*- coding: utf-8 -*-
########################
# morse_codec.py
########################
# Purpose:
# - Bidirectional text <-> signal stream transcoder.
# - Pure string operations on the canonical stream form used by every input mode.
#
# Design notes:
# - No Qt usage. Pure and deterministic.
# - Canonical stream: symbols inside a letter are adjacent, letters are joined by a single space,
#   words are joined by " / ".
# - Never raises on unknown input. Unknown characters encode to UNKNOWN_CODE and unknown codes
#   decode to UNKNOWN_GLYPH so callers can still render and let the user correct.
# - Decoding accepts a truncated stream (no trailing separator required) for live previews.
#
########################
# Interfaces:
# Public constants:
# - CODE_TABLE: Mapping[str, str]      (character -> code)
# - INVERSE_TABLE: Mapping[str, str]   (code -> character)
# - UNKNOWN_CODE, UNKNOWN_GLYPH
#
# Public functions:
# - encode(text: str) -> str
# - decode(stream: str) -> str
# - code_for(character: str) -> str
# - char_for(code: str) -> str
# - backspace(stream: str) -> str
# - append_symbol(stream: str, symbol: str) -> str
# - append_letter_space(stream: str) -> str
# - append_word_space(stream: str) -> str
# - join_letter(stream: str, code: str) -> str
# - promote_word_boundary(stream: str) -> str
# - strip_trailing_separator(stream: str) -> str
# - is_prefix_of_target(stream: str, target: str) -> bool
# - tokenize(stream: str) -> list[SignalToken]
# - serialize(tokens: Iterable[SignalToken]) -> str
#
########################

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping

from trainer_models import DASH, DOT, LETTER_SEPARATOR, UNKNOWN_SIGNAL, WORD_SEPARATOR, SignalToken

UNKNOWN_CODE = UNKNOWN_SIGNAL
UNKNOWN_GLYPH = "?"

_CODE_PAIRS = (
    ("A", ".-"), ("B", "-..."), ("C", "-.-."), ("D", "-.."), ("E", "."), ("F", "..-."),
    ("G", "--."), ("H", "...."), ("I", ".."), ("J", ".---"), ("K", "-.-"), ("L", ".-.."),
    ("M", "--"), ("N", "-."), ("O", "---"), ("P", ".--."), ("Q", "--.-"), ("R", ".-."),
    ("S", "..."), ("T", "-"), ("U", "..-"), ("V", "...-"), ("W", ".--"), ("X", "-..-"),
    ("Y", "-.--"), ("Z", "--.."),
    ("0", "-----"), ("1", ".----"), ("2", "..---"), ("3", "...--"), ("4", "....-"),
    ("5", "....."), ("6", "-...."), ("7", "--..."), ("8", "---.."), ("9", "----."),
    (".", ".-.-.-"), (",", "--..--"), ("?", "..--.."), ("'", ".----."), ("!", "-.-.--"),
    ("/", "-..-."), ("(", "-.--."), (")", "-.--.-"), ("&", ".-..."), (":", "---..."),
    (";", "-.-.-."), ("=", "-...-"), ("+", ".-.-."), ("-", "-....-"), ("_", "..--.-"),
    ("\"", ".-..-."), ("@", ".--.-."),
)


def _build_tables() -> tuple:
    forward: Dict[str, str] = {}
    inverse: Dict[str, str] = {}
    for character, code in _CODE_PAIRS:
        if code in inverse:
            raise ValueError(f"Duplicate code {code!r} for {inverse[code]!r} and {character!r}")
        forward[character] = code
        inverse[code] = character
    return MappingProxyType(forward), MappingProxyType(inverse)


CODE_TABLE: Mapping[str, str]
INVERSE_TABLE: Mapping[str, str]
CODE_TABLE, INVERSE_TABLE = _build_tables()


def code_for(character: str) -> str:
    return CODE_TABLE.get(str(character).upper(), UNKNOWN_CODE)


def char_for(code: str) -> str:
    return INVERSE_TABLE.get(str(code), UNKNOWN_GLYPH)


def encode(text: str) -> str:
    normalized = (text or "").strip().upper()
    if not normalized:
        return ""
    words = normalized.split(" ")
    return WORD_SEPARATOR.join(LETTER_SEPARATOR.join(code_for(character) for character in word) for word in words)


def decode(stream: str) -> str:
    cleaned = strip_trailing_separator(stream)
    if not cleaned:
        return ""
    decoded_words: List[str] = []
    for word in cleaned.split(WORD_SEPARATOR):
        codes = [code for code in word.strip().split(LETTER_SEPARATOR) if code]
        decoded_words.append("".join(char_for(code) for code in codes))
    return " ".join(decoded_words).strip()


def strip_trailing_separator(stream: str) -> str:
    return (stream or "").strip().rstrip("/").strip()


def backspace(stream: str) -> str:
    text = stream or ""
    if not text:
        return ""
    if text.endswith(WORD_SEPARATOR):
        return text[: -len(WORD_SEPARATOR)]
    return text[:-1]


def append_symbol(stream: str, symbol: str) -> str:
    if symbol not in (DOT, DASH):
        raise ValueError(f"symbol must be {DOT!r} or {DASH!r}, got {symbol!r}")
    return (stream or "") + symbol


def append_letter_space(stream: str) -> str:
    return (stream or "") + LETTER_SEPARATOR


def append_word_space(stream: str) -> str:
    return (stream or "") + WORD_SEPARATOR


def join_letter(stream: str, code: str) -> str:
    """Append a finished letter code to a stream.

    After a word separator no extra letter space is inserted; the separator already
    ends with one.
    """
    text = stream or ""
    if not code:
        return text
    if not text:
        return code
    if text.rstrip().endswith("/"):
        return text.rstrip() + LETTER_SEPARATOR + code
    return text + LETTER_SEPARATOR + code


def promote_word_boundary(stream: str) -> str:
    if (stream or "").endswith(WORD_SEPARATOR):
        return stream
    cleaned = strip_trailing_separator(stream)
    if not cleaned:
        return stream or ""
    return cleaned + WORD_SEPARATOR


def is_prefix_of_target(stream: str, target: str) -> bool:
    return (target or "").startswith(stream or "")


def tokenize(stream: str) -> List[SignalToken]:
    tokens: List[SignalToken] = []
    text = stream or ""
    index = 0
    while index < len(text):
        if text.startswith(WORD_SEPARATOR, index):
            tokens.append(SignalToken.WORD_SPACE)
            index += len(WORD_SEPARATOR)
            continue
        character = text[index]
        if character == DOT:
            tokens.append(SignalToken.DOT)
        elif character == DASH:
            tokens.append(SignalToken.DASH)
        elif character == LETTER_SEPARATOR:
            tokens.append(SignalToken.LETTER_SPACE)
        elif character == UNKNOWN_CODE:
            tokens.append(SignalToken.UNKNOWN)
        else:
            raise ValueError(f"Unexpected character {character!r} at index {index} in signal stream")
        index += 1
    return tokens


def serialize(tokens: Iterable[SignalToken]) -> str:
    return "".join(token.value for token in tokens)


def _run_unit_tests() -> None:
    assert encode("") == ""
    assert encode("sos") == "... --- ..."
    assert encode("Hi there") == ".... .. / - .... . .-. ."
    assert encode("A#") == ".- ?"
    assert decode(encode("Hello World")) == "HELLO WORLD"
    assert decode(".- / ") == "A"
    assert decode(".- ........") == "A?"
    assert decode("") == ""

    assert backspace(".- / ") == ".-"
    assert backspace(".- -") == ".- "
    assert backspace("") == ""

    assert join_letter("", ".-") == ".-"
    assert join_letter(".-", "-...") == ".- -..."
    assert join_letter(".- / ", "-...") == ".- / -..."

    assert promote_word_boundary("") == ""
    assert promote_word_boundary(".-") == ".- / "
    assert promote_word_boundary(".- / ") == ".- / "

    stream = ".- / -"
    assert serialize(tokenize(stream)) == stream
    assert tokenize(stream)[2] is SignalToken.WORD_SPACE
    assert tokenize(encode("A#"))[-1] is SignalToken.UNKNOWN
    assert serialize(tokenize(encode("A#"))) == encode("A#")


if __name__ == "__main__":
    _run_unit_tests()
    print("morse_codec.py: ok")
