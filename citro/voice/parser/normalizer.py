"""Transcript normalization.

Turns whatever the browser's speech recognizer produced into two strings:
the trimmed original (for echoing back) and a lower-case, Hinglish-translated,
punctuation-free form the classifier matches against. Never raises.
"""

from __future__ import annotations

import re
from typing import Any

from citro.voice.models import NormalizedTranscript
from citro.voice.parser.vocabulary import FILLER_WORDS, HINGLISH_TOKENS, alternation

MAX_TRANSCRIPT_LENGTH = 500

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^a-z0-9'\s]")
_STRAY_APOSTROPHE = re.compile(r"(?<![a-z0-9])'|'(?![a-z0-9])")
_WAKE_WORD = re.compile(r"^(?:(hey|hi|hello|ok|okay)\s+)?citro\b")

# One pass over the text with every token, longest first
_HINGLISH_PATTERN = re.compile(rf"\b(?:{alternation(HINGLISH_TOKENS)})\b")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def translate_hinglish(text: str) -> str:
    """Replace Hindi/Hinglish tokens with their English equivalents."""
    return _HINGLISH_PATTERN.sub(
        lambda m: HINGLISH_TOKENS[collapse_whitespace(m.group(0))],
        text,
    )


def strip_fillers(text: str) -> str:
    """Drop filler words and a leading wake word ("hey citro", "citro")."""
    text = _WAKE_WORD.sub(lambda m: m.group(1) or "", text).strip()
    return " ".join(word for word in text.split() if word not in FILLER_WORDS)


def normalize(raw: Any, max_length: int = MAX_TRANSCRIPT_LENGTH) -> NormalizedTranscript:
    """Normalize a raw transcript.

    Steps: collapse whitespace, trim, truncate to ``max_length`` (kept as
    ``original``), then lower-case, translate Hinglish tokens, strip
    punctuation except apostrophes, and drop filler words.

    Non-string or blank input yields an empty transcript.
    """
    if not isinstance(raw, str):
        return NormalizedTranscript()

    original = collapse_whitespace(raw)[:max_length].rstrip()
    if not original:
        return NormalizedTranscript()

    text = original.lower()
    # Hyphens and slashes separate words ("ad-mad", "wi-fi")
    text = re.sub(r"[-/]", " ", text)
    text = _PUNCTUATION.sub(" ", text)
    # Quotes are not contractions
    text = _STRAY_APOSTROPHE.sub(" ", text)
    text = collapse_whitespace(text)
    text = translate_hinglish(text)
    text = strip_fillers(text)

    return NormalizedTranscript(original=original, text=collapse_whitespace(text))
