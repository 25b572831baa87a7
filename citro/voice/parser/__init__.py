"""Voice command parsing: normalization, intent detection, slot extraction, routing."""

from citro.voice.parser.command_router import CommandRouter
from citro.voice.parser.intent_parser import parse_command, parse_intent
from citro.voice.parser.normalizer import normalize
from citro.voice.parser.slot_extractor import extract_slots

__all__ = [
    "CommandRouter",
    "extract_slots",
    "normalize",
    "parse_command",
    "parse_intent",
]
