"""Voice Interface - spoken commands for the event platform

Philosophy:
    The browser does speech-to-text; everything after the transcript happens
    here. A command either does something (navigate, show data, change the
    cart) or answers politely. The caller never sees a raw error code.

Components:
    models.py: Data models (IntentType, SlotName, ParsedCommand, VoiceResult)
    config.py: YAML-backed pipeline settings
    parser/: Normalization, intent classification, slot extraction, routing
    commands/: Intent handlers (navigation, events, cart, dashboard, info)
    responses.py: Reply templates and the response composer
    pipeline.py: process_command() entry point

Usage:
    from citro.voice.pipeline import process_command
    from citro.services import create_default_services

    result = await process_command("show events", services=create_default_services())
    print(result.reply)
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_PATH = PROJECT_ROOT / "args" / "voice.yaml"

__all__ = [
    "CONFIG_PATH",
    "PROJECT_ROOT",
]
