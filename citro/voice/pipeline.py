"""Voice pipeline entry point.

    transcript → normalize → classify + extract slots → route → compose

``process_command`` always returns a VoiceResult for any transcript string;
low confidence, missing slots, refusals and collaborator failures all come
back as polite replies. Only a failure while composing the reply escapes.

Usage:
    python -m citro.voice.pipeline "show events" --seed
    python -m citro.voice.pipeline "show stats" --role admin --user u-1
"""

from __future__ import annotations

import logging

from citro.services import Services
from citro.voice.config import VoiceConfig, get_voice_config
from citro.voice.models import RequestContext, VoiceResult
from citro.voice.parser.command_router import CommandRouter, create_default_router
from citro.voice.parser.intent_parser import parse_command
from citro.voice.parser.normalizer import normalize
from citro.voice.responses import compose

logger = logging.getLogger(__name__)

_default_router: CommandRouter | None = None


def get_default_router() -> CommandRouter:
    """Get the shared router built from the process-wide config."""
    global _default_router
    if _default_router is None:
        _default_router = create_default_router()
    return _default_router


async def process_command(
    transcript: str,
    context: RequestContext | None = None,
    *,
    services: Services,
    router: CommandRouter | None = None,
    config: VoiceConfig | None = None,
) -> VoiceResult:
    """Run one voice command through the pipeline.

    Args:
        transcript: Text from the browser's speech recognizer
        context: Who is asking and from which page (anonymous if None)
        services: Data collaborators (events, cart, dashboard)
        router: Command router (defaults to the shared router)
        config: Pipeline settings (defaults to args/voice.yaml)

    Returns:
        VoiceResult ready to serialize
    """
    context = context or RequestContext()
    if config is not None:
        router = router or create_default_router(config)
    config = config or get_voice_config()
    router = router or get_default_router()

    normalized = normalize(transcript, max_length=config.pipeline.max_transcript_length)
    command = parse_command(
        normalized,
        current_page=context.current_page,
        aliases=config.event_aliases,
    )
    logger.debug(
        f"Voice command '{normalized.text}' -> {command.intent.value} "
        f"({command.confidence:.2f}) on {context.current_page}"
    )

    action = await router.route_command(command, context, services)
    result = compose(action, seed=normalized.text)

    logger.info(
        f"Voice {result.intent.value} ({result.confidence:.2f}) "
        f"action={result.action} role={context.role.value}"
    )
    return result


def main():
    import argparse
    import asyncio
    import json
    import sys

    from citro.logging_config import setup_logging
    from citro.security.roles import Role
    from citro.services import create_default_services
    from citro.services.database import init_db

    parser = argparse.ArgumentParser(description="Citro Voice Pipeline")
    parser.add_argument("transcript", help="What the user said")
    parser.add_argument("--page", default="/", help="Page the user is on (default: /)")
    parser.add_argument(
        "--role",
        default=Role.ANONYMOUS.value,
        choices=[role.value for role in Role],
        help="Caller role (default: anonymous)",
    )
    parser.add_argument("--user", help="User ID for signed-in callers")
    parser.add_argument("--cart", help="Anonymous cart session key")
    parser.add_argument("--db", help="Database path (default: CITRO_DB_PATH or data/citro.db)")
    parser.add_argument("--seed", action="store_true", help="Load sample events into an empty database")

    args = parser.parse_args()
    setup_logging()

    role = Role(args.role)
    if role != Role.ANONYMOUS and not args.user:
        print("Error: --user required for signed-in roles")
        sys.exit(1)

    init_db(args.db, seed=args.seed)
    context = RequestContext(
        current_page=args.page,
        user_id=args.user,
        role=role,
        is_authenticated=role != Role.ANONYMOUS,
        cart_session=args.cart,
    )

    result = asyncio.run(process_command(args.transcript, context, services=create_default_services(args.db)))

    print(f"OK {result.reply}")
    print(json.dumps(result.to_dict(), indent=2, default=str, ensure_ascii=False))


if __name__ == "__main__":
    main()
