"""Dashboard voice command handlers (stats, my registrations).

Both are role-gated by the router; stats need an owner or admin.
"""

from __future__ import annotations

import logging

from citro.services import Services
from citro.voice.models import ParsedCommand, ReplyKey, RequestContext, ResolvedAction

logger = logging.getLogger(__name__)


async def handle_query_stats(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle 'show stats'."""
    stats = await services.dashboard.get_stats()
    return ResolvedAction.data(command.intent, command.confidence, {"stats": stats})


async def handle_my_registrations(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
) -> ResolvedAction:
    """Handle 'my registrations'."""
    if not context.is_authenticated or not context.user_id:
        return ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.REFUSED)

    registrations = await services.dashboard.get_user_registrations(context.user_id)
    data = {"registrations": registrations, "count": len(registrations)}
    reply_key = ReplyKey.OK if registrations else ReplyKey.EMPTY
    return ResolvedAction.data(command.intent, command.confidence, data, reply_key=reply_key)
