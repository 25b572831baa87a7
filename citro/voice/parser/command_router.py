"""Route parsed voice commands to appropriate handlers.

The router runs the same checks for every command before any handler sees
it: confidence, missing slots, then the caller's role. Handlers run under a
timeout, and any failure inside one becomes a polite "try again" action.
Nothing raised by a handler reaches the caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from functools import partial
from typing import TYPE_CHECKING, Awaitable, Callable

from citro.security.roles import can
from citro.services import Services
from citro.voice.models import (
    IntentType,
    ParsedCommand,
    ReplyKey,
    RequestContext,
    ResolvedAction,
    SlotName,
)

if TYPE_CHECKING:
    from citro.voice.config import VoiceConfig

logger = logging.getLogger(__name__)

# Handler type: async function(parsed_command, context, services) -> ResolvedAction
HandlerFn = Callable[[ParsedCommand, RequestContext, Services], Awaitable[ResolvedAction]]

DEFAULT_CONFIDENCE_THRESHOLD = 0.4
DEFAULT_TIMEOUT_SECONDS = 3.0

# Capability each gated intent needs
INTENT_CAPABILITIES: dict[IntentType, str] = {
    IntentType.SHOW_DASHBOARD: "dashboard:read",
    IntentType.QUERY_STATS: "stats:read",
    IntentType.MY_REGISTRATIONS: "registration:read",
}

# Capability needed to navigate to a gated page
PAGE_CAPABILITIES: dict[str, str] = {
    "/dashboard": "dashboard:read",
}


def required_capability(command: ParsedCommand) -> str | None:
    """Capability the caller needs for this command, if any."""
    if command.intent == IntentType.NAVIGATE_TO:
        return PAGE_CAPABILITIES.get(command.get_slot(SlotName.PAGE))
    return INTENT_CAPABILITIES.get(command.intent)


class CommandRouter:
    """Routes parsed voice commands to registered handlers."""

    def __init__(
        self,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.confidence_threshold = confidence_threshold
        self.timeout_seconds = timeout_seconds
        self._handlers: dict[IntentType, HandlerFn] = {}

    def register(self, intent: IntentType, handler: HandlerFn) -> None:
        """Register a handler for an intent type."""
        self._handlers[intent] = handler

    def has_handler(self, intent: IntentType) -> bool:
        return intent in self._handlers

    async def route_command(
        self,
        command: ParsedCommand,
        context: RequestContext,
        services: Services,
    ) -> ResolvedAction:
        """Route a parsed command to the appropriate handler.

        Always returns a ResolvedAction.
        """
        start = time.monotonic()

        # Not understood
        if command.intent == IntentType.UNKNOWN or command.confidence < self.confidence_threshold:
            logger.debug(
                f"Low confidence: {command.intent.value} at {command.confidence} "
                f"(threshold {self.confidence_threshold})"
            )
            return ResolvedAction.none(IntentType.UNKNOWN, command.confidence)

        # Ask for the first missing slot before touching any data
        missing = command.missing_slots
        if missing:
            return ResolvedAction.clarification(command.intent, command.confidence, missing[0])

        # Role gate
        capability = required_capability(command)
        if capability and not can(context.role, capability):
            logger.info(f"Refused {command.intent.value} for role {context.role.value}")
            return ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.REFUSED)

        handler = self._handlers.get(command.intent)
        if not handler:
            logger.warning(f"No handler for {command.intent.value}")
            return ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.UNAVAILABLE)

        # Execute handler
        try:
            action = await asyncio.wait_for(
                handler(command, context, services),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Voice handler for {command.intent.value} timed out after {self.timeout_seconds}s")
            action = ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.UNAVAILABLE)
        except Exception as e:
            logger.warning(f"Voice handler for {command.intent.value} failed: {e}", exc_info=True)
            action = ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.UNAVAILABLE)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug(f"Routed {command.intent.value} -> {action.action_type.value} in {elapsed_ms}ms")
        return action


def create_default_router(config: VoiceConfig | None = None) -> CommandRouter:
    """Create a router with all default handlers registered."""
    from citro.voice.config import get_voice_config

    config = config or get_voice_config()
    settings = config.pipeline
    labels = config.page_labels
    fest = config.fest

    from citro.voice.commands.cart_commands import (
        handle_add_to_cart,
        handle_add_to_cart_and_checkout,
        handle_check_cart,
        handle_clear_cart,
        handle_remove_from_cart,
    )
    from citro.voice.commands.dashboard_commands import (
        handle_my_registrations,
        handle_query_stats,
    )
    from citro.voice.commands.event_commands import (
        handle_day_events,
        handle_event_details,
        handle_fest_info,
        handle_recommend_events,
        handle_search_events,
        handle_show_events,
    )
    from citro.voice.commands.info_commands import (
        handle_contact,
        handle_faq,
        handle_static_reply,
        handle_what_can_i_do,
        handle_where_am_i,
    )
    from citro.voice.commands.navigation_commands import (
        handle_checkout,
        handle_go_back,
        handle_navigate_to,
        handle_navigate_to_event,
        handle_show_dashboard,
    )

    router = CommandRouter(
        confidence_threshold=settings.confidence_threshold,
        timeout_seconds=settings.collaborator_timeout_seconds,
    )

    # Navigation
    router.register(IntentType.NAVIGATE_TO, partial(handle_navigate_to, page_labels=labels))
    router.register(IntentType.NAVIGATE_TO_EVENT, handle_navigate_to_event)
    router.register(IntentType.GO_BACK, handle_go_back)
    router.register(IntentType.SHOW_DASHBOARD, handle_show_dashboard)
    router.register(IntentType.CHECKOUT, handle_checkout)

    # Events
    router.register(IntentType.SHOW_EVENTS, partial(handle_show_events, limit=settings.event_list_limit))
    router.register(
        IntentType.DAY_EVENTS,
        partial(handle_day_events, limit=settings.event_list_limit, fest=fest),
    )
    router.register(IntentType.SEARCH_EVENTS, partial(handle_search_events, limit=settings.event_list_limit))
    router.register(IntentType.RECOMMEND_EVENTS, partial(handle_recommend_events, limit=settings.event_list_limit))
    router.register(IntentType.FEST_INFO, partial(handle_fest_info, fest=fest))
    for intent in (
        IntentType.EVENT_DETAILS,
        IntentType.EVENT_WHEN,
        IntentType.EVENT_WHERE,
        IntentType.EVENT_PRICE,
        IntentType.EVENT_PRIZE,
    ):
        router.register(intent, handle_event_details)

    # Dashboard
    router.register(IntentType.QUERY_STATS, handle_query_stats)
    router.register(IntentType.MY_REGISTRATIONS, handle_my_registrations)

    # Cart
    router.register(IntentType.ADD_TO_CART, handle_add_to_cart)
    router.register(IntentType.ADD_TO_CART_AND_CHECKOUT, handle_add_to_cart_and_checkout)
    router.register(IntentType.REMOVE_FROM_CART, handle_remove_from_cart)
    router.register(IntentType.CHECK_CART, handle_check_cart)
    router.register(IntentType.CLEAR_CART, handle_clear_cart)

    # Context & conversation
    router.register(IntentType.WHERE_AM_I, partial(handle_where_am_i, page_labels=labels))
    router.register(IntentType.WHAT_CAN_I_DO, partial(handle_what_can_i_do, page_labels=labels))
    router.register(IntentType.FAQ, handle_faq)
    router.register(IntentType.CONTACT, partial(handle_contact, fest=fest))
    for intent in (
        IntentType.GREETING,
        IntentType.HOW_ARE_YOU,
        IntentType.HELP,
        IntentType.THANK_YOU,
        IntentType.COMPLIMENT,
        IntentType.JOKE,
        IntentType.BORED,
        IntentType.GOODBYE,
        IntentType.WHO_ARE_YOU,
    ):
        router.register(intent, handle_static_reply)

    return router
