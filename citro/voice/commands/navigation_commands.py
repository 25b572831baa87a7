"""Navigation voice command handlers.

Only opening an event page reads data, to find the event's id. Gated
pages are checked by the router before a handler runs.
"""

from __future__ import annotations

import logging

from citro.services import Services
from citro.voice.commands.event_commands import resolve_event
from citro.voice.models import EventRef, ParsedCommand, ReplyKey, RequestContext, ResolvedAction, SlotName
from citro.voice.parser.vocabulary import PAGE_LABELS

logger = logging.getLogger(__name__)


def _same_page(path: str, current_page: str) -> bool:
    current = (current_page or "/").split("?")[0].rstrip("/") or "/"
    return current == (path.rstrip("/") or "/")


def _go(command: ParsedCommand, context: RequestContext, path: str, label: str) -> ResolvedAction:
    if _same_page(path, context.current_page):
        return ResolvedAction.none(command.intent, command.confidence, already_here=True, label=label)
    return ResolvedAction.navigate(command.intent, command.confidence, path, label=label)


async def handle_navigate_to(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    page_labels: dict[str, str] | None = None,
) -> ResolvedAction:
    """Handle 'go to events', 'take me home', 'open login'."""
    path = command.get_slot(SlotName.PAGE)
    label = (page_labels or PAGE_LABELS).get(path, "that page")
    return _go(command, context, path, label)


async def handle_navigate_to_event(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
) -> ResolvedAction:
    """Handle 'open Codeology': the event's own page."""
    ref: EventRef = command.get_slot(SlotName.EVENT)
    event = await resolve_event(ref, services)
    if not event:
        return ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.NOT_FOUND, name=ref.name)
    return _go(command, context, f"/events/{event['id']}", f"the {event['title']} page")


async def handle_go_back(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle 'go back'. The browser resolves "back" from its own history."""
    return ResolvedAction.navigate(command.intent, command.confidence, "back", label="the previous page")


async def handle_show_dashboard(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle 'open dashboard'."""
    return _go(command, context, "/dashboard", "the dashboard")


async def handle_checkout(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle 'checkout' / 'proceed to payment'."""
    return _go(command, context, "/checkout", "the checkout page")
