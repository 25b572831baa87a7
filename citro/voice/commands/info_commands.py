"""Context and conversation handlers.

Handles: where am I, what can I do here, FAQ topics, contact details and
the small-talk intents (greeting, jokes, thanks, goodbye and the rest). None
of these touch data; the composer writes the words.
"""

from __future__ import annotations

from citro.services import Services
from citro.voice.config import FestConfig
from citro.voice.models import ParsedCommand, RequestContext, ResolvedAction, SlotName
from citro.voice.parser.slot_extractor import event_id_from_page
from citro.voice.parser.vocabulary import PAGE_LABELS

# What each page offers, by route
PAGE_HINTS: dict[str, list[str]] = {
    "/": ["browse events", "ask about any event", "open the events page"],
    "/events": ["search for an event", "filter by department", "add an event to your cart"],
    "/event": ["ask when or where it is", "ask the ticket price", "add it to your cart"],
    "/cart": ["check what's in your cart", "remove an event", "proceed to checkout"],
    "/checkout": ["review your tickets", "complete the payment"],
    "/dashboard": ["see your stats", "check your registrations"],
    "/login": ["sign in", "go to the registration page"],
    "/register": ["create an account", "go to the login page"],
}

DEFAULT_HINTS = ["browse events", "check your cart", "ask me about any event"]


def page_key(current_page: str | None) -> str:
    """Route key for a page path; every /events/<id> page shares "/event"."""
    path = (current_page or "/").split("?")[0].rstrip("/") or "/"
    if event_id_from_page(path) is not None:
        return "/event"
    return path


def describe_page(current_page: str | None, page_labels: dict[str, str] | None = None) -> str:
    key = page_key(current_page)
    if key == "/event":
        return "an event page"
    return (page_labels or PAGE_LABELS).get(key, "a page I don't know yet")


async def handle_where_am_i(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    page_labels: dict[str, str] | None = None,
) -> ResolvedAction:
    """Handle 'where am I'."""
    return ResolvedAction.none(
        command.intent,
        command.confidence,
        page=page_key(context.current_page),
        label=describe_page(context.current_page, page_labels),
    )


async def handle_what_can_i_do(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    page_labels: dict[str, str] | None = None,
) -> ResolvedAction:
    """Handle 'what can I do here'."""
    key = page_key(context.current_page)
    return ResolvedAction.none(
        command.intent,
        command.confidence,
        page=key,
        label=describe_page(context.current_page, page_labels),
        hints=PAGE_HINTS.get(key, DEFAULT_HINTS),
    )


async def handle_faq(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle 'is there parking', 'will I get a certificate'."""
    return ResolvedAction.none(command.intent, command.confidence, topic=command.get_slot(SlotName.TOPIC))


async def handle_contact(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    fest: FestConfig | None = None,
) -> ResolvedAction:
    """Handle 'contact' / 'how do I reach the organizers'."""
    email = (fest or FestConfig()).contact_email
    return ResolvedAction.none(command.intent, command.confidence, email=email)


async def handle_static_reply(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Small talk and help: words only, no action."""
    return ResolvedAction.none(command.intent, command.confidence)
