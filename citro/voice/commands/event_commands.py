"""Event voice command handlers.

Handles: show events, day schedules, search, recommendations, fest facts
and the per-event questions (details, when, where, price, prize). Event
lookups go through the events service; a name that matches nothing resolves
to a polite not-found reply.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from citro.services import EventFilters, Services
from citro.voice.config import FestConfig
from citro.voice.models import (
    DayRef,
    EventRef,
    ParsedCommand,
    ReplyKey,
    RequestContext,
    ResolvedAction,
    SlotName,
)

logger = logging.getLogger(__name__)

# Fields of an event row that are safe to hand to the browser
EVENT_FIELDS = (
    "id",
    "title",
    "tagline",
    "venue",
    "start_time",
    "end_time",
    "ticket_price",
    "available",
    "prize",
    "category",
    "category_name",
)


def summarize_event(event: dict[str, Any]) -> dict[str, Any]:
    """Trim an event row to the fields replies and the browser use."""
    return {key: event.get(key) for key in EVENT_FIELDS}


async def resolve_event(ref: EventRef, services: Services) -> dict[str, Any] | None:
    """Look up the event a command refers to, by spoken name first, then page id."""
    if ref.name:
        return await services.events.find_event_by_name(ref.name)
    if ref.event_id is not None:
        return await services.events.get_event(ref.event_id)
    return None


def current_date() -> date:
    return date.today()


def month_day(when: date) -> str:
    return f"{when.strftime('%B')} {when.day}"


def fest_dates(fest: FestConfig) -> str:
    """'April 8 to April 10' (or just 'April 8' for a one-day fest)."""
    if fest.days == 1:
        return month_day(fest.start_date)
    return f"{month_day(fest.start_date)} to {month_day(fest.end_date)}"


def resolve_day(ref: DayRef, fest: FestConfig, today: date) -> tuple[date | None, str]:
    """Turn a spoken day into a calendar date and a phrase for the reply.

    Fest days count from the configured start date and calendar dates take
    the fest's year. The date is None when the day does not exist, such as
    "day 5" of a three-day fest or "february 30".

    Returns:
        (date or None, phrase) e.g. (2026-04-09, "on Day 2 (April 9)")
    """
    if ref.fest_day is not None:
        number = fest.days if ref.fest_day == -1 else ref.fest_day
        when = fest.date_of_day(ref.fest_day)
        if when is None:
            return None, f"on Day {number}"
        return when, f"on Day {number} ({month_day(when)})"

    if ref.offset is not None:
        when = today + timedelta(days=ref.offset)
        word = "today" if ref.offset == 0 else "tomorrow"
        number = fest.day_number(when)
        return when, f"{word} (Day {number})" if number else word

    try:
        when = date(fest.start_date.year, ref.month, ref.day_of_month)
    except (TypeError, ValueError):
        return None, "on that date"
    return when, f"on {month_day(when)}"


async def handle_show_events(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    limit: int = 5,
) -> ResolvedAction:
    """Handle 'show events' / 'cse events'."""
    category = command.get_slot(SlotName.CATEGORY)
    events = await services.events.list_published_events(EventFilters(category=category, limit=limit))

    data = {
        "events": [summarize_event(e) for e in events],
        "count": len(events),
        "category": category,
    }
    reply_key = ReplyKey.OK if events else ReplyKey.EMPTY
    return ResolvedAction.data(command.intent, command.confidence, data, reply_key=reply_key)


async def handle_day_events(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    limit: int = 5,
    fest: FestConfig | None = None,
) -> ResolvedAction:
    """Handle 'day 2 events', "what's on tomorrow", 'april 9 cse events'."""
    fest = fest or FestConfig()
    ref: DayRef = command.get_slot(SlotName.DAY)
    when, label = resolve_day(ref, fest, current_date())

    if when is None or fest.day_number(when) is None:
        return ResolvedAction.none(
            command.intent,
            command.confidence,
            reply_key=ReplyKey.NOT_FOUND,
            day=label,
            dates=fest_dates(fest),
        )

    category = command.get_slot(SlotName.CATEGORY)
    filters = EventFilters(category=category, on_date=when.isoformat(), limit=limit)
    events = await services.events.list_published_events(filters)

    data = {
        "events": [summarize_event(e) for e in events],
        "count": len(events),
        "date": when.isoformat(),
        "when": label,
        "category": category,
    }
    reply_key = ReplyKey.OK if events else ReplyKey.EMPTY
    return ResolvedAction.data(command.intent, command.confidence, data, reply_key=reply_key)


async def handle_search_events(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    limit: int = 5,
) -> ResolvedAction:
    """Handle 'search for robotics'."""
    query = command.get_slot(SlotName.QUERY)
    events = await services.events.list_published_events(EventFilters(search=query, limit=limit))

    data = {
        "events": [summarize_event(e) for e in events],
        "count": len(events),
        "query": query,
    }
    reply_key = ReplyKey.OK if events else ReplyKey.EMPTY
    return ResolvedAction.data(command.intent, command.confidence, data, reply_key=reply_key)


async def handle_recommend_events(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    limit: int = 5,
) -> ResolvedAction:
    """Handle 'best events' / 'recommend something'.

    Featured events are the picks. With nothing featured the regular
    listing stands in.
    """
    category = command.get_slot(SlotName.CATEGORY)
    events = await services.events.list_published_events(EventFilters(category=category, featured=True, limit=limit))
    if not events:
        events = await services.events.list_published_events(EventFilters(category=category, limit=limit))

    data = {
        "events": [summarize_event(e) for e in events],
        "count": len(events),
        "category": category,
    }
    reply_key = ReplyKey.OK if events else ReplyKey.EMPTY
    return ResolvedAction.data(command.intent, command.confidence, data, reply_key=reply_key)


async def handle_event_details(command: ParsedCommand, context: RequestContext, services: Services) -> ResolvedAction:
    """Handle 'tell me about X', 'when is X', 'where is X', 'how much is X', 'prize for X'.

    All five fetch the same event; the reply template differs by intent.
    """
    ref: EventRef = command.get_slot(SlotName.EVENT)
    event = await resolve_event(ref, services)

    if not event:
        logger.debug(f"Event not found for {ref.to_dict()}")
        return ResolvedAction.none(command.intent, command.confidence, reply_key=ReplyKey.NOT_FOUND, name=ref.name)

    return ResolvedAction.data(command.intent, command.confidence, {"event": summarize_event(event)})


async def handle_fest_info(
    command: ParsedCommand,
    context: RequestContext,
    services: Services,
    fest: FestConfig | None = None,
) -> ResolvedAction:
    """Handle 'when is the fest', 'what is the theme', 'how many events'."""
    fest = fest or FestConfig()
    total = await services.events.count_published_events()

    data = {
        "fest": {
            "name": fest.name,
            "theme": fest.theme,
            "start_date": fest.start_date.isoformat(),
            "end_date": fest.end_date.isoformat(),
            "dates": fest_dates(fest),
            "days": fest.days,
            "venue": fest.venue,
        },
        "total_events": total,
    }
    return ResolvedAction.data(command.intent, command.confidence, data)
