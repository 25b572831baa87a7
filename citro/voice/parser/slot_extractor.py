"""Slot extraction for voice commands.

Pulls intent-specific parameters out of normalized text: page routes,
event names, ticket quantities, search queries, departments, days and FAQ
topics. Extraction is best effort and never does I/O. A slot that cannot
be found is left out; the router asks the user for it.
"""

from __future__ import annotations

import re
from typing import Any

from citro.voice.models import DayRef, EventRef, IntentType, SlotName
from citro.voice.parser.vocabulary import (
    CATEGORY_ALIASES,
    DAY_ORDINALS,
    FAQ_TOPICS,
    MAX_QUANTITY,
    MONTHS,
    NUMBER_WORDS,
    PAGE_ROUTES,
    RELATIVE_DAYS,
    alternation,
)

_NUMBER = rf"(?:\d+|{alternation(NUMBER_WORDS)})"
_TICKET_NOUNS = r"(?:tickets?|passes|pass|seats?|spots?|entries|entry|people|persons|members)"

_QUANTITY_PATTERNS = [
    re.compile(rf"\b(?P<n>{_NUMBER})\s+{_TICKET_NOUNS}\b"),
    re.compile(rf"\b(?:add|buy|book|get|put)\s+(?P<n>{_NUMBER})\b"),
    re.compile(rf"\b(?:quantity|qty)\s+(?P<n>{_NUMBER})\b"),
]

_PAGE_PATTERN = re.compile(rf"\b(?:{alternation(PAGE_ROUTES)})\b")
_EVENT_PAGE = re.compile(r"^/events/(\d+)/?$")

_CATEGORY_LOOKUP = {alias: slug for slug, aliases in CATEGORY_ALIASES.items() for alias in aliases}
_CATEGORY_WORDS = alternation(_CATEGORY_LOOKUP)
_CATEGORY_PATTERNS = [
    re.compile(rf"\b(?P<cat>{_CATEGORY_WORDS})(?: department)?(?: of)? events\b"),
    re.compile(rf"\bevents (?:of|by|from|in|for|under)(?: the)? (?P<cat>{_CATEGORY_WORDS})\b"),
    re.compile(
        rf"\b(?:what|which) events(?: (?:does|do|did|are there|are))?(?: (?:in|for|by|from|of))?(?: the)? "
        rf"(?P<cat>{_CATEGORY_WORDS})\b"
    ),
    re.compile(rf"\blist(?: all)?(?: the)? (?P<cat>{_CATEGORY_WORDS})(?: department)? events\b"),
    re.compile(rf"\bwhat (?:does|do)(?: the)? (?P<cat>{_CATEGORY_WORDS})(?: department)? (?:have|offer|host)\b"),
]

_DAY_NUMBER = r"(?:\d{1,2}|one|two|three|four|five|six|seven)"
_FEST_DAY = re.compile(rf"\bday (?P<n>{_DAY_NUMBER})\b")
_ORDINAL_DAY = re.compile(rf"\b(?P<ord>{alternation(DAY_ORDINALS)}) day\b")
_CALENDAR_DAYS = [
    re.compile(rf"\b(?P<month>{alternation(MONTHS)}) (?P<dom>\d{{1,2}})(?:st|nd|rd|th)?\b"),
    re.compile(rf"\b(?P<dom>\d{{1,2}})(?:st|nd|rd|th)? (?:of )?(?P<month>{alternation(MONTHS)})\b"),
]
_RELATIVE_DAY = re.compile(rf"\b(?P<rel>{alternation(RELATIVE_DAYS)})\b")

_TOPIC_LOOKUP = {phrase: topic for topic, phrases in FAQ_TOPICS.items() for phrase in phrases}
_TOPIC_PATTERN = re.compile(rf"\b(?:{alternation(_TOPIC_LOOKUP)})\b")

_QUERY_PATTERN = re.compile(
    r"\b(?:search(?: for)?|find(?: me)?|look(?:ing)? for|is there (?:a|an|any))\s+(?P<query>.+)$"
)

_CART_SUFFIX = r"(?:\s+(?:to|in|into|from)\s+(?:my\s+|the\s+)?cart)?"

# Capture the event name around each intent's trigger words
_EVENT_PATTERNS: dict[IntentType, tuple[re.Pattern, ...]] = {
    IntentType.NAVIGATE_TO_EVENT: (
        re.compile(r"\b(?:open|go to|take me to|navigate to|visit|bring me to)\s+(?P<name>.+)$"),
    ),
    IntentType.EVENT_DETAILS: (
        re.compile(
            r"\b(?:tell me (?:more )?about|(?:details|info|information) (?:of|about|on|for)|what is|what's|describe|explain)"
            r"\s+(?P<name>.+)$"
        ),
    ),
    IntentType.EVENT_WHEN: (
        re.compile(
            r"\b(?:when (?:is|does|will)|what time (?:is|does)|(?:date|time|timing|timings|schedule) (?:of|for))"
            r"\s+(?P<name>.+?)(?:\s+(?:start|starts|begin|begins|happen|happening|be held|held|take place))?$"
        ),
    ),
    IntentType.EVENT_WHERE: (
        re.compile(
            r"\b(?:where (?:is|will|does)|(?:venue|location) (?:of|for))"
            r"\s+(?P<name>.+?)(?:\s+(?:happening|be held|held|take place|located|conducted))?$"
        ),
    ),
    IntentType.EVENT_PRICE: (
        re.compile(
            r"\b(?:(?:price|cost|fee|fees|charges) (?:of|for)|how much (?:is|does|for)|ticket price (?:of|for))"
            r"\s+(?P<name>.+?)(?:\s+(?:cost|costs|charge))?$"
        ),
    ),
    IntentType.EVENT_PRIZE: (
        re.compile(
            r"\b(?:prize money|prizes?|rewards?|winnings)(?: pool)? (?:of|for|in)"
            r"\s+(?P<name>.+)$"
        ),
        re.compile(
            r"^(?:(?:what|how much)(?:'s| is| are)? the )?(?P<name>(?!(?:what|how)\b).+?)\s+"
            r"(?:prize money|prizes?|rewards?)$"
        ),
    ),
    IntentType.ADD_TO_CART: (
        re.compile(
            r"\b(?:add|put|buy|book|get|register(?: me)? for|sign(?: me)? up for|enroll(?: me)? (?:in|for))"
            rf"\s+(?P<name>.+?){_CART_SUFFIX}$"
        ),
    ),
    IntentType.ADD_TO_CART_AND_CHECKOUT: (
        re.compile(rf"\b(?:add|put|select|buy|book|get)\s+(?P<name>.+?){_CART_SUFFIX}\s+(?:and|then)\s"),
    ),
    IntentType.REMOVE_FROM_CART: (
        re.compile(rf"\b(?:remove|delete|drop|take out)\s+(?P<name>.+?){_CART_SUFFIX}$"),
    ),
}

_NAME_PREFIX = re.compile(
    rf"^(?:{_NUMBER}\s+)?(?:{_TICKET_NOUNS}\s+)?(?:(?:for|to|of|in|on|about)\s+)?(?:the\s+)?"
)
_NAME_SUFFIX = re.compile(rf"(?:\s+(?:events?|competitions?|contests?|{_TICKET_NOUNS}))+$")
_NUMBER_ONLY = re.compile(rf"^{_NUMBER}$")

# Words that point at "the event I'm looking at" rather than naming one
_DEICTIC_NAMES = frozenset({
    "", "it", "this", "that", "this one", "that one", "event", "events", "this event",
    "that event", "cart", "my cart", "ticket", "tickets", "one",
})


def _parse_number(token: str) -> int | None:
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)


def extract_quantity(text: str) -> int | None:
    """Find a ticket count ("2 tickets", "buy three"), capped at MAX_QUANTITY.

    An explicit zero comes back as 0 so the caller can ask again instead of
    assuming one ticket.
    """
    for pattern in _QUANTITY_PATTERNS:
        match = pattern.search(text)
        if match:
            value = _parse_number(match.group("n"))
            if value is not None:
                return min(value, MAX_QUANTITY)
    return None


def extract_page(text: str) -> str | None:
    """Map a spoken page name to its route."""
    match = _PAGE_PATTERN.search(text)
    if not match:
        return None
    return PAGE_ROUTES[re.sub(r"\s+", " ", match.group(0))]


def extract_category(text: str) -> str | None:
    """Find a department slug in "cse events", "what events does cse have" and the like."""
    for pattern in _CATEGORY_PATTERNS:
        match = pattern.search(text)
        if match:
            return _CATEGORY_LOOKUP[re.sub(r"\s+", " ", match.group("cat"))]
    return None


def extract_day(text: str) -> DayRef | None:
    """Find a day: "day 2", "second day", "april 9", "9th april", "today"."""
    match = _FEST_DAY.search(text)
    if match and _parse_number(match.group("n")):
        return DayRef(fest_day=_parse_number(match.group("n")))

    match = _ORDINAL_DAY.search(text)
    if match:
        return DayRef(fest_day=DAY_ORDINALS[match.group("ord")])

    for pattern in _CALENDAR_DAYS:
        match = pattern.search(text)
        if match:
            return DayRef(month=MONTHS[match.group("month")], day_of_month=int(match.group("dom")))

    match = _RELATIVE_DAY.search(text)
    if match:
        return DayRef(offset=RELATIVE_DAYS[match.group("rel")])

    return None


def extract_topic(text: str) -> str | None:
    match = _TOPIC_PATTERN.search(text)
    if not match:
        return None
    return _TOPIC_LOOKUP[re.sub(r"\s+", " ", match.group(0))]


def extract_query(text: str) -> str | None:
    """Text after "search for" / "find", minus a trailing "events"."""
    match = _QUERY_PATTERN.search(text)
    if not match:
        return None
    query = re.sub(r"\b(?:events?|competitions?)$", "", match.group("query")).strip()
    query = re.sub(r"^(?:the|an?|some)\s+", "", query).strip()
    return query or None


def clean_event_name(name: str) -> str:
    """Strip quantities, ticket nouns, articles and cart phrases from a name."""
    name = name.strip()
    previous = None
    while name != previous:
        previous = name
        name = _NAME_PREFIX.sub("", name).strip()
        name = _NAME_SUFFIX.sub("", name).strip()
    if name in _DEICTIC_NAMES or _NUMBER_ONLY.match(name):
        return ""
    return name


def event_id_from_page(current_page: str | None) -> int | None:
    """Event id when the user is on an /events/<id> page."""
    if not current_page:
        return None
    match = _EVENT_PAGE.match(current_page.split("?")[0])
    return int(match.group(1)) if match else None


def extract_event(
    intent: IntentType,
    text: str,
    current_page: str | None = None,
    aliases: dict[str, str] | None = None,
) -> EventRef | None:
    """Find the event a command refers to.

    A spoken name wins; otherwise an /events/<id> page supplies the id.
    Known speech mishearings are corrected through ``aliases``.
    """
    name = ""
    for pattern in _EVENT_PATTERNS.get(intent, ()):
        match = pattern.search(text)
        if match:
            name = clean_event_name(match.group("name"))
            if name:
                break

    if name:
        if aliases:
            name = aliases.get(name, name)
        return EventRef(name=name)

    event_id = event_id_from_page(current_page)
    if event_id is not None:
        return EventRef(event_id=event_id)

    return None


def extract_slots(
    intent: IntentType,
    text: str,
    current_page: str | None = None,
    aliases: dict[str, str] | None = None,
) -> dict[SlotName, Any]:
    """Extract the slots relevant to ``intent`` from normalized text."""
    slots: dict[SlotName, Any] = {}

    if intent == IntentType.NAVIGATE_TO:
        page = extract_page(text)
        if page:
            slots[SlotName.PAGE] = page

    elif intent in (IntentType.SHOW_EVENTS, IntentType.DAY_EVENTS, IntentType.RECOMMEND_EVENTS):
        category = extract_category(text)
        if category:
            slots[SlotName.CATEGORY] = category
        if intent == IntentType.DAY_EVENTS:
            day = extract_day(text)
            if day:
                slots[SlotName.DAY] = day

    elif intent == IntentType.SEARCH_EVENTS:
        query = extract_query(text)
        if query:
            slots[SlotName.QUERY] = query

    elif intent == IntentType.FAQ:
        topic = extract_topic(text)
        if topic:
            slots[SlotName.TOPIC] = topic

    elif intent in _EVENT_PATTERNS:
        event = extract_event(intent, text, current_page, aliases)
        if event:
            slots[SlotName.EVENT] = event
        if intent in (IntentType.ADD_TO_CART, IntentType.ADD_TO_CART_AND_CHECKOUT):
            quantity = extract_quantity(text)
            # Zero tickets was heard but can't be booked: None marks it to ask again
            slots[SlotName.QUANTITY] = 1 if quantity is None else (quantity or None)

    return slots
