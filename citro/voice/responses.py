"""Reply templates and the response composer.

Every reply is pre-written. Templates are keyed by (intent, reply key);
where an intent has several phrasings, the variant is picked from a hash of
the transcript so the same request always gets the same words.
"""

from __future__ import annotations

import zlib
from datetime import datetime
from typing import Any, Callable, Union

from citro.voice.models import (
    ActionType,
    IntentType,
    ReplyKey,
    ResolvedAction,
    VoiceResult,
)
from citro.voice.parser.intent_parser import suggest_closest

Template = Union[str, tuple, Callable[[dict[str, Any]], str]]


# ─────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ─────────────────────────────────────────────────────────────────────────────

def choose(variants: tuple[str, ...], seed: str) -> str:
    """Pick a variant deterministically from the seed text."""
    return variants[zlib.crc32(seed.encode("utf-8")) % len(variants)]


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def join_names(names: list[str], total: int | None = None, shown: int = 3) -> str:
    """'A, B, C and 2 more' / 'A and B' / 'A'."""
    total = len(names) if total is None else total
    names = [n for n in names if n][:shown]
    if not names:
        return ""
    if total > len(names):
        return f"{', '.join(names)} and {total - len(names)} more"
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} and {names[-1]}"


def format_price(price: Any) -> str:
    try:
        value = float(price or 0)
    except (TypeError, ValueError):
        return "an unknown price"
    if value <= 0:
        return "free"
    if value.is_integer():
        return f"₹{value:,.0f}"
    return f"₹{value:,.2f}"


def format_when(value: Any) -> str:
    """'April 8 at 12:00 PM' from an ISO timestamp; raw text otherwise."""
    if not value:
        return "a time that hasn't been announced yet"
    try:
        dt = datetime.fromisoformat(str(value))
    except ValueError:
        return str(value)
    return f"{dt.strftime('%B')} {dt.day} at {dt.strftime('%I:%M %p').lstrip('0')}"


def format_clock(value: Any) -> str | None:
    try:
        dt = datetime.fromisoformat(str(value))
    except (TypeError, ValueError):
        return None
    return dt.strftime("%I:%M %p").lstrip("0")


# ─────────────────────────────────────────────────────────────────────────────
# Data-bearing replies
# ─────────────────────────────────────────────────────────────────────────────

def _data(payload: dict[str, Any]) -> dict[str, Any]:
    data = payload.get("data")
    return data if isinstance(data, dict) else {}


def _event_list_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    events = data.get("events") or []
    count = data.get("count", len(events))
    names = join_names([e.get("title") for e in events], count)
    if data.get("query"):
        return f'Found {plural(count, "event")} matching "{data["query"]}": {names}.'
    if data.get("category"):
        label = events[0].get("category_name") or data["category"].upper()
        return f"Found {count} {label} {'event' if count == 1 else 'events'}: {names}."
    return f"Found {count} upcoming {'event' if count == 1 else 'events'}: {names}."


def _empty_events_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    if data.get("query"):
        return f"No events match \"{data['query']}\". Try another name, or say 'show events'."
    if data.get("category"):
        return f"I couldn't find any {data['category'].upper()} events right now."
    return "There are no published events right now. Check back soon!"


def _day_events_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    events = data.get("events") or []
    count = data.get("count", len(events))
    lines = [f"{count} {'event' if count == 1 else 'events'} {data.get('when', 'that day')}:"]
    for event in events:
        start = format_clock(event.get("start_time"))
        details = ", ".join(part for part in (start, event.get("venue")) if part)
        lines.append(f"{event.get('title')} ({details})" if details else str(event.get("title")))
    return "\n".join(lines)


def _empty_day_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    department = f"{data['category'].upper()} " if data.get("category") else ""
    return f"No {department}events are scheduled {data.get('when', 'that day')}. Say 'show events' to see everything."


def _recommend_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    events = data.get("events") or []
    names = join_names([e.get("title") for e in events], data.get("count", len(events)))
    if data.get("category"):
        label = events[0].get("category_name") or data["category"].upper()
        return f"Top {label} picks: {names}. Ask me about any of them!"
    return f"Crowd favourites this year: {names}. Ask me about any of them!"


def _fest_info_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    fest = data.get("fest") or {}
    return (
        f"{fest.get('name')} runs {fest.get('dates')} ({plural(fest.get('days', 0), 'day')}) "
        f"at {fest.get('venue')}.\n"
        f"The theme is \"{fest.get('theme')}\", with {plural(data.get('total_events', 0), 'event')} to explore. "
        "Ask me about any event, department or day!"
    )


def _event(payload: dict[str, Any]) -> dict[str, Any]:
    return _data(payload).get("event") or {}


def _event_details_reply(payload: dict[str, Any]) -> str:
    event = _event(payload)
    parts = [f"{event.get('title')}: {event['tagline']}." if event.get("tagline") else f"Here's {event.get('title')}."]
    if event.get("venue"):
        parts.append(f"It's at {event['venue']} on {format_when(event.get('start_time'))}.")
    parts.append(f"Entry is {format_price(event.get('ticket_price'))}.")
    if event.get("prize"):
        parts.append(f"Prizes: {event['prize']}.")
    return " ".join(parts)


def _event_when_reply(payload: dict[str, Any]) -> str:
    event = _event(payload)
    reply = f"{event.get('title')} starts {format_when(event.get('start_time'))}"
    end = format_clock(event.get("end_time"))
    return f"{reply} and ends at {end}." if end else f"{reply}."


def _event_where_reply(payload: dict[str, Any]) -> str:
    event = _event(payload)
    if not event.get("venue"):
        return f"The venue for {event.get('title')} hasn't been announced yet."
    return f"{event.get('title')} is at {event['venue']}."


def _event_price_reply(payload: dict[str, Any]) -> str:
    event = _event(payload)
    price = format_price(event.get("ticket_price"))
    if price == "free":
        return f"{event.get('title')} is free to join."
    return f"Tickets for {event.get('title')} cost {price}."


def _event_prize_reply(payload: dict[str, Any]) -> str:
    event = _event(payload)
    if not event.get("prize"):
        return f"Prize details for {event.get('title')} haven't been announced yet."
    return f"{event.get('title')} prizes: {event['prize']}."


def _stats_reply(payload: dict[str, Any]) -> str:
    stats = _data(payload).get("stats") or {}
    return (
        f"There are {stats.get('active_events', 0)} active events out of {stats.get('total_events', 0)}, "
        f"with {plural(stats.get('total_registrations', 0), 'registration')}, "
        f"{plural(stats.get('tickets_sold', 0), 'ticket')} sold "
        f"and {format_price(stats.get('total_revenue', 0)).replace('free', '₹0')} in revenue."
    )


def _registrations_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    registrations = data.get("registrations") or []
    count = data.get("count", len(registrations))
    names = join_names([r.get("title") for r in registrations], count)
    return f"You're registered for {plural(count, 'event')}: {names}."


def _added_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    item = data.get("cart_item") or {}
    quantity = item.get("quantity", 1)
    if data.get("quantity_capped"):
        return (
            f"Only {plural(quantity, 'spot')} left for {item.get('title')}, "
            f"so I added {quantity} to your cart."
        )
    return f"Added {plural(quantity, 'ticket')} for {item.get('title')} to your cart."


def _cart_reply(payload: dict[str, Any]) -> str:
    data = _data(payload)
    items = data.get("items") or []
    names = join_names([i.get("title") for i in items])
    return (
        f"You have {plural(data.get('count', 0), 'ticket')} in your cart: {names}. "
        f"Total {format_price(data.get('total', 0))}."
    )


def _not_found_reply(payload: dict[str, Any]) -> str:
    if payload.get("name"):
        return f"I couldn't find an event called \"{payload['name']}\". Try saying the name again."
    return "I couldn't find that event. Try saying its name."


def _already_here(default: Callable[[dict[str, Any]], str]) -> Callable[[dict[str, Any]], str]:
    def reply(payload: dict[str, Any]) -> str:
        if payload.get("already_here"):
            return f"You're already on {payload.get('label', 'that page')}."
        return default(payload)

    return reply


FAQ_REPLIES: dict[str, str] = {
    "certificate": (
        "Most competitions give participation certificates. "
        "Check the event page for confirmation, or ask the department coordinator."
    ),
    "refund": "Refund policies vary by event. Contact the event organizer or department coordinator.",
    "cancellation": (
        "To cancel a registration, open your dashboard and find the event under My Registrations. "
        "If it can be cancelled, the option is there."
    ),
    "team_size": "Team sizes vary by event. Some are solo, others need teams. Ask me about a specific event.",
    "wifi": "Wi-Fi is available across campus for participants during the fest.",
    "food": "Food stalls and refreshments are available at the fest venue.",
    "what_to_bring": (
        "It depends on the event. Bring your laptop and charger for coding events "
        "and your robot and tools for robotics. Carry a valid college ID for check-in."
    ),
    "parking": "Parking is available on campus. Follow the signs for visitor parking.",
    "accommodation": "For accommodation, contact the Core Team or your department coordinator.",
    "registration": (
        "Find an event, add it to your cart and check out. "
        "You can also say 'register for' and the event name."
    ),
}

HELP_REPLY = (
    "Here's what I can do:\n"
    "Navigate: 'show events', 'open dashboard', 'go home'\n"
    "Event info: 'tell me about Codeology', 'when is ROBO Race?'\n"
    "Pricing: 'how much is Pharmathon?'\n"
    "Prizes: 'prize of ROBO Race'\n"
    "Departments: 'CSE events', 'MBA events'\n"
    "Schedule: 'day 1 events', 'what's on tomorrow?'\n"
    "Cart: 'add Codeology to cart', 'what's in my cart?'\n"
    "Account: 'my registrations', 'show stats'"
)

NOT_UNDERSTOOD = (
    "Hmm, I didn't quite catch that.",
    "I'm not sure what you mean.",
    "Sorry, I couldn't understand that.",
)

REFUSED = (
    "Sorry, that isn't available for your account. Try signing in with an account that has access.",
    "I can't open that for you right now. You may need to sign in with a different account.",
)

UNAVAILABLE = (
    "That service isn't responding right now. Please try again in a moment.",
    "I couldn't reach that just now. Give it another try in a moment.",
)

CLARIFY_PROMPTS: dict[str, str] = {
    "page": "Which page should I open? You can say events, cart, dashboard or home.",
    "event": "Which event do you mean? Try saying its name, like 'Codeology'.",
    "query": "What should I search for?",
    "topic": "What would you like to know about?",
    "quantity": "How many tickets would you like? You can book 1 to 20.",
    "day": "Which day? You can say 'day 1', 'tomorrow' or a date like 'April 9'.",
}

# Prompts worded for one intent's missing slot
INTENT_CLARIFY_PROMPTS: dict[tuple[IntentType, str], str] = {
    (IntentType.ADD_TO_CART, "event"): "Which event should I add to your cart?",
    (IntentType.ADD_TO_CART_AND_CHECKOUT, "event"): "Which event should I add before checkout?",
    (IntentType.REMOVE_FROM_CART, "event"): "Which event should I remove from your cart?",
    (IntentType.NAVIGATE_TO_EVENT, "event"): "Which event should I open?",
}

TEMPLATES: dict[tuple[IntentType, ReplyKey], Template] = {
    # Navigation
    (IntentType.NAVIGATE_TO, ReplyKey.OK): _already_here(lambda p: f"Taking you to {p.get('label', 'that page')}."),
    (IntentType.NAVIGATE_TO_EVENT, ReplyKey.OK): _already_here(lambda p: f"Opening {p.get('label', 'that event')}."),
    (IntentType.GO_BACK, ReplyKey.OK): "Going back.",
    (IntentType.SHOW_DASHBOARD, ReplyKey.OK): _already_here(lambda p: "Opening your dashboard."),
    (IntentType.CHECKOUT, ReplyKey.OK): _already_here(lambda p: "Taking you to checkout."),
    # Events
    (IntentType.SHOW_EVENTS, ReplyKey.OK): _event_list_reply,
    (IntentType.SHOW_EVENTS, ReplyKey.EMPTY): _empty_events_reply,
    (IntentType.DAY_EVENTS, ReplyKey.OK): _day_events_reply,
    (IntentType.DAY_EVENTS, ReplyKey.EMPTY): _empty_day_reply,
    (IntentType.DAY_EVENTS, ReplyKey.NOT_FOUND): (
        lambda p: f"There's nothing scheduled {p.get('day', 'then')}. The fest runs {p.get('dates')}."
    ),
    (IntentType.SEARCH_EVENTS, ReplyKey.OK): _event_list_reply,
    (IntentType.SEARCH_EVENTS, ReplyKey.EMPTY): _empty_events_reply,
    (IntentType.RECOMMEND_EVENTS, ReplyKey.OK): _recommend_reply,
    (IntentType.RECOMMEND_EVENTS, ReplyKey.EMPTY): _empty_events_reply,
    (IntentType.EVENT_DETAILS, ReplyKey.OK): _event_details_reply,
    (IntentType.EVENT_WHEN, ReplyKey.OK): _event_when_reply,
    (IntentType.EVENT_WHERE, ReplyKey.OK): _event_where_reply,
    (IntentType.EVENT_PRICE, ReplyKey.OK): _event_price_reply,
    (IntentType.EVENT_PRIZE, ReplyKey.OK): _event_prize_reply,
    (IntentType.FEST_INFO, ReplyKey.OK): _fest_info_reply,
    # Dashboard
    (IntentType.QUERY_STATS, ReplyKey.OK): _stats_reply,
    (IntentType.MY_REGISTRATIONS, ReplyKey.OK): _registrations_reply,
    (IntentType.MY_REGISTRATIONS, ReplyKey.EMPTY): (
        "You haven't registered for any events yet. Say 'show events' to find one."
    ),
    # Cart
    (IntentType.ADD_TO_CART, ReplyKey.OK): _added_reply,
    (IntentType.ADD_TO_CART, ReplyKey.SOLD_OUT): lambda p: f"Sorry, {p.get('title', 'that event')} is sold out.",
    (IntentType.ADD_TO_CART_AND_CHECKOUT, ReplyKey.OK): lambda p: f"{_added_reply(p)} Taking you to checkout.",
    (IntentType.ADD_TO_CART_AND_CHECKOUT, ReplyKey.SOLD_OUT): (
        lambda p: f"Sorry, {p.get('title', 'that event')} is sold out, so there's nothing new to check out."
    ),
    (IntentType.REMOVE_FROM_CART, ReplyKey.OK): lambda p: f"Removed {_data(p).get('title')} from your cart.",
    (IntentType.REMOVE_FROM_CART, ReplyKey.NOT_FOUND): (
        lambda p: f"I couldn't find {p['name']} in your cart." if p.get("name") else "I couldn't find that in your cart."
    ),
    (IntentType.CHECK_CART, ReplyKey.OK): _cart_reply,
    (IntentType.CHECK_CART, ReplyKey.EMPTY): "Your cart is empty. Say 'show events' to find something fun.",
    (IntentType.CLEAR_CART, ReplyKey.OK): "Done. Your cart is now empty.",
    # Context & info
    (IntentType.WHERE_AM_I, ReplyKey.OK): lambda p: f"You're on {p.get('label', 'a page I do not know yet')}.",
    (IntentType.WHAT_CAN_I_DO, ReplyKey.OK): (
        lambda p: f"On {p.get('label', 'this page')} you can {join_names(p.get('hints') or [], shown=4)}."
    ),
    (IntentType.FAQ, ReplyKey.OK): lambda p: FAQ_REPLIES.get(p.get("topic"), "I don't have an answer for that yet."),
    (IntentType.CONTACT, ReplyKey.OK): lambda p: (
        f"You can reach the organizers at {p['email']}, or use the contact section on the website."
        if p.get("email")
        else "For support, check the contact section on the website, or the organizer details on each event page."
    ),
    # Conversation
    (IntentType.GREETING, ReplyKey.OK): (
        "Hey! I'm Citro, your fest buddy. Ask me about any event, or say 'help' to see what I can do.",
        "Hello! Welcome to the fest. What would you like to know?",
        "Hi there! Try asking 'what events does CSE have?' or 'tell me about ROBO Soccer'.",
    ),
    (IntentType.HOW_ARE_YOU, ReplyKey.OK): (
        "I'm doing great, thanks for asking! I've been helping people find their way around the fest all day.",
        "I'm fantastic! Buzzing with excitement for the fest. How can I help you?",
        "I'm good! Always ready to help. Want to hear about some cool events?",
    ),
    (IntentType.HELP, ReplyKey.OK): HELP_REPLY,
    (IntentType.THANK_YOU, ReplyKey.OK): (
        "Happy to help! Let me know if you need anything else.",
        "You're welcome! I'm here whenever you need me.",
        "Anytime! Just tap the mic if you need something.",
    ),
    (IntentType.COMPLIMENT, ReplyKey.OK): (
        "Aww, that's kind of you! Let me know if I can help with anything.",
        "Thanks! You're pretty awesome yourself. Want to explore some events?",
        "That means a lot! Anything else I can help with?",
    ),
    (IntentType.JOKE, ReplyKey.OK): (
        "Why do programmers prefer dark mode? Because light attracts bugs!",
        "Why did the robot come to the fest? It heard there was a ROBO Soccer match!",
        "Why was the computer cold at the fest? It left its Windows open!",
        "I'd tell you a UDP joke, but you might not get it.",
    ),
    (IntentType.BORED, ReplyKey.OK): (
        "Bored? Not on my watch! Try ROBO Race, Codeology or Master Chef. Say any event name to learn more.",
        "How about exploring the fest? Say 'best events' for the crowd favourites.",
        "Time to explore! Say 'show events' to browse everything, or try 'CSE events' or 'day 1 events'.",
    ),
    (IntentType.GOODBYE, ReplyKey.OK): (
        "See you at the fest! Tap the mic whenever you need me.",
        "Bye for now! Enjoy the fest.",
        "Take care! Come back anytime.",
    ),
    (IntentType.WHO_ARE_YOU, ReplyKey.OK): (
        "I'm Citro, the voice assistant for the fest. I can tell you about events, venues, "
        "prices and schedules, manage your cart, and help you get around the site."
    ),
}

# Short versions for text-to-speech where the reply is long
SPEAKABLE: dict[IntentType, str] = {
    IntentType.HELP: "I can help with events, navigation, prices and your cart. Just speak naturally!",
    IntentType.WHO_ARE_YOU: "I'm Citro, your voice assistant for the fest.",
    IntentType.HOW_ARE_YOU: "I'm doing great! How can I help you?",
    IntentType.BORED: "Try ROBO Race, Codeology or Master Chef. Just ask me about any event!",
}


# ─────────────────────────────────────────────────────────────────────────────
# Composer
# ─────────────────────────────────────────────────────────────────────────────

def _render(template: Template, payload: dict[str, Any], seed: str) -> str:
    if callable(template):
        return template(payload)
    if isinstance(template, tuple):
        return choose(template, seed)
    return template


def compose_reply(action: ResolvedAction, seed: str = "") -> str:
    """Write the reply text for a resolved action."""
    payload = action.payload

    if action.intent == IntentType.UNKNOWN:
        return f"{choose(NOT_UNDERSTOOD, seed)} {suggest_closest(seed)}"

    if action.reply_key == ReplyKey.CLARIFY:
        slot = payload.get("missing_slot", "")
        return INTENT_CLARIFY_PROMPTS.get((action.intent, slot)) or CLARIFY_PROMPTS.get(slot, "Could you say that again?")

    if action.reply_key == ReplyKey.REFUSED:
        return choose(REFUSED, seed)

    if action.reply_key == ReplyKey.UNAVAILABLE:
        return choose(UNAVAILABLE, seed)

    template = TEMPLATES.get((action.intent, action.reply_key))
    if template is None and action.reply_key == ReplyKey.NOT_FOUND:
        template = _not_found_reply
    if template is None:
        template = TEMPLATES.get((action.intent, ReplyKey.OK), "Done.")

    return _render(template, payload, seed)


def compose_data(action: ResolvedAction) -> Any:
    """The ``data`` field of the result for a resolved action."""
    if action.action_type == ActionType.NAVIGATE:
        return {"path": action.payload.get("path")}
    if action.action_type == ActionType.DATA:
        return action.payload.get("data")
    if action.is_clarification:
        return {"clarification": True, "missing_slot": action.payload.get("missing_slot")}
    return None


def compose(action: ResolvedAction, seed: str = "") -> VoiceResult:
    """Turn a resolved action into the response body.

    ``action`` is None whenever the action type is none; otherwise it is the
    directive (for cart changes) or the action type.
    """
    reply = compose_reply(action, seed)

    if action.action_type == ActionType.NONE:
        directive = None
    else:
        directive = action.directive or action.action_type.value

    speak_text = reply.split("\n", 1)[0]
    if action.reply_key == ReplyKey.OK and action.intent in SPEAKABLE:
        speak_text = SPEAKABLE[action.intent]

    return VoiceResult(
        reply=reply,
        intent=action.intent,
        confidence=action.confidence,
        action=directive,
        data=compose_data(action),
        speak_text=speak_text,
    )
