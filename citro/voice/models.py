"""Voice pipeline data models.

Defines intents, slots, and result types for the voice command pipeline:
    Transcript → NormalizedTranscript → ParsedCommand → ResolvedAction → VoiceResult
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from citro.security.roles import Role


class IntentType(str, Enum):
    """Voice command intent types.

    Declaration order is the last tie-break between equally scored intents.
    """

    # Navigation
    NAVIGATE_TO = "navigate_to"
    NAVIGATE_TO_EVENT = "navigate_to_event"
    GO_BACK = "go_back"

    # Events
    SHOW_EVENTS = "show_events"
    DAY_EVENTS = "day_events"
    SEARCH_EVENTS = "search_events"
    RECOMMEND_EVENTS = "recommend_events"
    EVENT_DETAILS = "event_details"
    EVENT_WHEN = "event_when"
    EVENT_WHERE = "event_where"
    EVENT_PRICE = "event_price"
    EVENT_PRIZE = "event_prize"
    FEST_INFO = "fest_info"

    # Dashboard
    SHOW_DASHBOARD = "show_dashboard"
    QUERY_STATS = "query_stats"
    MY_REGISTRATIONS = "my_registrations"

    # Cart
    ADD_TO_CART = "add_to_cart"
    ADD_TO_CART_AND_CHECKOUT = "add_to_cart_and_checkout"
    REMOVE_FROM_CART = "remove_from_cart"
    CHECK_CART = "check_cart"
    CLEAR_CART = "clear_cart"
    CHECKOUT = "checkout"

    # Context & info
    WHERE_AM_I = "where_am_i"
    WHAT_CAN_I_DO = "what_can_i_do"
    FAQ = "faq"
    CONTACT = "contact"

    # Conversation
    GREETING = "greeting"
    HOW_ARE_YOU = "how_are_you"
    HELP = "help"
    THANK_YOU = "thank_you"
    COMPLIMENT = "compliment"
    JOKE = "joke"
    BORED = "bored"
    GOODBYE = "goodbye"
    WHO_ARE_YOU = "who_are_you"
    UNKNOWN = "unknown"


class SlotName(str, Enum):
    """Named parameters an intent may need."""

    PAGE = "page"
    EVENT = "event"
    QUANTITY = "quantity"
    QUERY = "query"
    CATEGORY = "category"
    TOPIC = "topic"
    DAY = "day"


class ActionType(str, Enum):
    """What the client should do with a resolved command."""

    NAVIGATE = "navigate"
    DATA = "data"
    NONE = "none"


class ReplyKey(str, Enum):
    """Selects the reply template for a resolved command."""

    OK = "ok"
    CLARIFY = "clarify"
    REFUSED = "refused"
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"
    EMPTY = "empty"
    SOLD_OUT = "sold_out"


# Slots that must be present before an intent can be resolved
REQUIRED_SLOTS: dict[IntentType, tuple[SlotName, ...]] = {
    IntentType.NAVIGATE_TO: (SlotName.PAGE,),
    IntentType.NAVIGATE_TO_EVENT: (SlotName.EVENT,),
    IntentType.DAY_EVENTS: (SlotName.DAY,),
    IntentType.SEARCH_EVENTS: (SlotName.QUERY,),
    IntentType.EVENT_DETAILS: (SlotName.EVENT,),
    IntentType.EVENT_WHEN: (SlotName.EVENT,),
    IntentType.EVENT_WHERE: (SlotName.EVENT,),
    IntentType.EVENT_PRICE: (SlotName.EVENT,),
    IntentType.EVENT_PRIZE: (SlotName.EVENT,),
    IntentType.ADD_TO_CART: (SlotName.EVENT,),
    IntentType.ADD_TO_CART_AND_CHECKOUT: (SlotName.EVENT,),
    IntentType.REMOVE_FROM_CART: (SlotName.EVENT,),
    IntentType.FAQ: (SlotName.TOPIC,),
}


def required_slots(intent: IntentType) -> tuple[SlotName, ...]:
    """Get the required slot names for an intent (empty for most)."""
    return REQUIRED_SLOTS.get(intent, ())


@dataclass(frozen=True)
class NormalizedTranscript:
    """A cleaned transcript.

    ``original`` keeps the caller's casing for echoing back; ``text`` is what
    the classifier and extractor match against.
    """

    original: str = ""
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.text


@dataclass(frozen=True)
class EventRef:
    """A spoken event name and/or the id of the event page the user is on."""

    name: str | None = None
    event_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "event_id": self.event_id}


@dataclass(frozen=True)
class DayRef:
    """A spoken day.

    Exactly one form is set: a fest day number ("day 2"), a calendar date
    ("april 9", kept as month and day because the year comes from the fest
    settings), or an offset from today ("today" is 0, "tomorrow" is 1).
    """

    fest_day: int | None = None
    month: int | None = None
    day_of_month: int | None = None
    offset: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fest_day": self.fest_day,
            "month": self.month,
            "day_of_month": self.day_of_month,
            "offset": self.offset,
        }


@dataclass
class ParsedCommand:
    """A classified voice command with its extracted slots."""

    intent: IntentType
    confidence: float = 0.0
    slots: dict[SlotName, Any] = field(default_factory=dict)
    transcript: NormalizedTranscript = field(default_factory=NormalizedTranscript)
    trigger: str = ""

    def get_slot(self, name: SlotName, default: Any = None) -> Any:
        return self.slots.get(name, default)

    @property
    def missing_slots(self) -> list[SlotName]:
        """Slots to ask for: required ones the extractor could not fill, in
        schema order, then any slot it heard but could not use (stored as None,
        e.g. "zero tickets").
        """
        required = required_slots(self.intent)
        missing = [name for name in required if self.slots.get(name) in (None, "")]
        unusable = [name for name, value in self.slots.items() if value is None and name not in required]
        return missing + unusable

    def to_dict(self) -> dict[str, Any]:
        slots: dict[str, Any] = {}
        for name, value in self.slots.items():
            slots[name.value] = value.to_dict() if isinstance(value, (EventRef, DayRef)) else value
        return {
            "intent": self.intent.value,
            "confidence": self.confidence,
            "slots": slots,
            "transcript": self.transcript.original,
            "trigger": self.trigger,
            "missing_slots": [s.value for s in self.missing_slots],
        }


@dataclass
class RequestContext:
    """Who is speaking and where they are.

    Built once per request from the session lookup. A missing session is a
    normal anonymous caller, not an error.
    """

    current_page: str = "/"
    user_id: str | None = None
    role: Role = Role.ANONYMOUS
    email: str | None = None
    is_authenticated: bool = False
    cart_session: str | None = None

    @classmethod
    def from_session(
        cls,
        session: dict[str, Any] | None,
        current_page: str | None = None,
        cart_session: str | None = None,
    ) -> RequestContext:
        """Build a context from a session record (or None for anonymous)."""
        page = current_page or "/"
        if not session or not session.get("user_id"):
            return cls(current_page=page, cart_session=cart_session)
        return cls(
            current_page=page,
            user_id=str(session["user_id"]),
            role=Role.parse(session.get("role"), authenticated=True),
            email=session.get("email"),
            is_authenticated=True,
            cart_session=cart_session,
        )

    @property
    def cart_owner(self) -> str | None:
        """Key of the cart this caller may read and change, if any."""
        if self.is_authenticated and self.user_id:
            return f"user:{self.user_id}"
        if self.cart_session:
            return f"session:{self.cart_session}"
        return None


@dataclass
class ResolvedAction:
    """Outcome of dispatching a command, before any text is written."""

    action_type: ActionType
    intent: IntentType
    confidence: float = 0.0
    payload: dict[str, Any] = field(default_factory=dict)
    directive: str | None = None
    reply_key: ReplyKey = ReplyKey.OK

    @classmethod
    def navigate(cls, intent: IntentType, confidence: float, path: str, **payload: Any) -> ResolvedAction:
        return cls(
            action_type=ActionType.NAVIGATE,
            intent=intent,
            confidence=confidence,
            payload={"path": path, **payload},
        )

    @classmethod
    def data(
        cls,
        intent: IntentType,
        confidence: float,
        data: Any,
        directive: str | None = None,
        reply_key: ReplyKey = ReplyKey.OK,
    ) -> ResolvedAction:
        return cls(
            action_type=ActionType.DATA,
            intent=intent,
            confidence=confidence,
            payload={"data": data},
            directive=directive,
            reply_key=reply_key,
        )

    @classmethod
    def none(
        cls,
        intent: IntentType,
        confidence: float,
        reply_key: ReplyKey = ReplyKey.OK,
        **payload: Any,
    ) -> ResolvedAction:
        return cls(
            action_type=ActionType.NONE,
            intent=intent,
            confidence=confidence,
            payload=dict(payload),
            reply_key=reply_key,
        )

    @classmethod
    def clarification(cls, intent: IntentType, confidence: float, missing_slot: SlotName) -> ResolvedAction:
        return cls.none(
            intent,
            confidence,
            reply_key=ReplyKey.CLARIFY,
            clarification=True,
            missing_slot=missing_slot.value,
        )

    @property
    def is_clarification(self) -> bool:
        return bool(self.payload.get("clarification"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "intent": self.intent.value,
            "confidence": self.confidence,
            "payload": self.payload,
            "directive": self.directive,
            "reply_key": self.reply_key.value,
        }


@dataclass
class VoiceResult:
    """The response body returned to the browser."""

    reply: str
    intent: IntentType = IntentType.UNKNOWN
    confidence: float = 0.0
    action: str | None = None
    data: Any = None
    speak_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "reply": self.reply,
            "action": self.action,
            "data": self.data,
            "intent": self.intent.value,
            "confidence": self.confidence,
            "speak_text": self.speak_text,
        }
