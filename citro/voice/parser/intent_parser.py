"""Intent parsing for voice commands.

Every intent has a rule: trigger phrases (regexes) and reinforcing keywords.
All rules are scored against the normalized text and the best one wins.
Falls back to UNKNOWN with confidence 0 when nothing matches at all.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from citro.voice.models import IntentType, NormalizedTranscript, ParsedCommand, required_slots
from citro.voice.parser.slot_extractor import extract_slots
from citro.voice.parser.vocabulary import (
    CATEGORY_ALIASES,
    DAY_ORDINALS,
    FAQ_TOPICS,
    MONTHS,
    PAGE_ROUTES,
    RELATIVE_DAYS,
    alternation,
)

PHRASE_WEIGHT = 0.75
KEYWORD_WEIGHT = 0.25

_CATEGORY_WORDS = alternation(alias for aliases in CATEGORY_ALIASES.values() for alias in aliases)
_FAQ_WORDS = alternation(phrase for phrases in FAQ_TOPICS.values() for phrase in phrases)
_MONTH_WORDS = alternation(MONTHS)
_DAY_WORDS = (
    rf"(?:day (?:\d{{1,2}}|one|two|three|four|five|six|seven)|(?:{alternation(DAY_ORDINALS)}) day"
    rf"|(?:{_MONTH_WORDS}) \d{{1,2}}(?:st|nd|rd|th)?|\d{{1,2}}(?:st|nd|rd|th)? (?:of )?(?:{_MONTH_WORDS})"
    rf"|{alternation(RELATIVE_DAYS)})"
)

# Anything that names a page rather than an event
_PLACE_WORDS = alternation([
    *PAGE_ROUTES, "page", "pages", "dashboard", "stats", "statistics", "registrations",
    "account", "profile", "settings",
])


@dataclass(frozen=True)
class IntentRule:
    """Trigger phrases and keywords for one intent."""

    intent: IntentType
    phrases: tuple[str, ...]
    keywords: tuple[str, ...] = ()

    @property
    def required_slots(self) -> int:
        return len(required_slots(self.intent))

    @property
    def best_score(self) -> float:
        return PHRASE_WEIGHT + (KEYWORD_WEIGHT if self.keywords else 0.0)


@dataclass(frozen=True)
class Classification:
    """Classifier output for one transcript."""

    intent: IntentType
    confidence: float = 0.0
    trigger: str = ""


# Rules in IntentType declaration order
INTENT_RULES: list[IntentRule] = [
    IntentRule(
        IntentType.NAVIGATE_TO,
        (
            r"\bgo (?:back )?to\b",
            r"\btake me (?:to|home)\b",
            r"\bbring me to\b",
            r"\bnavigate to\b",
            r"\bopen\b",
            r"\bvisit\b",
            r"\bgo home\b",
            r"\b(?:log ?in|sign in|sign up|register|registration|home) page\b",
            r"^(?:log ?in|sign in|sign up|register|home)$",
        ),
        ("go", "open", "page", "take", "navigate", "visit", "home"),
    ),
    IntentRule(
        IntentType.NAVIGATE_TO_EVENT,
        (
            r"\b(?:open|go to|take me to|navigate to|visit|bring me to)\s+(?!(?:back|my)\b)"
            rf"(?!.*\b(?:{_PLACE_WORDS})\b).+$",
        ),
        ("go", "open", "take", "navigate", "visit", "event"),
    ),
    IntentRule(
        IntentType.GO_BACK,
        (r"\bgo back\b", r"^back$", r"\bprevious page\b", r"\btake me back\b"),
        ("back", "previous"),
    ),
    IntentRule(
        IntentType.SHOW_EVENTS,
        (
            r"\b(?:show|list|browse|see|view|display|get)(?: me)?(?: all)?(?: the)?(?: upcoming| latest| new)? events\b",
            r"\b(?:what|which) events\b",
            r"\bevents? list\b",
            r"\ball (?:the )?events\b",
            r"\b(?:upcoming|latest) events\b",
            r"\bevents happening\b",
            r"^events$",
            r"\bevents (?:show|tell|list)$",
            rf"\b(?:{_CATEGORY_WORDS})(?: department)?(?: of)? events\b",
            rf"\bevents (?:of|by|from|in|for|under)(?: the)? (?:{_CATEGORY_WORDS})\b",
            rf"\bwhat (?:does|do)(?: the)? (?:{_CATEGORY_WORDS})(?: department)? (?:have|offer|host)\b",
            rf"\b(?:tell me (?:more )?about|about)(?: the| all)?(?: the)? (?:{_CATEGORY_WORDS})(?: department)? events\b",
        ),
        ("events", "upcoming", "list", "show", "all", "about"),
    ),
    IntentRule(
        IntentType.DAY_EVENTS,
        (
            rf"\b(?:events?|schedule|happening|lineup|on)\b.*\b{_DAY_WORDS}\b",
            rf"\b{_DAY_WORDS}(?:'s| of)? (?:events|schedule|lineup|program|programme)\b",
            rf"^(?:show |what about )?{_DAY_WORDS}$",
        ),
        ("day", "events", "schedule", "today", "tomorrow"),
    ),
    IntentRule(
        IntentType.SEARCH_EVENTS,
        (r"\bsearch(?: for)?\b", r"\bfind\b", r"\blook(?:ing)? for\b", r"\bis there (?:a|an|any)\b"),
        ("search", "find", "look", "event", "events"),
    ),
    IntentRule(
        IntentType.RECOMMEND_EVENTS,
        (
            r"\b(?:best|top|popular|recommended|featured|must attend|highlight|trending)(?: \w+)? events?\b",
            r"\b(?:recommend|suggest)(?: me)?(?: an?| some)? events?\b",
            r"\bwhich (?:event|one) should i (?:attend|join|go to|pick)\b",
            r"\bevents? (?:are|is) (?:the )?(?:best|popular|recommended)\b",
            r"\bwhat should i attend\b",
        ),
        ("best", "top", "popular", "recommend", "suggest", "featured"),
    ),
    IntentRule(
        IntentType.EVENT_DETAILS,
        (
            r"\btell me (?:more )?about\b",
            r"\b(?:details|info|information) (?:of|about|on|for)\b",
            r"\bwhat is\b",
            r"\bwhat's\b",
            r"\bdescribe\b",
            r"\bexplain\b",
        ),
        ("about", "details", "info", "describe", "tell"),
    ),
    IntentRule(
        IntentType.EVENT_WHEN,
        (
            r"\bwhen (?:is|does|will)\b",
            r"\bwhat time (?:is|does)\b",
            r"\b(?:date|time|timing|timings|schedule) (?:of|for)\b",
        ),
        ("when", "time", "date", "timing", "schedule"),
    ),
    IntentRule(
        IntentType.EVENT_WHERE,
        (r"\bwhere (?:is|will|does)\b", r"\b(?:venue|location) (?:of|for)\b"),
        ("where", "venue", "location"),
    ),
    IntentRule(
        IntentType.EVENT_PRICE,
        (
            r"\b(?:price|cost|fee|fees|charges) (?:of|for)\b",
            r"\bhow much (?:is|does|for)\b",
            r"\bticket price\b",
        ),
        ("price", "cost", "fee", "much", "rupees"),
    ),
    IntentRule(
        IntentType.EVENT_PRIZE,
        (
            r"\b(?:prize money|prizes?|rewards?|winnings)(?: pool)? (?:of|for|in)\b",
            r"\bhow much (?:is )?(?:the )?prize(?: money)?\b",
            r"\bprize money\b",
            r"\b(?:prizes?|rewards?)$",
        ),
        ("prize", "prizes", "reward", "win", "winner", "money"),
    ),
    IntentRule(
        IntentType.FEST_INFO,
        (
            r"\b(?:tell me (?:more )?about|about|details of|info about|information about)(?: the)? (?:fest|festival|citronics)\b",
            r"\b(?:fest|festival|citronics) (?:details|info|information|schedule|dates?|theme|timings?)\b",
            r"\bwhen (?:is|does|will) (?:the )?(?:fest|festival|citronics)\b",
            r"\bhow many events\b",
            r"\btotal (?:number of )?events\b",
            r"\b(?:what is|what's) the theme\b",
            r"\b(?:what is|what's) citronics\b",
            r"^citronics(?: 2026| 2k26)?$",
        ),
        ("fest", "festival", "citronics", "theme", "about"),
    ),
    IntentRule(
        IntentType.SHOW_DASHBOARD,
        (
            r"\b(?:open|show|go to|take me to)(?: my| the)? dashboard\b",
            r"\bmy dashboard\b",
            r"^dashboard$",
        ),
        ("dashboard", "panel", "admin"),
    ),
    IntentRule(
        IntentType.QUERY_STATS,
        (
            r"\b(?:show |give me )?(?:the )?(?:dashboard )?stat(?:s|istics)\b",
            r"\bhow many (?:registrations|tickets)\b",
            r"\btotal (?:registrations|revenue|tickets|sales)\b",
            r"\boverview\b",
        ),
        ("stats", "statistics", "total", "revenue", "overview"),
    ),
    IntentRule(
        IntentType.MY_REGISTRATIONS,
        (
            r"\bmy (?:registrations|events|tickets|bookings)\b",
            r"\bwhat am i registered (?:for|in)\b",
            r"\bregistered events\b",
        ),
        ("my", "registrations", "registered", "tickets", "bookings"),
    ),
    IntentRule(
        IntentType.ADD_TO_CART,
        (
            r"\badd\b.*\b(?:to|in|into) (?:my |the )?cart\b",
            r"\bput\b.*\b(?:in|into) (?:my |the )?cart\b",
            r"\b(?:buy|book|get)\b.*\b(?:tickets?|passes|pass|seats?)\b",
            r"\b(?:buy|book)\b",
            r"\bregister (?:me )?for\b",
            r"\bsign (?:me )?up for\b",
            r"\benroll (?:me )?(?:in|for)\b",
            r"\badd\b",
        ),
        ("add", "cart", "ticket", "tickets", "book", "buy", "register"),
    ),
    IntentRule(
        IntentType.ADD_TO_CART_AND_CHECKOUT,
        (
            r"\b(?:add|put|select|book|buy|get)\b.*\b(?:and|then)(?: go| move| proceed)?(?: to)?(?: the)?"
            r" (?:check ?out|pay|payment)\b",
        ),
        ("add", "book", "buy", "checkout", "pay", "payment"),
    ),
    IntentRule(
        IntentType.REMOVE_FROM_CART,
        (
            r"\b(?:remove|delete|drop|take out)\b.*\bfrom (?:my |the )?cart\b",
            r"\b(?:remove|delete)\b",
        ),
        ("remove", "delete", "cart", "drop"),
    ),
    IntentRule(
        IntentType.CHECK_CART,
        (
            r"\b(?:show|view|check|see)(?: me)?(?: my| the)? cart\b",
            r"\bwhat(?:'s| is) in (?:my |the )?cart\b",
            r"\bmy cart\b",
            r"\bcart items\b",
            r"\bhow many (?:items|tickets) (?:are )?in (?:my |the )?cart\b",
        ),
        ("cart", "my", "items", "check"),
    ),
    IntentRule(
        IntentType.CLEAR_CART,
        (
            r"\b(?:clear|empty)(?: my| the)? cart\b",
            r"\b(?:remove|delete) (?:everything|all(?: items)?)(?: from (?:my |the )?cart)?\b",
        ),
        ("clear", "empty", "everything", "cart", "all"),
    ),
    IntentRule(
        IntentType.CHECKOUT,
        (r"\bcheck ?out\b", r"\bproceed to (?:payment|checkout)\b", r"\bpay now\b", r"\bmake (?:the )?payment\b"),
        ("checkout", "pay", "payment", "proceed"),
    ),
    IntentRule(
        IntentType.WHERE_AM_I,
        (r"\bwhere am i\b", r"\bwhat page is this\b", r"\bwhich page\b", r"\bcurrent page\b"),
        ("where", "page", "current"),
    ),
    IntentRule(
        IntentType.WHAT_CAN_I_DO,
        (
            r"\bwhat can i do(?: here)?\b",
            r"\bwhat(?:'s| is) on this page\b",
            r"\boptions (?:on|for) this page\b",
        ),
        ("here", "page", "options"),
    ),
    IntentRule(
        IntentType.FAQ,
        (rf"\b(?:{_FAQ_WORDS})\b",),
        ("is", "there", "will", "get", "available", "policy"),
    ),
    IntentRule(
        IntentType.CONTACT,
        (
            r"\bcontact\b",
            r"\b(?:customer )?support\b",
            r"\bhelpline\b",
            r"\bphone number\b",
            r"\be ?mail (?:id|address)\b",
            r"\bget in touch\b",
            r"\breach (?:out|the organi[sz]ers?)\b",
        ),
        ("contact", "support", "email", "phone", "organizer", "organizers"),
    ),
    IntentRule(
        IntentType.GREETING,
        (
            r"^(?:hello|hi|hey|hiya|howdy|greetings|yo)\b",
            r"\bgood (?:morning|afternoon|evening)\b",
        ),
        ("hello", "hi", "hey", "there", "morning"),
    ),
    IntentRule(
        IntentType.HOW_ARE_YOU,
        (
            r"\bhow are (?:you|u)\b",
            r"\bhow(?:'s| is) it going\b",
            r"\bhow do you do\b",
            r"\bhow(?: are)? you doing\b",
            r"\bare you (?:fine|okay|ok|good|well)\b",
            r"\bhow(?:'s| is) life\b",
        ),
        ("how", "you", "doing", "going", "fine"),
    ),
    IntentRule(
        IntentType.HELP,
        (
            r"\bhelp\b",
            r"\bwhat can you do\b",
            r"\bwhat can i (?:say|ask)\b",
            r"\bcommands\b",
            r"\bhow (?:do i|to) use\b",
        ),
        ("help", "commands", "can", "you"),
    ),
    IntentRule(
        IntentType.THANK_YOU,
        (r"\bthank(?:s| you)\b", r"\bthanku\b", r"\bappreciate it\b"),
        ("thanks", "thank", "you"),
    ),
    IntentRule(
        IntentType.COMPLIMENT,
        (
            r"\byou(?: are|'re| r)? (?:so |really |very )?"
            r"(?:great|awesome|amazing|the best|smart|cool|brilliant|helpful|wonderful)\b",
            r"\b(?:good|great|nice) (?:job|work)\b",
            r"\bwell done\b",
            r"\byou rock\b",
            r"\bi love (?:you|it|this)\b",
            r"^(?:nice|awesome|cool|amazing|wonderful|brilliant|fantastic|superb|impressive)$",
        ),
        ("great", "awesome", "amazing", "nice", "cool", "best", "love"),
    ),
    IntentRule(
        IntentType.JOKE,
        (
            r"\b(?:tell|say|crack)(?: me)?(?: a| another)? jokes?\b",
            r"^jokes?$",
            r"\bmake me laugh\b",
            r"\bsomething funny\b",
            r"\bentertain me\b",
        ),
        ("joke", "jokes", "funny", "laugh"),
    ),
    IntentRule(
        IntentType.BORED,
        (
            r"\b(?:i'm|i am|im|feeling|so|getting) bored\b",
            r"^bored$",
            r"\bboring\b",
            r"\bnothing to do\b",
            r"\bsuggest something\b",
            r"\bany suggestions\b",
        ),
        ("bored", "boring", "nothing", "suggest"),
    ),
    IntentRule(
        IntentType.GOODBYE,
        (
            r"\b(?:good ?)?bye\b",
            r"\bsee you\b",
            r"\bgood night\b",
            r"\btake care\b",
            r"^(?:close|never ?mind|stop|cancel|exit)$",
        ),
        ("bye", "goodbye", "later", "night"),
    ),
    IntentRule(
        IntentType.WHO_ARE_YOU,
        (
            r"\bwho are you\b",
            r"\bwhat are you\b",
            r"\bwhat(?:'s| is) your name\b",
            r"\bwhat is citro\b",
            r"\bwho is citro\b",
            r"\bintroduce yourself\b",
            r"\bare you (?:a bot|a robot|real|human)\b",
        ),
        ("who", "you", "citro", "name", "yourself"),
    ),
]

# Compiled rule cache
_compiled_rules: list[tuple[IntentRule, list[re.Pattern]]] | None = None


def _get_rules() -> list[tuple[IntentRule, list[re.Pattern]]]:
    """Get rules with their phrases compiled, in declaration order."""
    global _compiled_rules
    if _compiled_rules is None:
        _compiled_rules = [(rule, [re.compile(p) for p in rule.phrases]) for rule in INTENT_RULES]
    return _compiled_rules


class IntentClassifier(ABC):
    """Maps normalized text to an intent. Implementations must be pure."""

    @abstractmethod
    def classify(self, text: str) -> Classification:
        """Classify normalized text."""


@dataclass
class RuleBasedClassifier(IntentClassifier):
    """Scores every rule and picks the best.

    Confidence is the rule's score divided by its best possible score.
    Ties go to the longest literal phrase match, then to the intent with
    fewer required slots, then to declaration order.
    """

    rules: list[IntentRule] = field(default_factory=lambda: INTENT_RULES)

    def __post_init__(self) -> None:
        if self.rules is INTENT_RULES:
            self._compiled = _get_rules()
        else:
            self._compiled = [(rule, [re.compile(p) for p in rule.phrases]) for rule in self.rules]

    def score(self, rule: IntentRule, patterns: list[re.Pattern], text: str, words: set[str]) -> tuple[float, str]:
        """Score one rule. Returns (confidence, longest matched phrase)."""
        trigger = ""
        for pattern in patterns:
            match = pattern.search(text)
            if match and len(match.group(0)) > len(trigger):
                trigger = match.group(0)

        score = PHRASE_WEIGHT if trigger else 0.0
        if rule.keywords:
            hits = sum(1 for keyword in rule.keywords if keyword in words)
            score += KEYWORD_WEIGHT * min(hits, 2) / min(len(rule.keywords), 2)

        return round(score / rule.best_score, 4), trigger

    def classify(self, text: str) -> Classification:
        text = text.strip().lower()
        if not text:
            return Classification(IntentType.UNKNOWN)

        words = set(text.split())
        best: tuple | None = None
        best_result = Classification(IntentType.UNKNOWN)

        for order, (rule, patterns) in enumerate(self._compiled):
            confidence, trigger = self.score(rule, patterns, text, words)
            if confidence <= 0:
                continue
            # Higher is better on every component
            rank = (confidence, len(trigger), -rule.required_slots, -order)
            if best is None or rank > best:
                best = rank
                best_result = Classification(rule.intent, confidence, trigger)

        return best_result


_default_classifier: RuleBasedClassifier | None = None


def get_classifier() -> RuleBasedClassifier:
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = RuleBasedClassifier()
    return _default_classifier


def parse_intent(text: str) -> tuple[IntentType, float, str]:
    """Extract intent from normalized text.

    Returns:
        (intent_type, confidence, trigger)
    """
    result = get_classifier().classify(text)
    return result.intent, result.confidence, result.trigger


def parse_command(
    transcript: NormalizedTranscript,
    current_page: str | None = None,
    aliases: dict[str, str] | None = None,
    classifier: IntentClassifier | None = None,
) -> ParsedCommand:
    """Parse a normalized transcript into a command with slots.

    This is the main entry point for the voice command pipeline.
    """
    classification = (classifier or get_classifier()).classify(transcript.text)
    slots = extract_slots(
        classification.intent,
        transcript.text,
        current_page=current_page,
        aliases=aliases,
    )

    return ParsedCommand(
        intent=classification.intent,
        confidence=classification.confidence,
        slots=slots,
        transcript=transcript,
        trigger=classification.trigger,
    )


def suggest_closest(text: str) -> str:
    """Suggest what the user might have meant."""
    words = set(text.lower().split())

    if words & {"day", "today", "tomorrow", "schedule"}:
        return 'Try: "day 2 events" or "what\'s on today"'
    if words & {"event", "events", "fest", "competition", "contest"}:
        return 'Try: "show events" or "tell me about Codeology"'
    if words & {"cart", "ticket", "tickets", "pass", "buy"}:
        return 'Try: "add Codeology to cart" or "what\'s in my cart"'
    if words & {"page", "go", "open", "take"}:
        return 'Try: "go to events" or "take me home"'
    if words & {"when", "where", "time", "venue", "price"}:
        return 'Try: "when is Codeology" or "where is Robo Race"'

    return 'Say "help" to hear what I can do'


# Available commands for the help listing
AVAILABLE_COMMANDS: dict[str, list[dict[str, str]]] = {
    "Navigation": [
        {"command": "Go to [page]", "example": "Go to events"},
        {"command": "Take me home", "example": "Open the home page"},
        {"command": "Open [event]", "example": "Open Codeology"},
        {"command": "Go back", "example": "Return to the previous page"},
    ],
    "Events": [
        {"command": "Show events", "example": "Show upcoming events"},
        {"command": "[department] events", "example": "CSE events"},
        {"command": "[day] events", "example": "Day 2 events"},
        {"command": "Search for [keyword]", "example": "Search for robotics"},
        {"command": "Best events", "example": "Recommend some events"},
        {"command": "Tell me about [event]", "example": "Tell me about Codeology"},
        {"command": "When / where is [event]", "example": "Where is Robo Race"},
        {"command": "How much is [event]", "example": "Price of Master Chef"},
        {"command": "Prize for [event]", "example": "Prize money of ROBO Race"},
        {"command": "About the fest", "example": "When is the fest?"},
    ],
    "Cart": [
        {"command": "Add [event] to cart", "example": "Add 2 tickets for Codeology to cart"},
        {"command": "Add [event] and checkout", "example": "Book Codeology and pay"},
        {"command": "Remove [event] from cart", "example": "Remove Codeology from cart"},
        {"command": "What's in my cart?", "example": "Check my cart"},
        {"command": "Clear cart", "example": "Empty my cart"},
        {"command": "Checkout", "example": "Proceed to payment"},
    ],
    "Account": [
        {"command": "Open dashboard", "example": "Show my dashboard"},
        {"command": "My registrations", "example": "What am I registered for?"},
        {"command": "Show stats", "example": "Dashboard statistics (admins)"},
    ],
    "Info": [
        {"command": "Where am I?", "example": "Describe the current page"},
        {"command": "What can I do here?", "example": "Options on this page"},
        {"command": "Ask about [topic]", "example": "Is there parking?"},
        {"command": "Contact", "example": "How do I reach the organizers?"},
        {"command": "Help", "example": "List what I can do"},
    ],
}
