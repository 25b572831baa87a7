"""Word lists shared by the normalizer, classifier, and slot extractor."""

from __future__ import annotations

import re

# Hindi / Hinglish tokens → English. Multi-word keys are replaced first.
# English homographs ("me", "ya") are deliberately absent.
HINGLISH_TOKENS: dict[str, str] = {
    # Verbs / actions
    "dikhao": "show",
    "dikha": "show",
    "dikha do": "show",
    "batao": "tell",
    "bata do": "tell",
    "sunao": "tell",
    "kholo": "open",
    "khol do": "open",
    "register karo": "register",
    "register kar do": "register",
    "search karo": "search",
    "dhoondo": "search",
    "dhundho": "search",
    "chalo": "go",
    "jao": "go",
    "le jao": "go to",
    "le chalo": "go to",
    "peeche jao": "go back",
    "wapas jao": "go back",
    "wapas": "back",
    "hatao": "remove",
    "hata do": "remove",
    "khali karo": "clear",
    "daalo": "add",
    "daal do": "add",
    "karo": "do",
    "kar do": "do",
    # Nouns
    "ghar": "home",
    "jagah": "location",
    "sthan": "location",
    "tarikh": "date",
    "samay": "time",
    "keemat": "price",
    "paisa": "price",
    "madad": "help",
    "sahayata": "help",
    "khana": "food",
    # Pronouns / connectors
    "mujhe": "me",
    "mera": "my",
    "mere": "my",
    "meri": "my",
    "kya": "what",
    "kab": "when",
    "kahan": "where",
    "kaun": "who",
    "kitne": "how many",
    "kitna": "how much",
    "hai": "is",
    "hain": "are",
    "ka": "of",
    "ke": "of",
    "ki": "of",
    "ko": "to",
    "pe": "on",
    "se": "from",
    "aur": "and",
    "sab": "all",
    "sabhi": "all",
    "aaj": "today",
    "kal": "tomorrow",
    "abhi": "now",
    "aane wale": "upcoming",
    "aane wala": "upcoming",
    "kaise": "how",
    # Greetings
    "namaste": "hello",
    "namaskar": "hello",
    "shukriya": "thank you",
    "dhanyavaad": "thank you",
    "dhanyawad": "thank you",
    "alvida": "goodbye",
    "bye bye": "goodbye",
}

# Words dropped before matching
FILLER_WORDS: frozenset[str] = frozenset({
    "um", "umm", "uh", "uhh", "hmm", "erm",
    "please", "kindly", "actually", "basically", "just",
})

# Spoken page names → routes
PAGE_ROUTES: dict[str, str] = {
    "home page": "/",
    "homepage": "/",
    "home": "/",
    "main page": "/",
    "events page": "/events",
    "event list": "/events",
    "events": "/events",
    "cart": "/cart",
    "basket": "/cart",
    "checkout": "/checkout",
    "check out": "/checkout",
    "payment": "/checkout",
    "dashboard": "/dashboard",
    "login": "/login",
    "log in": "/login",
    "sign in": "/login",
    "register page": "/register",
    "register": "/register",
    "registration page": "/register",
    "sign up": "/register",
    "signup": "/register",
    "create account": "/register",
}

# Human labels for routes
PAGE_LABELS: dict[str, str] = {
    "/": "the home page",
    "/events": "the events page",
    "/cart": "your cart",
    "/checkout": "the checkout page",
    "/dashboard": "the dashboard",
    "/login": "the login page",
    "/register": "the registration page",
}

# Department slugs and the ways people say them
CATEGORY_ALIASES: dict[str, tuple[str, ...]] = {
    "cse": ("cse", "computer science", "cs"),
    "it": ("it", "information technology"),
    "ec": ("ec", "ece", "electronics"),
    "me": ("mechanical", "mech"),
    "civil": ("civil",),
    "ci": ("ci", "computer informatics", "informatics"),
    "ad": ("ai", "ai ds", "aids", "artificial intelligence", "data science"),
    "pharma": ("pharma", "pharmacy"),
    "esh": ("esh", "humanities", "engineering sciences"),
    "mba": ("mba", "management", "business"),
}

# FAQ topics and their trigger phrases
FAQ_TOPICS: dict[str, tuple[str, ...]] = {
    "certificate": ("certificate", "certificates", "certification"),
    "refund": ("refund", "refunds", "money back"),
    "cancellation": ("cancel my registration", "cancel registration", "cancel my ticket", "unregister"),
    "team_size": ("team size", "team limit", "how many members", "participate alone", "solo"),
    "wifi": ("wifi", "wi fi", "internet"),
    "food": ("food", "lunch", "snacks", "meals", "refreshments", "canteen"),
    "what_to_bring": ("what to bring", "what should i bring", "what do i bring", "things to carry"),
    "parking": ("parking",),
    "accommodation": ("accommodation", "hostel", "lodging", "place to stay"),
    "registration": (
        "how to register",
        "how do i register",
        "how can i register",
        "how to sign up",
        "how to join",
        "how to participate",
    ),
}

NUMBER_WORDS: dict[str, int] = {
    "zero": 0,
    "one": 1, "a": 1, "an": 1, "single": 1,
    "two": 2, "couple": 2, "pair": 2,
    "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19, "twenty": 20,
}

MAX_QUANTITY = 20

MONTHS: dict[str, int] = {
    "january": 1, "jan": 1, "february": 2, "feb": 2, "march": 3, "mar": 3,
    "april": 4, "apr": 4, "may": 5, "june": 6, "jun": 6, "july": 7, "jul": 7,
    "august": 8, "aug": 8, "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10, "november": 11, "nov": 11, "december": 12, "dec": 12,
}

# "first day", "2nd day"
DAY_ORDINALS: dict[str, int] = {
    "first": 1, "1st": 1, "second": 2, "2nd": 2, "third": 3, "3rd": 3,
    "fourth": 4, "4th": 4, "fifth": 5, "5th": 5, "last": -1,
}

# Days relative to today
RELATIVE_DAYS: dict[str, int] = {"today": 0, "tonight": 0, "tomorrow": 1}


def alternation(phrases) -> str:
    """Build a regex alternation, longest phrase first."""
    ordered = sorted(set(phrases), key=lambda p: (-len(p), p))
    return "|".join(re.escape(p).replace(r"\ ", r"\s+") for p in ordered)
