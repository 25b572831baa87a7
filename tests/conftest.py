"""Shared test fixtures for Citro tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- In-memory collaborators (events, cart, dashboard, sessions)
- Request contexts for each role

Usage:
    async def test_something(services, student_context):
        result = await process_command("show events", student_context, services=services)
"""

import copy
import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from citro.security.roles import Role
from citro.services import (
    CartService,
    DashboardService,
    EventFilters,
    EventService,
    Services,
    SessionService,
)
from citro.voice.config import VoiceConfig
from citro.voice.models import RequestContext


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent


# ─────────────────────────────────────────────────────────────────────────────
# Sample Data
# ─────────────────────────────────────────────────────────────────────────────

SAMPLE_EVENTS: list[dict[str, Any]] = [
    {
        "id": 1,
        "title": "Codeology",
        "tagline": "Competitive coding sprint",
        "description": "Three hours, five problems.",
        "venue": "Lab 8 & 9",
        "start_time": "2026-04-08T12:00:00",
        "end_time": "2026-04-08T15:00:00",
        "ticket_price": 100.0,
        "seats": 35,
        "registered": 5,
        "available": 30,
        "prize": "Total ₹5,000",
        "featured": True,
        "category": "cse",
        "category_name": "Computer Science & Engineering",
    },
    {
        "id": 2,
        "title": "ROBO Race",
        "tagline": "Race your bot through the track",
        "description": None,
        "venue": "Main Ground",
        "start_time": "2026-04-09T11:00:00",
        "end_time": "2026-04-09T16:00:00",
        "ticket_price": 200.0,
        "seats": 20,
        "registered": 19,
        "available": 1,
        "prize": "Total ₹10,000",
        "featured": True,
        "category": "ec",
        "category_name": "Electronics & Communication Engineering",
    },
    {
        "id": 3,
        "title": "Pharmathon",
        "tagline": "Pharmacy quiz marathon",
        "description": None,
        "venue": "CDIP",
        "start_time": "2026-04-08T12:00:00",
        "end_time": "2026-04-08T16:00:00",
        "ticket_price": 150.0,
        "seats": 20,
        "registered": 20,
        "available": 0,
        "prize": None,
        "featured": False,
        "category": "pharma",
        "category_name": "Pharmacy",
    },
    {
        "id": 4,
        "title": "Open Mic",
        "tagline": None,
        "description": None,
        "venue": "Amphitheatre",
        "start_time": "2026-04-10T18:00:00",
        "end_time": None,
        "ticket_price": 0.0,
        "seats": 0,
        "registered": 0,
        "available": 0,
        "prize": None,
        "featured": False,
        "category": "mba",
        "category_name": "Master of Business Administration",
    },
]


# ─────────────────────────────────────────────────────────────────────────────
# In-memory Collaborators
# ─────────────────────────────────────────────────────────────────────────────


class StubEventService(EventService):
    """Deterministic event catalogue that records every call."""

    def __init__(self, events: list[dict[str, Any]] | None = None):
        self.events = copy.deepcopy(SAMPLE_EVENTS if events is None else events)
        self.calls: list[tuple] = []

    async def list_published_events(self, filters: EventFilters) -> list[dict[str, Any]]:
        self.calls.append(("list_published_events", filters))
        events = self.events
        if filters.category:
            events = [e for e in events if e["category"] == filters.category]
        if filters.search:
            events = [e for e in events if filters.search.lower() in e["title"].lower()]
        if filters.on_date:
            events = sorted(
                (e for e in events if e["start_time"].startswith(filters.on_date)),
                key=lambda e: (e["start_time"], e["id"]),
            )
        if filters.featured:
            events = [e for e in events if e["featured"]]
        return copy.deepcopy(events[: filters.limit])

    async def find_event_by_name(self, name: str) -> dict[str, Any] | None:
        self.calls.append(("find_event_by_name", name))
        for event in self.events:
            if name.lower() in event["title"].lower():
                return copy.deepcopy(event)
        return None

    async def get_event(self, event_id: int) -> dict[str, Any] | None:
        self.calls.append(("get_event", event_id))
        for event in self.events:
            if event["id"] == event_id:
                return copy.deepcopy(event)
        return None

    async def count_published_events(self) -> int:
        self.calls.append(("count_published_events",))
        return len(self.events)


class StubCartService(CartService):
    """Carts held in a dict: owner -> {event_id: quantity}."""

    def __init__(self, events: StubEventService):
        self._events = events
        self.carts: dict[str, dict[int, int]] = {}
        self.calls: list[tuple] = []

    async def get_cart(self, owner: str) -> list[dict[str, Any]]:
        self.calls.append(("get_cart", owner))
        items = []
        for event_id, quantity in self.carts.get(owner, {}).items():
            event = next(e for e in self._events.events if e["id"] == event_id)
            items.append({
                "event_id": event_id,
                "title": event["title"],
                "quantity": quantity,
                "ticket_price": event["ticket_price"],
            })
        return items

    async def set_item(self, owner: str, event_id: int, quantity: int) -> dict[str, Any]:
        self.calls.append(("set_item", owner, event_id, quantity))
        self.carts.setdefault(owner, {})[event_id] = quantity
        return {"event_id": event_id, "quantity": quantity}

    async def remove_item(self, owner: str, event_id: int) -> bool:
        self.calls.append(("remove_item", owner, event_id))
        return self.carts.get(owner, {}).pop(event_id, None) is not None

    async def clear(self, owner: str) -> int:
        self.calls.append(("clear", owner))
        return len(self.carts.pop(owner, {}))


class StubDashboardService(DashboardService):
    def __init__(self):
        self.registrations: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple] = []

    async def get_stats(self) -> dict[str, Any]:
        self.calls.append(("get_stats",))
        return {
            "total_events": 4,
            "active_events": 3,
            "total_registrations": 44,
            "tickets_sold": 40,
            "total_revenue": 6500.0,
        }

    async def get_user_registrations(self, user_id: str) -> list[dict[str, Any]]:
        self.calls.append(("get_user_registrations", user_id))
        return copy.deepcopy(self.registrations.get(user_id, []))


class StubSessionService(SessionService):
    def __init__(self, sessions: dict[str, dict[str, Any]] | None = None):
        self.sessions = sessions or {}

    async def lookup(self, token: str) -> dict[str, Any] | None:
        return self.sessions.get(token)


def make_services() -> Services:
    events = StubEventService()
    return Services(
        events=events,
        cart=StubCartService(events),
        dashboard=StubDashboardService(),
        sessions=StubSessionService({
            "student-token": {"user_id": "u-1", "role": "student", "email": "asha@example.com"},
            "admin-token": {"user_id": "u-2", "role": "admin", "email": "ravi@example.com"},
        }),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Collaborator Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def services() -> Services:
    """Fresh in-memory collaborators for each test."""
    return make_services()


@pytest.fixture
def voice_config() -> VoiceConfig:
    """Default pipeline settings with a couple of speech aliases."""
    return VoiceConfig(event_aliases={"cardiology": "Codeology", "robot race": "ROBO Race"})


# ─────────────────────────────────────────────────────────────────────────────
# Context Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def anonymous_context() -> RequestContext:
    return RequestContext(current_page="/")


@pytest.fixture
def student_context() -> RequestContext:
    return RequestContext(
        current_page="/events",
        user_id="u-1",
        role=Role.STUDENT,
        email="asha@example.com",
        is_authenticated=True,
    )


@pytest.fixture
def admin_context() -> RequestContext:
    return RequestContext(
        current_page="/",
        user_id="u-2",
        role=Role.ADMIN,
        email="ravi@example.com",
        is_authenticated=True,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)
