"""Data collaborators for the voice pipeline.

Components:
    base.py: Abstract services and CollaboratorError
    database.py: SQLite schema, connection helper, sample data
    events.py / cart.py / dashboard.py / sessions.py: SQLite implementations

Usage:
    from citro.services import create_default_services

    services = create_default_services()
    events = await services.events.list_published_events(EventFilters())
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from citro.services.base import (
    CartService,
    CollaboratorError,
    DashboardService,
    EventFilters,
    EventService,
    SessionService,
)


@dataclass
class Services:
    """The collaborators one pipeline run may call."""

    events: EventService
    cart: CartService
    dashboard: DashboardService
    sessions: SessionService


def create_default_services(db_path: Path | str | None = None) -> Services:
    """Create SQLite-backed services sharing one database file."""
    from citro.services.cart import SqliteCartService
    from citro.services.dashboard import SqliteDashboardService
    from citro.services.events import SqliteEventService
    from citro.services.sessions import SqliteSessionService

    return Services(
        events=SqliteEventService(db_path),
        cart=SqliteCartService(db_path),
        dashboard=SqliteDashboardService(db_path),
        sessions=SqliteSessionService(db_path),
    )


__all__ = [
    "CartService",
    "CollaboratorError",
    "DashboardService",
    "EventFilters",
    "EventService",
    "Services",
    "SessionService",
    "create_default_services",
]
