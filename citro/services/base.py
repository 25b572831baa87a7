"""Abstract collaborators the voice pipeline reads from and writes to.

The pipeline only depends on these interfaces. SQLite implementations live
beside this module; tests plug in in-memory ones.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


class CollaboratorError(Exception):
    """A data service failed (database error, bad row, lost connection)."""


@dataclass(frozen=True)
class EventFilters:
    """Filters for the public event listing.

    Sorting follows the public site: featured first, then newest. A day
    listing (``on_date``, an ISO date) runs in start-time order instead.
    """

    category: str | None = None
    search: str | None = None
    on_date: str | None = None
    featured: bool = False
    limit: int = 5


class EventService(ABC):
    """Read access to published, public events."""

    @abstractmethod
    async def list_published_events(self, filters: EventFilters) -> list[dict[str, Any]]:
        """List published events matching ``filters``."""

    @abstractmethod
    async def find_event_by_name(self, name: str) -> dict[str, Any] | None:
        """Best fuzzy match for a spoken event name, or None."""

    @abstractmethod
    async def get_event(self, event_id: int) -> dict[str, Any] | None:
        """A published event by id, or None."""

    @abstractmethod
    async def count_published_events(self) -> int:
        """Number of published, public events."""


class CartService(ABC):
    """Carts keyed by owner ("user:<id>" or "session:<key>").

    ``set_item`` sets the line quantity rather than adding to it, so a
    retried request leaves the cart unchanged.
    """

    @abstractmethod
    async def get_cart(self, owner: str) -> list[dict[str, Any]]:
        """Cart lines with event title and ticket price."""

    @abstractmethod
    async def set_item(self, owner: str, event_id: int, quantity: int) -> dict[str, Any]:
        """Set the quantity of one line. Returns the stored line."""

    @abstractmethod
    async def remove_item(self, owner: str, event_id: int) -> bool:
        """Remove one line. Returns False if it was not in the cart."""

    @abstractmethod
    async def clear(self, owner: str) -> int:
        """Empty the cart. Returns the number of lines removed."""


class DashboardService(ABC):
    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """Platform totals: events, registrations, tickets sold, revenue."""

    @abstractmethod
    async def get_user_registrations(self, user_id: str) -> list[dict[str, Any]]:
        """Registrations made by one user, newest first."""


class SessionService(ABC):
    @abstractmethod
    async def lookup(self, token: str) -> dict[str, Any] | None:
        """Session info (user_id, role, email) for a valid token, else None."""
