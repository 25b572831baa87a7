"""Published event catalogue backed by SQLite."""

from __future__ import annotations

import logging
import re
from typing import Any

from citro.services.base import EventFilters, EventService
from citro.services.database import SqliteService

logger = logging.getLogger(__name__)

# Minimum score for a fuzzy name match
NAME_MATCH_THRESHOLD = 0.4

_EVENT_COLUMNS = """
    e.id,
    e.name          AS title,
    e.tagline,
    e.description,
    e.venue,
    e.start_time,
    e.end_time,
    e.ticket_price,
    e.max_tickets   AS seats,
    e.registered,
    e.prize,
    e.featured,
    c.slug          AS category,
    c.name          AS category_name
"""

_PUBLIC = "e.status = 'published' AND e.visibility = 'public'"


def _clean(text: str) -> str:
    return re.sub(r"\s+", " ", re.sub(r"[^a-z0-9 ]", " ", text.lower())).strip()


def score_name_match(query: str, title: str) -> float:
    """Score how well a spoken name matches an event title (0 to 1).

    Exact matches score 1. A substring in either direction scores its length
    ratio plus 0.3. Otherwise partial word overlap scores up to 0.85.
    """
    q = _clean(query)
    t = _clean(title)
    if not q or not t:
        return 0.0
    if q == t:
        return 1.0

    best = 0.0
    if q in t or t in q:
        best = min(len(q) / max(len(t), len(q)) + 0.3, 1.0)

    q_words = q.split()
    t_words = t.split()
    matches = sum(1 for w in q_words if any(w in tw or tw in w for tw in t_words))
    if matches:
        best = max(best, matches / max(len(q_words), len(t_words)) * 0.85)

    return round(best, 4)


def _row_to_event(row) -> dict[str, Any]:
    event = dict(row)
    event["featured"] = bool(event.get("featured"))
    event["ticket_price"] = float(event.get("ticket_price") or 0)
    seats = event.get("seats") or 0
    event["available"] = max(0, seats - (event.get("registered") or 0))
    return event


class SqliteEventService(SqliteService, EventService):
    """Events visible on the public site: published and public."""

    async def list_published_events(self, filters: EventFilters) -> list[dict[str, Any]]:
        return await self._run(self._list_published_events, filters)

    async def find_event_by_name(self, name: str) -> dict[str, Any] | None:
        return await self._run(self._find_event_by_name, name)

    async def get_event(self, event_id: int) -> dict[str, Any] | None:
        return await self._run(self._get_event, event_id)

    async def count_published_events(self) -> int:
        return await self._run(self._count_published_events)

    def _list_published_events(self, filters: EventFilters) -> list[dict[str, Any]]:
        conditions = [_PUBLIC]
        params: list[Any] = []

        if filters.category:
            conditions.append("c.slug = ?")
            params.append(filters.category)

        if filters.search:
            conditions.append("(e.name LIKE ? OR e.tagline LIKE ? OR e.venue LIKE ?)")
            pattern = f"%{filters.search}%"
            params.extend([pattern, pattern, pattern])

        if filters.on_date:
            conditions.append("date(e.start_time) = ?")
            params.append(filters.on_date)

        if filters.featured:
            conditions.append("e.featured = 1")

        order = "e.start_time ASC, e.id ASC" if filters.on_date else "e.featured DESC, e.start_time DESC, e.id DESC"

        params.append(filters.limit)

        conn = self._connect()
        try:
            rows = conn.execute(
                f"""
                SELECT {_EVENT_COLUMNS}
                FROM events e
                LEFT JOIN categories c ON c.id = e.category_id
                WHERE {" AND ".join(conditions)}
                ORDER BY {order}
                LIMIT ?
            """,
                params,
            ).fetchall()
        finally:
            conn.close()

        return [_row_to_event(row) for row in rows]

    def _find_event_by_name(self, name: str) -> dict[str, Any] | None:
        conn = self._connect()
        try:
            rows = conn.execute(
                f"""
                SELECT {_EVENT_COLUMNS}
                FROM events e
                LEFT JOIN categories c ON c.id = e.category_id
                WHERE {_PUBLIC}
                ORDER BY e.id
            """
            ).fetchall()
        finally:
            conn.close()

        best_row = None
        best_score = 0.0
        for row in rows:
            score = score_name_match(name, row["title"])
            if score > best_score:
                best_row, best_score = row, score

        if best_row is None or best_score < NAME_MATCH_THRESHOLD:
            logger.debug(f"No event matches '{name}' (best score {best_score})")
            return None

        return _row_to_event(best_row)

    def _get_event(self, event_id: int) -> dict[str, Any] | None:
        conn = self._connect()
        try:
            row = conn.execute(
                f"""
                SELECT {_EVENT_COLUMNS}
                FROM events e
                LEFT JOIN categories c ON c.id = e.category_id
                WHERE e.id = ? AND {_PUBLIC}
            """,
                (event_id,),
            ).fetchone()
        finally:
            conn.close()

        return _row_to_event(row) if row else None

    def _count_published_events(self) -> int:
        conn = self._connect()
        try:
            row = conn.execute(f"SELECT COUNT(*) FROM events e WHERE {_PUBLIC}").fetchone()
        finally:
            conn.close()

        return row[0]
