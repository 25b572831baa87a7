"""Dashboard statistics and per-user registrations backed by SQLite."""

from __future__ import annotations

from typing import Any

from citro.services.base import DashboardService
from citro.services.database import SqliteService


class SqliteDashboardService(SqliteService, DashboardService):
    async def get_stats(self) -> dict[str, Any]:
        return await self._run(self._get_stats)

    async def get_user_registrations(self, user_id: str) -> list[dict[str, Any]]:
        return await self._run(self._get_user_registrations, user_id)

    def _get_stats(self) -> dict[str, Any]:
        """Get totals for the admin dashboard."""
        conn = self._connect()
        try:
            events = conn.execute(
                """
                SELECT
                    COUNT(*) AS total_events,
                    SUM(CASE WHEN status = 'published' THEN 1 ELSE 0 END) AS active_events
                FROM events
            """
            ).fetchone()

            registrations = conn.execute(
                """
                SELECT
                    COUNT(*) AS total_registrations,
                    COALESCE(SUM(CASE WHEN payment_status = 'paid' THEN quantity ELSE 0 END), 0) AS tickets_sold,
                    COALESCE(SUM(CASE WHEN payment_status = 'paid' THEN amount_paid ELSE 0 END), 0) AS total_revenue
                FROM registrations
            """
            ).fetchone()
        finally:
            conn.close()

        return {
            "total_events": events["total_events"] or 0,
            "active_events": events["active_events"] or 0,
            "total_registrations": registrations["total_registrations"] or 0,
            "tickets_sold": registrations["tickets_sold"] or 0,
            "total_revenue": float(registrations["total_revenue"] or 0),
        }

    def _get_user_registrations(self, user_id: str) -> list[dict[str, Any]]:
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT r.id, r.event_id, r.quantity, r.payment_status,
                       e.name AS title, e.venue, e.start_time
                FROM registrations r
                JOIN events e ON e.id = r.event_id
                WHERE r.user_id = ?
                ORDER BY r.created_at DESC, r.id DESC
            """,
                (user_id,),
            ).fetchall()
        finally:
            conn.close()

        return [dict(row) for row in rows]
