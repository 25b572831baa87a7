"""Carts backed by SQLite, keyed by owner ("user:<id>" or "session:<key>")."""

from __future__ import annotations

from typing import Any

from citro.services.base import CartService
from citro.services.database import SqliteService


class SqliteCartService(SqliteService, CartService):
    async def get_cart(self, owner: str) -> list[dict[str, Any]]:
        return await self._run(self._get_cart, owner)

    async def set_item(self, owner: str, event_id: int, quantity: int) -> dict[str, Any]:
        return await self._run(self._set_item, owner, event_id, quantity)

    async def remove_item(self, owner: str, event_id: int) -> bool:
        return await self._run(self._remove_item, owner, event_id)

    async def clear(self, owner: str) -> int:
        return await self._run(self._clear, owner)

    def _get_cart(self, owner: str) -> list[dict[str, Any]]:
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT ci.event_id, ci.quantity, e.name AS title, e.ticket_price
                FROM cart_items ci
                JOIN events e ON e.id = ci.event_id
                WHERE ci.owner = ?
                ORDER BY ci.updated_at, ci.event_id
            """,
                (owner,),
            ).fetchall()
        finally:
            conn.close()

        return [
            {
                "event_id": row["event_id"],
                "title": row["title"],
                "quantity": row["quantity"],
                "ticket_price": float(row["ticket_price"] or 0),
            }
            for row in rows
        ]

    def _set_item(self, owner: str, event_id: int, quantity: int) -> dict[str, Any]:
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO cart_items (owner, event_id, quantity)
                VALUES (?, ?, ?)
                ON CONFLICT(owner, event_id)
                DO UPDATE SET quantity = excluded.quantity, updated_at = CURRENT_TIMESTAMP
            """,
                (owner, event_id, quantity),
            )
            conn.commit()
        finally:
            conn.close()

        return {"event_id": event_id, "quantity": quantity}

    def _remove_item(self, owner: str, event_id: int) -> bool:
        conn = self._connect()
        try:
            cursor = conn.execute(
                "DELETE FROM cart_items WHERE owner = ? AND event_id = ?",
                (owner, event_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def _clear(self, owner: str) -> int:
        conn = self._connect()
        try:
            cursor = conn.execute("DELETE FROM cart_items WHERE owner = ?", (owner,))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()
