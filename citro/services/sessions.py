"""
Tool: Session Lookup
Purpose: Resolve a session token from the login flow into caller context

Security Notes:
    - Only token hashes are stored, never raw tokens
    - Both the active flag and expiry are checked on every lookup
    - Issuing sessions belongs to the login flow, not this service
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime
from typing import Any

from citro.services.base import SessionService
from citro.services.database import SqliteService

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    """Hash a token for storage."""
    return hashlib.sha256(token.encode()).hexdigest()


class SqliteSessionService(SqliteService, SessionService):
    async def lookup(self, token: str) -> dict[str, Any] | None:
        if not token:
            return None
        return await self._run(self._lookup, token)

    def _lookup(self, token: str) -> dict[str, Any] | None:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT user_id, role, email, expires_at, is_active FROM sessions WHERE token_hash = ?",
                (hash_token(token),),
            ).fetchone()
        finally:
            conn.close()

        if not row:
            return None

        if not row["is_active"]:
            logger.debug("Session revoked")
            return None

        if datetime.now() > datetime.fromisoformat(row["expires_at"]):
            logger.debug("Session expired")
            return None

        return {"user_id": row["user_id"], "role": row["role"], "email": row["email"]}
