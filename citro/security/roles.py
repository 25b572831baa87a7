"""
Tool: Role Capabilities
Purpose: Decide what a caller's role may do before a voice command touches data

Features:
- 5 roles: owner, admin, head, student, anonymous
- Capability check before every gated intent
- Deny list for the few things even admins may not do
- Role parsing that tolerates missing or unknown role strings

Capability Format:
    resource:action
    Examples: dashboard:read, stats:read, registration:read, cart:*, *:* (owner)

The voice pipeline only compares roles handed to it. Credentials are checked
by whoever issued the session.
"""

from __future__ import annotations

import fnmatch
from enum import Enum


class Role(str, Enum):
    """Platform roles, highest privilege first."""

    OWNER = "owner"
    ADMIN = "admin"
    HEAD = "head"
    STUDENT = "student"
    ANONYMOUS = "anonymous"

    @classmethod
    def parse(cls, value: str | None, authenticated: bool = False) -> "Role":
        """Map a session role string onto a Role.

        Missing or unrecognised roles become STUDENT for signed-in callers
        and ANONYMOUS otherwise.
        """
        fallback = cls.STUDENT if authenticated else cls.ANONYMOUS
        if not value or not isinstance(value, str):
            return fallback
        try:
            role = cls(value.strip().lower())
        except ValueError:
            return fallback
        if role == cls.ANONYMOUS and authenticated:
            return cls.STUDENT
        return role


ROLE_CAPABILITIES: dict[Role, dict] = {
    Role.OWNER: {
        "description": "Full control, including owner settings",
        "priority": 100,
        "capabilities": ["*:*"],
    },
    Role.ADMIN: {
        "description": "Full control except owner settings",
        "priority": 80,
        "capabilities": ["*:*"],
        "denied": ["owner-settings:*"],
    },
    Role.HEAD: {
        "description": "Department head with read access to registrations",
        "priority": 50,
        "capabilities": [
            "dashboard:read",
            "profile:*",
            "event:read",
            "registration:read",
            "cart:*",
        ],
    },
    Role.STUDENT: {
        "description": "Signed-in participant",
        "priority": 20,
        "capabilities": [
            "dashboard:read",
            "profile:*",
            "event:read",
            "registration:create",
            "registration:read",
            "cart:*",
        ],
    },
    Role.ANONYMOUS: {
        "description": "Visitor without a session",
        "priority": 0,
        "capabilities": ["event:read", "cart:*"],
    },
}


def capability_matches(granted: str, required: str) -> bool:
    """
    Check if a granted capability covers a required one.
    Supports wildcards: cart:* matches cart:write, *:* matches everything.
    """
    if granted == required:
        return True

    if granted == "*:*":
        return True

    granted_parts = granted.split(":")
    required_parts = required.split(":")

    if len(granted_parts) != 2 or len(required_parts) != 2:
        return False

    granted_resource, granted_action = granted_parts
    required_resource, required_action = required_parts

    resource_match = granted_resource == "*" or fnmatch.fnmatch(required_resource, granted_resource)
    action_match = granted_action == "*" or fnmatch.fnmatch(required_action, granted_action)

    return resource_match and action_match


def get_role_capabilities(role: Role) -> list[str]:
    """Get the capabilities granted to a role."""
    return list(ROLE_CAPABILITIES[role]["capabilities"])


def can(role: Role, capability: str) -> bool:
    """Return True if ``role`` holds ``capability``.

    Denials are evaluated first so a wildcard grant never overrides them.
    """
    entry = ROLE_CAPABILITIES.get(role)
    if entry is None:
        return False

    for denied in entry.get("denied", []):
        if capability_matches(denied, capability):
            return False

    return any(capability_matches(granted, capability) for granted in entry["capabilities"])
