"""Roles and the per-route capability allow-lists checked by the authorization gate.

Roles are flat: "admin" is not implicitly "editor". Each capability lists
every role it admits.
"""

from typing import Literal

Role = Literal["admin", "editor", "viewer"]

ROLES: frozenset[str] = frozenset({"admin", "editor", "viewer"})

_ADMIN = frozenset({"admin"})
_ADMIN_EDITOR = frozenset({"admin", "editor"})

ROUTE_PERMISSIONS: dict[str, frozenset[str]] = {
    "households:create": _ADMIN_EDITOR,
    "households:update": _ADMIN_EDITOR,
    "households:delete": _ADMIN,
    "members:create": _ADMIN_EDITOR,
    "members:update": _ADMIN_EDITOR,
    "members:delete": _ADMIN_EDITOR,
    "users:list": _ADMIN,
    "users:create": _ADMIN,
    "users:update": _ADMIN,
    "users:delete": _ADMIN,
    "audit:read": _ADMIN,
}


def is_allowed(role: str, capability: str) -> bool:
    """True if role appears in the capability's allow-list. Unknown capabilities admit nobody."""
    allowed = ROUTE_PERMISSIONS.get(capability)
    if allowed is None:
        return False
    return role in allowed
