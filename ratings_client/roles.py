"""Role-dependent presentation, one table per decision.

Every table covers all of ``UserRole``; adding a role without extending them
fails at import time.
"""

from typing import Dict, TypeVar, Union

from schemas import UserRole

T = TypeVar("T")

ROLE_LABELS = {
    UserRole.USER: "User",
    UserRole.OWNER: "Store Owner",
    UserRole.ADMIN: "Admin",
}

ROLE_FILTER_LABELS = {
    UserRole.USER: "Normal User",
    UserRole.OWNER: "Store Owner",
    UserRole.ADMIN: "Administrator",
}

ROLE_BADGES = {
    UserRole.USER: "outline",
    UserRole.OWNER: "secondary",
    UserRole.ADMIN: "destructive",
}

ROLE_HOME = {
    UserRole.USER: "/",
    UserRole.OWNER: "/owner",
    UserRole.ADMIN: "/admin",
}

for _table in (ROLE_LABELS, ROLE_FILTER_LABELS, ROLE_BADGES, ROLE_HOME):
    if set(_table) != set(UserRole):
        raise RuntimeError(f"role table is missing {set(UserRole) - set(_table)}")


def _lookup(table: Dict[UserRole, T], role: Union[UserRole, str]) -> T:
    return table[UserRole(role)]


def role_label(role: Union[UserRole, str]) -> str:
    return _lookup(ROLE_LABELS, role)


def role_filter_label(role: Union[UserRole, str]) -> str:
    return _lookup(ROLE_FILTER_LABELS, role)


def role_badge(role: Union[UserRole, str]) -> str:
    return _lookup(ROLE_BADGES, role)


def home_path(role: Union[UserRole, str]) -> str:
    return _lookup(ROLE_HOME, role)
