import logging
from typing import Any, Dict, Optional, Tuple, Type

import httpx

from ratings_client.api import API_URL, ApiClient
from ratings_client.auth import AuthSession
from ratings_client.notifications import Toaster
from ratings_client.pages import (
    AdminDashboardPage,
    AdminStoresPage,
    AdminUsersPage,
    AuthPage,
    OwnerDashboardPage,
    UserDashboardPage,
    UserProfilePage,
    UserStoresPage,
)
from ratings_client.query_cache import QueryClient
from ratings_client.roles import home_path
from schemas import UserRole

logger = logging.getLogger(__name__)

AUTH_PATH = "/auth"

ROUTES: Dict[str, Tuple[Type, Tuple[UserRole, ...]]] = {
    "/": (UserDashboardPage, (UserRole.USER,)),
    "/stores": (UserStoresPage, (UserRole.USER,)),
    "/profile": (UserProfilePage, tuple(UserRole)),
    "/owner": (OwnerDashboardPage, (UserRole.OWNER,)),
    "/admin": (AdminDashboardPage, (UserRole.ADMIN,)),
    "/admin/stores": (AdminStoresPage, (UserRole.ADMIN,)),
    "/admin/users": (AdminUsersPage, (UserRole.ADMIN,)),
}


class RatingsApp:
    """Everything one client session shares: API, query cache, toasts, auth.

    Use as an async context manager; leaving it drops the cache and closes the
    HTTP client.
    """

    def __init__(self, base_url: str = API_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api = ApiClient(base_url, transport=transport)
        self.query_client = QueryClient(self.api)
        self.toaster = Toaster()
        self.session = AuthSession(self.api, self.query_client, self.toaster)
        self.path = AUTH_PATH

    def resolve(self, path: str) -> str:
        """Where a request for ``path`` ends up for the current user."""
        role = self.session.role
        if path == AUTH_PATH:
            return AUTH_PATH if role is None else home_path(role)
        if path not in ROUTES:
            raise KeyError(f"no page at {path!r}")
        if role is None:
            return AUTH_PATH
        _, allowed = ROUTES[path]
        return path if role in allowed else home_path(role)

    async def navigate(self, path: str) -> Any:
        await self.session.load_user()
        target = self.resolve(path)
        if target != path:
            logger.info("Redirecting %s to %s", path, target)
        self.path = target
        if target == AUTH_PATH:
            page = AuthPage(self.session)
            await page.load()
            return page
        page_cls, _ = ROUTES[target]
        if page_cls is UserProfilePage:
            return UserProfilePage(self.session)
        page = page_cls(self.api, self.query_client, self.toaster)
        await page.load()
        return page

    def logout(self) -> None:
        self.session.logout()
        self.path = AUTH_PATH

    async def aclose(self) -> None:
        await self.query_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
