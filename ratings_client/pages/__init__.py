from ratings_client.pages.admin import AdminDashboardPage, AdminStoresPage, AdminUsersPage
from ratings_client.pages.auth import AuthPage
from ratings_client.pages.base import Page
from ratings_client.pages.owner import OwnerDashboardPage
from ratings_client.pages.user import UserDashboardPage, UserProfilePage, UserStoresPage

__all__ = [
    "AdminDashboardPage",
    "AdminStoresPage",
    "AdminUsersPage",
    "AuthPage",
    "OwnerDashboardPage",
    "Page",
    "UserDashboardPage",
    "UserProfilePage",
    "UserStoresPage",
]
