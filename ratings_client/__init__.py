"""Client-side presentation logic for the Store Ratings platform."""

from ratings_client.api import ApiClient, ApiError, ResponseShapeError
from ratings_client.app import RatingsApp
from ratings_client.auth import AuthSession
from ratings_client.dialogs import AddStoreDialog, AddUserDialog
from ratings_client.notifications import Toast, Toaster, ToastVariant
from ratings_client.query_cache import QueryClient, QueryStatus
from ratings_client.star_rating import StarRating, StarSize
from ratings_client.table import Column, SortableTable, SortDirection, search_filter

__all__ = [
    "AddStoreDialog",
    "AddUserDialog",
    "ApiClient",
    "ApiError",
    "AuthSession",
    "Column",
    "QueryClient",
    "QueryStatus",
    "RatingsApp",
    "ResponseShapeError",
    "SortDirection",
    "SortableTable",
    "StarRating",
    "StarSize",
    "Toast",
    "ToastVariant",
    "Toaster",
    "search_filter",
]
