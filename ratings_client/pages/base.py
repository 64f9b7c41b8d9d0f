import logging
from typing import Any, Dict, Optional

from ratings_client.api import ApiClient, ApiError
from ratings_client.notifications import Toaster
from ratings_client.query_cache import QueryClient

logger = logging.getLogger(__name__)


class Page:
    """A screen backed by one or more cached queries.

    ``queries`` maps cache keys to response types. Views read their data from
    the cache on every access, so a refetch after invalidation shows up without
    reloading the page.
    """

    queries: Dict[str, Any] = {}
    load_error_message = "Failed to load data. Please refresh."

    def __init__(self, api: ApiClient, query_client: QueryClient, toaster: Toaster):
        self.api = api
        self.query_client = query_client
        self.toaster = toaster
        self.error: Optional[str] = None

    async def load(self) -> None:
        self.error = None
        for key, response_type in self.queries.items():
            try:
                await self.query_client.fetch_query(key, response_type)
            except ApiError as exc:
                logger.warning("Loading %s failed: %s", key, exc.message)
                self.error = self.load_error_message

    def data(self, key: str, default: Any = None) -> Any:
        return self.query_client.get_query_data(key, default)

    def loading(self, key: str) -> bool:
        query = self.query_client.get_query(key)
        return query is None or query.is_loading

    @property
    def is_loading(self) -> bool:
        return any(self.loading(key) for key in self.queries)
