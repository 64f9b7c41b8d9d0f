"""Keyed cache of read queries with invalidation.

One ``QueryClient`` lives for one signed-in session and is handed to every page,
dialog and the auth session. Keys are endpoint paths. Invalidating a key marks
it stale and schedules a background refetch; the caller is never blocked.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from ratings_client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class Query:
    def __init__(self, key: str, fetcher: Fetcher):
        self.key = key
        self.fetcher = fetcher
        self.status = QueryStatus.IDLE
        self.data: Any = None
        self.error: Optional[ApiError] = None
        self.updated_at: Optional[datetime] = None
        self.stale = True
        # bumped on every invalidation so a fetch started earlier cannot mark the entry fresh
        self.generation = 0
        self.task: Optional[asyncio.Task] = None

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING and self.data is None


class QueryClient:
    def __init__(self, api: ApiClient):
        self.api = api
        self._queries: Dict[str, Query] = {}
        self._refetches: Set[asyncio.Task] = set()

    def _query(self, key: str, response_type: Any = Any, fetcher: Optional[Fetcher] = None) -> Query:
        query = self._queries.get(key)
        if query is None:
            if fetcher is None:
                async def fetcher():
                    return await self.api.get(key, response_type)
            query = self._queries[key] = Query(key, fetcher)
        return query

    async def fetch_query(self, key: str, response_type: Any = Any, fetcher: Optional[Fetcher] = None) -> Any:
        query = self._query(key, response_type, fetcher)
        while query.stale or query.status is not QueryStatus.SUCCESS:
            await self._run(query)
        return query.data

    async def _run(self, query: Query) -> Any:
        if query.task is None or query.task.done():
            query.task = asyncio.ensure_future(self._load(query))
        # shielded so a cancelled observer does not abort a fetch others are waiting on
        return await asyncio.shield(query.task)

    async def _load(self, query: Query) -> Any:
        generation = query.generation
        query.status = QueryStatus.LOADING
        try:
            data = await query.fetcher()
        except ApiError as exc:
            query.error = exc
            query.status = QueryStatus.ERROR
            query.stale = query.generation != generation
            raise
        query.data = data
        query.error = None
        query.status = QueryStatus.SUCCESS
        query.updated_at = datetime.now(timezone.utc)
        query.stale = query.generation != generation
        return data

    def get_query(self, key: str) -> Optional[Query]:
        return self._queries.get(key)

    def get_query_data(self, key: str, default: Any = None) -> Any:
        query = self._queries.get(key)
        if query is None or query.data is None:
            return default
        return query.data

    def set_query_data(self, key: str, data: Any, response_type: Any = Any) -> None:
        query = self._query(key, response_type)
        query.data = data
        query.error = None
        query.status = QueryStatus.SUCCESS
        query.stale = False
        query.updated_at = datetime.now(timezone.utc)

    def invalidate_queries(self, *keys: str) -> None:
        for key in keys:
            query = self._queries.get(key)
            if query is None:
                continue
            query.stale = True
            query.generation += 1
            task = asyncio.ensure_future(self._refetch(query))
            self._refetches.add(task)
            task.add_done_callback(self._refetches.discard)

    async def _refetch(self, query: Query) -> None:
        while query.stale:
            try:
                await self._run(query)
            except ApiError as exc:
                logger.warning("Refetch of %s failed: %s", query.key, exc.message)
                return

    async def wait_for_refetches(self) -> None:
        while self._refetches:
            await asyncio.gather(*list(self._refetches), return_exceptions=True)

    def clear(self) -> None:
        for task in list(self._refetches):
            task.cancel()
        self._refetches.clear()
        for query in self._queries.values():
            if query.task is not None and not query.task.done():
                query.task.cancel()
        self._queries.clear()

    async def aclose(self) -> None:
        self.clear()
        await self.api.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
