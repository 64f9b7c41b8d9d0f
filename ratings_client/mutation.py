import inspect
import logging
from typing import Any, Awaitable, Callable, Optional

from ratings_client.api import ApiError

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Mutation:
    """One async write and its outcome callbacks.

    API errors are caught here and handed to ``on_error``; they are not
    re-raised. A cancelled mutation runs no callbacks at all.
    """

    def __init__(
        self,
        fn: Callable[..., Awaitable[Any]],
        on_success: Optional[Callable] = None,
        on_error: Optional[Callable] = None,
        on_settled: Optional[Callable] = None,
    ):
        self.fn = fn
        self.on_success = on_success
        self.on_error = on_error
        self.on_settled = on_settled
        self.is_pending = False
        self.data: Any = None
        self.error: Optional[ApiError] = None

    async def mutate(self, variables: Any = None) -> Any:
        self.is_pending = True
        self.error = None
        try:
            data = await self.fn(variables)
        except ApiError as exc:
            self.is_pending = False
            self.error = exc
            logger.info("Mutation %s failed: %s", getattr(self.fn, "__name__", self.fn), exc.message)
            if self.on_error is not None:
                await _maybe_await(self.on_error(exc))
            await self._settle()
            return None
        except BaseException:
            self.is_pending = False
            raise
        self.is_pending = False
        self.data = data
        if self.on_success is not None:
            await _maybe_await(self.on_success(data))
        await self._settle()
        return data

    async def _settle(self) -> None:
        if self.on_settled is not None:
            await _maybe_await(self.on_settled())

    def reset(self) -> None:
        self.is_pending = False
        self.data = None
        self.error = None
