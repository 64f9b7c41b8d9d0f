"""HTTP access to the Store Ratings API.

Every response body is parsed into an explicit type at this boundary; a body
that does not match raises ``ResponseShapeError`` instead of leaking untyped
data into the views.
"""

import logging
import os
from typing import Any, Optional

import httpx
from pydantic import BaseModel, TypeAdapter

logger = logging.getLogger(__name__)

API_URL = os.getenv("RATINGS_API_URL", "http://localhost:8000")
REQUEST_TIMEOUT = float(os.getenv("RATINGS_API_TIMEOUT", "10"))


class ApiError(Exception):
    """A request failed; ``message`` is what the user gets to see."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ResponseShapeError(ApiError):
    pass


def error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        # request validation errors
        return "; ".join(item.get("msg", str(item)) if isinstance(item, dict) else str(item) for item in detail)
    return response.text or response.reason_phrase


def to_payload(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    return data


class ApiClient:
    def __init__(
        self,
        base_url: str = API_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self.token = token

    async def request(self, method: str, path: str, payload: Any = None) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = await self._http.request(method, path, json=to_payload(payload), headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Network error: {exc}") from exc
        if response.is_error:
            message = error_message(response)
            logger.info("%s %s returned %s: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)
        return response

    async def fetch(self, method: str, path: str, response_type: Any, payload: Any = None) -> Any:
        response = await self.request(method, path, payload)
        try:
            return TypeAdapter(response_type).validate_python(response.json())
        except ValueError as exc:
            logger.warning("Unexpected response shape from %s %s: %s", method, path, exc)
            raise ResponseShapeError(f"Unexpected response from {path}", status_code=response.status_code) from exc

    async def get(self, path: str, response_type: Any) -> Any:
        return await self.fetch("GET", path, response_type)

    async def post(self, path: str, payload: Any, response_type: Any) -> Any:
        return await self.fetch("POST", path, response_type, payload)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
