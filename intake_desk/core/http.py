"""HTTP client for the optional remote backend.

Every request carries the client's cookies (the equivalent of
``credentials: "include"``). Non-2xx responses raise ``RemoteRequestError``;
there are no retries.
"""

import logging
from typing import Any

import httpx

from .config import Settings
from .exceptions import RemoteRequestError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin JSON client bound to one backend base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiClient":
        return cls(
            settings.api_base_url,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    @property
    def http(self) -> httpx.AsyncClient:
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        files: dict[str, Any] | None = None,
        allow_status: tuple[int, ...] = (),
    ) -> httpx.Response:
        """Send a request and raise on a non-success status.

        Statuses listed in ``allow_status`` are returned to the caller instead
        of raising, so it can translate them (e.g. 404 into "not found").
        """
        try:
            response = await self._client.request(
                method, path, params=params, json=json, files=files
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise RemoteRequestError(method, path) from e

        if response.is_success or response.status_code in allow_status:
            return response

        logger.warning(f"{method} {path} failed with status {response.status_code}")
        raise RemoteRequestError(method, path, response.status_code)

    async def get(self, path: str, params: dict[str, str] | None = None) -> Any:
        response = await self.request("GET", path, params=params)
        return response.json()

    async def post(self, path: str, body: Any = None) -> Any:
        response = await self.request("POST", path, json=body)
        return response.json()

    async def patch(self, path: str, body: Any = None) -> Any:
        response = await self.request("PATCH", path, json=body)
        return response.json()

    async def delete(self, path: str) -> Any:
        response = await self.request("DELETE", path)
        return response.json()

    def clear_cookies(self) -> None:
        self._client.cookies.clear()

    async def aclose(self) -> None:
        await self._client.aclose()
