"""HTTP Repository: forwards every call to the remote REST backend.

Contract::

    GET    /api/{Entity}?{field}={value}&order={order}
    GET    /api/{Entity}/{id}
    POST   /api/{Entity}
    PATCH  /api/{Entity}/{id}
    DELETE /api/{Entity}/{id}

404 on ``get`` means "no such record" and 404 on ``update`` means
RecordNotFoundError, so callers see the same behavior as the local store.
"""

import logging
from urllib.parse import quote

from ..core.exceptions import RecordNotFoundError, RemoteRequestError
from ..core.http import ApiClient
from .base import EntityRepository, Record, render_query_value

logger = logging.getLogger(__name__)


class HttpRepository(EntityRepository):
    """One entity collection on the remote backend."""

    def __init__(self, entity_name: str, client: ApiClient, api_prefix: str = "/api"):
        super().__init__(entity_name)
        self._client = client
        self._base_path = f"{api_prefix.rstrip('/')}/{entity_name}"

    def _item_path(self, record_id: str) -> str:
        return f"{self._base_path}/{quote(str(record_id), safe='')}"

    async def filter(
        self,
        where: Record | None = None,
        order: str | None = None,
    ) -> list[Record]:
        params = {key: render_query_value(value) for key, value in (where or {}).items()}
        if order:
            params["order"] = order
        return await self._client.get(self._base_path, params=params)

    async def get(self, record_id: str) -> Record | None:
        path = self._item_path(record_id)
        response = await self._client.request("GET", path, allow_status=(404,))
        if response.status_code == 404:
            return None
        return response.json()

    async def create(self, data: Record) -> Record:
        return await self._client.post(self._base_path, data)

    async def update(self, record_id: str, patch: Record) -> Record:
        path = self._item_path(record_id)
        try:
            response = await self._client.request("PATCH", path, json=patch)
        except RemoteRequestError as e:
            if e.status_code == 404:
                raise RecordNotFoundError(self.entity_name, record_id) from e
            raise
        return response.json()

    async def delete(self, record_id: str) -> Record:
        return await self._client.delete(self._item_path(record_id))
