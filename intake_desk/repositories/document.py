"""
Document Repository: every entity collection in one serialized JSON document.

Layout under the storage key::

    {"Firm": [...], "Intake": [...], "EmailHistory": [...], "Message": [...]}

Every call is a fresh read-modify-write of the whole document. There is no
transactional isolation: two writers on the same storage (two processes, or
two store instances) can overwrite each other's changes without any error.
This lost-update hazard is accepted for the single-writer case and is not
patched here.
"""

import json
import logging

from ..core.exceptions import RecordNotFoundError, StoreError
from ..core.storage import KeyValueStorage
from .base import (
    EntityRepository,
    Record,
    matches_where,
    new_id,
    next_timestamp,
    sort_records,
    strip_system_fields,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

DEFAULT_COLLECTIONS = ("Firm", "Intake", "EmailHistory", "Message")


class JsonDocument:
    """The persisted document: loaded and written as a whole."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str,
        collections: tuple[str, ...] = DEFAULT_COLLECTIONS,
    ):
        self._storage = storage
        self._key = key
        self._collections = collections

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> dict[str, list[Record]]:
        raw = self._storage.get_item(self._key)
        if not raw:
            return {name: [] for name in self._collections}
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Stored document {self._key!r} is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise StoreError(f"Stored document {self._key!r} is not an object")
        for name in self._collections:
            if not isinstance(document.get(name), list):
                document[name] = []
        return document

    def save(self, document: dict[str, list[Record]]) -> None:
        self._storage.set_item(self._key, json.dumps(document, ensure_ascii=False))

    def clear(self) -> None:
        self._storage.remove_item(self._key)


class DocumentRepository(EntityRepository):
    """One entity collection inside a ``JsonDocument``."""

    def __init__(self, entity_name: str, document: JsonDocument):
        super().__init__(entity_name)
        self._document = document

    async def filter(
        self,
        where: Record | None = None,
        order: str | None = None,
    ) -> list[Record]:
        document = self._document.load()
        rows = [r for r in document.get(self.entity_name, []) if matches_where(r, where)]
        logger.debug(f"{self.entity_name}.filter({where!r}, {order!r}) -> {len(rows)} rows")
        return sort_records(rows, order)

    async def get(self, record_id: str) -> Record | None:
        document = self._document.load()
        for row in document.get(self.entity_name, []):
            if row.get("id") == record_id:
                return row
        return None

    async def create(self, data: Record) -> Record:
        fields = strip_system_fields(self.entity_name, data)
        now = utc_now_iso()
        row = {"id": new_id(), "created_date": now, "updated_date": now, **fields}

        document = self._document.load()
        document[self.entity_name] = [row, *document.get(self.entity_name, [])]
        self._document.save(document)

        logger.info(f"Created {self.entity_name} {row['id']}")
        return row

    async def update(self, record_id: str, patch: Record) -> Record:
        document = self._document.load()
        rows = document.get(self.entity_name, [])
        for index, row in enumerate(rows):
            if row.get("id") == record_id:
                break
        else:
            raise RecordNotFoundError(self.entity_name, record_id)

        updated = {
            **row,
            **strip_system_fields(self.entity_name, patch),
            "updated_date": next_timestamp(row.get("updated_date")),
        }
        rows[index] = updated
        document[self.entity_name] = rows
        self._document.save(document)
        return updated

    async def delete(self, record_id: str) -> Record:
        document = self._document.load()
        document[self.entity_name] = [
            r for r in document.get(self.entity_name, []) if r.get("id") != record_id
        ]
        self._document.save(document)
        return {"ok": True}
