"""Repository interface and the matching/sorting rules every backend shares."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import cmp_to_key
from typing import Any
from uuid import uuid4

from ..schemas import SYSTEM_FIELDS

logger = logging.getLogger(__name__)

Record = dict[str, Any]


# =============================================================================
# IDENTITY & TIMESTAMPS
# =============================================================================


def new_id() -> str:
    return str(uuid4())


def utc_now_iso() -> str:
    """Fixed-width ISO-8601 UTC timestamp; lexical order equals time order."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def next_timestamp(previous: str | None) -> str:
    """Current time, bumped past ``previous`` when the clock has not moved."""
    now = utc_now_iso()
    if not previous or now > previous:
        return now
    try:
        bumped = datetime.fromisoformat(previous) + timedelta(microseconds=1)
    except ValueError:
        return now
    return bumped.astimezone(timezone.utc).isoformat(timespec="microseconds")


def strip_system_fields(entity_name: str, data: Record | None) -> Record:
    """Drop caller-supplied identity/timestamp fields."""
    data = dict(data or {})
    ignored = SYSTEM_FIELDS.intersection(data)
    if ignored:
        logger.warning(f"{entity_name}: ignoring store-managed fields {sorted(ignored)}")
        for key in ignored:
            del data[key]
    return data


# =============================================================================
# MATCHING & SORTING
# =============================================================================


def _strict_equal(a: Any, b: Any) -> bool:
    # True == 1 in Python; a boolean only matches a boolean.
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def matches_where(record: Record, where: Record | None) -> bool:
    """Exact equality on every key; a missing field never equals a value."""
    if not where:
        return True
    for key, value in where.items():
        if key not in record or not _strict_equal(record[key], value):
            return False
    return True


def render_query_value(value: Any) -> str:
    """Text form of a filter value in a query string (``true``, ``null``, ``5``)."""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def matches_query(record: Record, params: dict[str, str]) -> bool:
    """Match query-string filters against the text form of stored values."""
    for key, raw in params.items():
        if key not in record or render_query_value(record[key]) != raw:
            return False
    return True


def _compare(a: Any, b: Any) -> int:
    try:
        return 1 if a > b else -1
    except TypeError:
        # Mixed types: fall back to their text form.
        return 1 if str(a) > str(b) else -1


def sort_records(records: list[Record], order: str | None) -> list[Record]:
    """Sort by ``order`` (``-field`` for descending). None/missing sort last."""
    if not order:
        return list(records)
    desc = order.startswith("-")
    key = order[1:] if desc else order
    direction = -1 if desc else 1

    def compare(left: Record, right: Record) -> int:
        av = left.get(key)
        bv = right.get(key)
        if av == bv:
            return 0
        if av is None:
            return 1
        if bv is None:
            return -1
        return _compare(av, bv) * direction

    return sorted(records, key=cmp_to_key(compare))


# =============================================================================
# REPOSITORY INTERFACE
# =============================================================================


class EntityRepository(ABC):
    """
    CRUD + filter + sort over one entity type.

    Implementations must agree on:
    - ``get`` returns None for an unknown id, never raises for absence
    - ``create`` assigns a fresh id and equal created/updated timestamps
    - ``update`` raises RecordNotFoundError for an unknown id
    - ``delete`` is idempotent
    """

    def __init__(self, entity_name: str):
        self.entity_name = entity_name

    @abstractmethod
    async def filter(
        self,
        where: Record | None = None,
        order: str | None = None,
    ) -> list[Record]:
        pass

    @abstractmethod
    async def get(self, record_id: str) -> Record | None:
        pass

    @abstractmethod
    async def create(self, data: Record) -> Record:
        pass

    @abstractmethod
    async def update(self, record_id: str, patch: Record) -> Record:
        pass

    @abstractmethod
    async def delete(self, record_id: str) -> Record:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.entity_name}>"
