"""Entity repositories: one interface, three interchangeable backends."""

from .base import (
    EntityRepository,
    Record,
    matches_query,
    matches_where,
    new_id,
    next_timestamp,
    render_query_value,
    sort_records,
    utc_now_iso,
)
from .document import DEFAULT_COLLECTIONS, DocumentRepository, JsonDocument
from .http import HttpRepository
from .sql import SqlRepository

__all__ = [
    "EntityRepository",
    "Record",
    "matches_where",
    "matches_query",
    "render_query_value",
    "sort_records",
    "new_id",
    "utc_now_iso",
    "next_timestamp",
    "DEFAULT_COLLECTIONS",
    "JsonDocument",
    "DocumentRepository",
    "HttpRepository",
    "SqlRepository",
]
