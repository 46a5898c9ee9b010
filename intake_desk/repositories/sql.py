"""SQL Repository: entity records in a relational table via SQLAlchemy.

Filtering and sorting reuse the document store's rules in Python after
loading the entity type's rows, so results match the other backends exactly.
Each call is its own transaction.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.database import session_scope
from ..core.exceptions import RecordNotFoundError
from ..models import EntityRecord
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


def _to_record(row: EntityRecord) -> Record:
    return {
        "id": row.id,
        "created_date": row.created_date,
        "updated_date": row.updated_date,
        **row.data,
    }


class SqlRepository(EntityRepository):
    """One entity type stored in the ``entity_records`` table."""

    def __init__(
        self,
        entity_name: str,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        super().__init__(entity_name)
        self._session_factory = session_factory

    async def _find(self, session: AsyncSession, record_id: str) -> EntityRecord | None:
        result = await session.execute(
            select(EntityRecord).where(
                EntityRecord.entity_type == self.entity_name,
                EntityRecord.id == record_id,
            )
        )
        return result.scalar_one_or_none()

    async def filter(
        self,
        where: Record | None = None,
        order: str | None = None,
    ) -> list[Record]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(EntityRecord)
                .where(EntityRecord.entity_type == self.entity_name)
                .order_by(EntityRecord.seq.desc())
            )
            rows = [_to_record(row) for row in result.scalars().all()]
        return sort_records([r for r in rows if matches_where(r, where)], order)

    async def get(self, record_id: str) -> Record | None:
        async with session_scope(self._session_factory) as session:
            row = await self._find(session, record_id)
            return _to_record(row) if row else None

    async def create(self, data: Record) -> Record:
        fields = strip_system_fields(self.entity_name, data)
        now = utc_now_iso()
        row = EntityRecord(
            id=new_id(),
            entity_type=self.entity_name,
            data=fields,
            created_date=now,
            updated_date=now,
        )
        async with session_scope(self._session_factory) as session:
            session.add(row)
            await session.flush()
            record = _to_record(row)

        logger.info(f"Created {self.entity_name} {record['id']}")
        return record

    async def update(self, record_id: str, patch: Record) -> Record:
        async with session_scope(self._session_factory) as session:
            row = await self._find(session, record_id)
            if row is None:
                raise RecordNotFoundError(self.entity_name, record_id)
            # Reassign so the JSON column is flagged dirty.
            row.data = {**row.data, **strip_system_fields(self.entity_name, patch)}
            row.updated_date = next_timestamp(row.updated_date)
            await session.flush()
            return _to_record(row)

    async def delete(self, record_id: str) -> Record:
        async with session_scope(self._session_factory) as session:
            await session.execute(
                delete(EntityRecord).where(
                    EntityRecord.entity_type == self.entity_name,
                    EntityRecord.id == record_id,
                )
            )
        return {"ok": True}
