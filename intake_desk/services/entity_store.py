"""
Entity Store: typed CRUD + filter + sort over a repository per entity type.

The store does not care which repository backs it (local document, SQL or
remote HTTP); the backend is picked once at startup by the client factory.
Records are validated against their pydantic model at this boundary, before
anything is written.
"""

import logging
from typing import Generic, TypeVar

from pydantic import ValidationError

from ..core.exceptions import UnknownEntityError
from ..repositories import EntityRepository, Record
from ..schemas import (
    ENTITY_MODELS,
    SYSTEM_FIELDS,
    EmailHistory,
    EntityModel,
    Firm,
    Intake,
    Message,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=EntityModel)


class EntitySet(Generic[ModelT]):
    """Typed view of one repository."""

    def __init__(self, model: type[ModelT], repository: EntityRepository):
        self.model = model
        self.repository = repository

    @property
    def entity_name(self) -> str:
        return self.repository.entity_name

    def _to_model(self, record: Record) -> ModelT:
        return self.model.model_validate(record)

    async def filter(
        self,
        where: Record | None = None,
        order: str | None = None,
    ) -> list[ModelT]:
        """All records equal to ``where`` on every key, sorted by ``order``.

        Stored records that fail validation are logged and left out.
        """
        records = await self.repository.filter(where or {}, order)
        models = []
        for record in records:
            try:
                models.append(self._to_model(record))
            except ValidationError as e:
                # Written by another client with values this schema rejects.
                logger.warning(
                    f"{self.entity_name}: skipping invalid record {record.get('id')}: "
                    f"{e.error_count()} error(s)"
                )
        return models

    async def get(self, record_id: str) -> ModelT | None:
        record = await self.repository.get(record_id)
        return self._to_model(record) if record is not None else None

    async def create(self, data: Record | ModelT) -> ModelT:
        if isinstance(data, EntityModel):
            data = data.to_record()
        validated = self.model.model_validate(data)
        payload = {
            k: v for k, v in validated.to_record().items() if k not in SYSTEM_FIELDS
        }
        record = await self.repository.create(payload)
        return self._to_model(record)

    async def update(self, record_id: str, patch: Record) -> ModelT:
        """Merge ``patch`` into the record. Raises RecordNotFoundError if absent.

        Only the patched keys are sent to the repository; the merge with the
        stored record is validated here first.
        """
        patch = {k: v for k, v in patch.items() if k not in SYSTEM_FIELDS}
        current = await self.repository.get(record_id)
        if current is not None:
            validated = self.model.model_validate({**current, **patch})
            dumped = validated.model_dump(mode="json")
            patch = {k: dumped.get(k) for k in patch}
        record = await self.repository.update(record_id, patch)
        return self._to_model(record)

    async def delete(self, record_id: str) -> Record:
        return await self.repository.delete(record_id)


class EntityStore:
    """The four entity sets, also addressable by entity name."""

    def __init__(self, repositories: dict[str, EntityRepository]):
        missing = set(ENTITY_MODELS) - set(repositories)
        if missing:
            raise UnknownEntityError(f"No repository for {sorted(missing)}")

        self.firms: EntitySet[Firm] = EntitySet(Firm, repositories["Firm"])
        self.intakes: EntitySet[Intake] = EntitySet(Intake, repositories["Intake"])
        self.email_history: EntitySet[EmailHistory] = EntitySet(
            EmailHistory, repositories["EmailHistory"]
        )
        self.messages: EntitySet[Message] = EntitySet(Message, repositories["Message"])

        self._by_name: dict[str, EntitySet] = {
            "Firm": self.firms,
            "Intake": self.intakes,
            "EmailHistory": self.email_history,
            "Message": self.messages,
        }

    @property
    def entity_names(self) -> list[str]:
        return list(self._by_name)

    def entity(self, name: str) -> EntitySet:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownEntityError(f"Unknown entity type: {name}") from None
