"""SQLAlchemy ORM model for entity records.

Records stay schema-less: the full field bag lives in a JSON column, with the
identity, owning entity type and timestamps copied into real columns so the
repository can look them up and order them.
"""

from sqlalchemy import JSON, Index, Integer, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for the store tables."""

    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "pk": "pk_%(table_name)s",
        }
    )


class EntityRecord(Base):
    """One record of any entity type (Firm, Intake, EmailHistory, Message)."""

    __tablename__ = "entity_records"

    # Insertion sequence; newest first mirrors the document store's
    # head-insert order.
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_date: Mapped[str] = mapped_column(String(40), nullable=False)
    updated_date: Mapped[str] = mapped_column(String(40), nullable=False)

    __table_args__ = (
        Index("ix_entity_records_entity_type_seq", "entity_type", "seq"),
    )

    def __repr__(self) -> str:
        return f"<EntityRecord {self.entity_type}:{self.id}>"
