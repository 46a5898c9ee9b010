"""SQLAlchemy ORM Models for IntakeDesk."""

from .records import Base, EntityRecord

__all__ = [
    "Base",
    "EntityRecord",
]
