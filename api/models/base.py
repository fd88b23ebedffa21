"""Base model with common fields and utilities."""

from typing import Any

from sqlalchemy import Boolean, Column, DateTime, func
from sqlalchemy.orm import declared_attr

from api.config.database import Base


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime,
            default=func.now(),
            nullable=False,
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime,
            onupdate=func.now(),
            nullable=True,
        )


class BaseModel(Base, TimestampMixin):
    """
    Abstract base class for soft-deletable models.

    Provides:
    - created_at: Timestamp when record was created
    - updated_at: Timestamp when record was last updated
    - is_active: False once the record has been soft deleted
    - to_dict(): Convert model to dictionary
    """

    __abstract__ = True

    is_active = Column(Boolean, default=True, nullable=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert model instance to dictionary."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        """String representation of model."""
        pk = getattr(self, "id", None)
        return f"<{self.__class__.__name__}(id={pk})>"
