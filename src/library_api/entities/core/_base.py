"""Shared base classes for domain entities and their table models."""

from datetime import UTC, datetime

from pydantic import Field
from sqlalchemy import DateTime
from sqlmodel import Field as SQLField
from sqlmodel import SQLModel

from src.library_api.core.models.base import CamelModel


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class Entity(CamelModel):
    """Domain entity with a database-assigned integer id and audit timestamps."""

    id: int | None = Field(default=None, description="Database identifier")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class EntityTable(SQLModel):
    """Columns every persisted entity shares."""

    id: int | None = SQLField(default=None, primary_key=True)
    created_at: datetime = SQLField(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    updated_at: datetime = SQLField(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
