"""Transaction database table model."""

from datetime import datetime

from sqlalchemy import DateTime, Index, text
from sqlmodel import Field

from src.library_api.entities.core._base import EntityTable, utc_now


class TransactionTable(EntityTable, table=True):
    """Database persistence model for borrow transactions.

    ``uq_transactions_open_book`` allows at most one row per book with a
    null ``returned_at``.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_user_id", "user_id"),
        Index("ix_transactions_book_id", "book_id"),
        Index("ix_transactions_borrowed_at", "borrowed_at"),
        Index(
            "uq_transactions_open_book",
            "book_id",
            unique=True,
            sqlite_where=text("returned_at IS NULL"),
            postgresql_where=text("returned_at IS NULL"),
        ),
    )

    user_id: int = Field(foreign_key="users.id", nullable=False)
    book_id: int = Field(foreign_key="books.id", nullable=False)
    borrowed_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    returned_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
