"""Entity: Transaction."""

from datetime import datetime

from pydantic import Field

from src.library_api.entities.core._base import Entity, utc_now


class Transaction(Entity):
    """A single borrow of one book by one user.

    The transaction is open while ``returned_at`` is ``None``.
    """

    user_id: int = Field(description="Borrowing user")
    book_id: int = Field(description="Borrowed book")
    borrowed_at: datetime = Field(default_factory=utc_now)
    returned_at: datetime | None = Field(default=None)

    @property
    def is_open(self) -> bool:
        return self.returned_at is None
