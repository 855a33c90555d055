"""Entity: Book."""

from datetime import datetime
from typing import Any

from pydantic import Field

from src.library_api.core.models.base import CamelModel
from src.library_api.entities.core._base import Entity


class Book(Entity):
    """Book entity representing a title in the library catalogue.

    ``is_available`` mirrors whether the book has an open transaction.
    ``borrow_count`` only ever grows, once per borrow.
    """

    title: str = Field(description="Title")
    author: str = Field(description="Author")
    genre: str = Field(description="Genre")
    published_year: int = Field(description="Year of publication")
    isbn: str | None = Field(default=None, description="ISBN-10 or ISBN-13, digits only")
    is_available: bool = Field(default=True, description="False while borrowed")
    borrow_count: int = Field(default=0, ge=0, description="Number of times borrowed")

    def __eq__(self, other: Any) -> bool:
        """Compare books by business attributes and lending state, ignoring timestamps."""
        if not isinstance(other, Book):
            return False

        return (
            self.id == other.id
            and self.title == other.title
            and self.author == other.author
            and self.genre == other.genre
            and self.published_year == other.published_year
            and self.isbn == other.isbn
            and self.is_available == other.is_available
            and self.borrow_count == other.borrow_count
        )

    def __hash__(self) -> int:
        """Hash based on business attributes and lending state, ignoring timestamps."""
        return hash((
            self.id,
            self.title,
            self.author,
            self.genre,
            self.published_year,
            self.isbn,
            self.is_available,
            self.borrow_count,
        ))


class BorrowedBook(CamelModel):
    """One entry of a user's borrowing history."""

    book: Book
    borrowed_at: datetime
    returned_at: datetime | None = None
    is_currently_borrowed: bool


class BookBorrowCount(CamelModel):
    """A book with the number of transactions recorded against it."""

    book: Book
    borrow_count: int
