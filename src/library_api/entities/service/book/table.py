"""Book database table model."""

from sqlalchemy import Index
from sqlmodel import Field

from src.library_api.entities.core._base import EntityTable


class BookTable(EntityTable, table=True):
    """Database persistence model for books."""

    __tablename__ = "books"
    __table_args__ = (Index("ix_books_title_author", "title", "author"),)

    title: str
    author: str
    genre: str
    published_year: int
    isbn: str | None = Field(default=None, unique=True)
    is_available: bool = Field(default=True, nullable=False)
    borrow_count: int = Field(default=0, nullable=False)
