"""Book catalogue writes."""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.library_api.core.exceptions import ConflictError, NotFoundError
from src.library_api.core.models.library import BookCreate, BookUpdate
from src.library_api.core.validation.rules import normalize_isbn
from src.library_api.entities.service.book import Book, BookRepository

DUPLICATE_ISBN = "Book with this ISBN already exists"


class CatalogService:
    def __init__(self, db_session: Session):
        self._book_repo = BookRepository(db_session)
        self._db_session = db_session

    def _ensure_isbn_free(self, isbn: str | None, exclude_id: int | None = None) -> None:
        if not isbn:
            return
        existing = self._book_repo.get_by_isbn(isbn)
        if existing and existing.id != exclude_id:
            raise ConflictError(DUPLICATE_ISBN)

    def _commit(self) -> None:
        try:
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            raise ConflictError(DUPLICATE_ISBN) from e

    def add_book(self, data: BookCreate) -> Book:
        isbn = normalize_isbn(data.isbn) if data.isbn else None
        self._ensure_isbn_free(isbn)

        book = self._book_repo.create(
            Book(
                title=data.title.strip(),
                author=data.author.strip(),
                genre=data.genre.strip(),
                published_year=data.published_year,
                isbn=isbn,
            )
        )
        self._commit()
        logger.info(f"Added book {book.id}: {book.title!r} by {book.author}")
        return book

    def update_book(self, book_id: int, changes: BookUpdate) -> Book:
        book = self._book_repo.get(book_id)
        if book is None:
            raise NotFoundError("Book not found")

        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        for field in ("title", "author", "genre"):
            if field in updates:
                updates[field] = updates[field].strip()
        if "isbn" in updates:
            updates["isbn"] = normalize_isbn(updates["isbn"])
            self._ensure_isbn_free(updates["isbn"], exclude_id=book_id)

        updated = self._book_repo.update(book.model_copy(update=updates))
        self._commit()
        logger.info(f"Updated book {book_id}: {sorted(updates)}")
        return updated

    def delete_book(self, book_id: int) -> None:
        if self._book_repo.get(book_id) is None:
            raise NotFoundError("Book not found")
        if self._book_repo.has_transactions(book_id):
            raise ConflictError("Book has transaction history and cannot be deleted")

        self._book_repo.delete(book_id)
        self._db_session.commit()
        logger.info(f"Deleted book {book_id}")
