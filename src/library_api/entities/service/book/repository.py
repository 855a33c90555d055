"""Book repository for data access operations."""

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from src.library_api.entities.core._base import utc_now
from src.library_api.entities.service.book.entity import Book, BookBorrowCount, BorrowedBook
from src.library_api.entities.service.book.table import BookTable
from src.library_api.entities.service.transaction.table import TransactionTable


class BookRepository:
    """Data-access layer for books and book-centric aggregates."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _to_entity(row: BookTable) -> Book:
        return Book.model_validate(row.model_dump())

    def get(self, book_id: int) -> Book | None:
        row = self._session.get(BookTable, book_id)
        if row is None:
            return None
        return self._to_entity(row)

    def get_by_isbn(self, isbn: str) -> Book | None:
        row = self._session.exec(select(BookTable).where(BookTable.isbn == isbn)).first()
        return self._to_entity(row) if row else None

    def create(self, book: Book) -> Book:
        row = BookTable(**book.model_dump(exclude={"id"}))
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self._to_entity(row)

    def update(self, book: Book) -> Book:
        if book.id is None:
            raise ValueError("Cannot update a book without an id")
        row = self._session.get(BookTable, book.id)
        if row is None:
            raise ValueError(f"Book {book.id} not found")

        for key, value in book.model_dump(exclude={"id", "created_at", "updated_at"}).items():
            setattr(row, key, value)
        row.updated_at = utc_now()

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self._to_entity(row)

    def delete(self, book_id: int) -> bool:
        row = self._session.get(BookTable, book_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def has_transactions(self, book_id: int) -> bool:
        statement = select(TransactionTable.id).where(TransactionTable.book_id == book_id).limit(1)
        return self._session.exec(statement).first() is not None

    def list_page(self, offset: int, limit: int, search: str | None = None) -> tuple[list[Book], int]:
        """Return one page of books ordered by id, plus the total match count.

        ``search`` is a case-insensitive substring match over title or author.
        """
        statement = select(BookTable)
        count_statement = select(func.count()).select_from(BookTable)

        if search:
            term = search.lower()
            condition = or_(
                func.lower(BookTable.title).contains(term, autoescape=True),
                func.lower(BookTable.author).contains(term, autoescape=True),
            )
            statement = statement.where(condition)
            count_statement = count_statement.where(condition)

        total = self._session.exec(count_statement).one()
        rows = self._session.exec(
            statement.order_by(BookTable.id).offset(offset).limit(limit)
        ).all()
        return [self._to_entity(row) for row in rows], total

    def most_borrowed(self, limit: int) -> list[BookBorrowCount]:
        """Books with at least one transaction, by transaction count desc then id asc."""
        borrow_count = func.count(TransactionTable.id).label("borrow_count")
        statement = (
            select(BookTable, borrow_count)
            .join(TransactionTable, col(TransactionTable.book_id) == col(BookTable.id))
            .group_by(BookTable.id)
            .order_by(borrow_count.desc(), col(BookTable.id).asc())
            .limit(limit)
        )
        return [
            BookBorrowCount(book=self._to_entity(row), borrow_count=count)
            for row, count in self._session.exec(statement).all()
        ]

    def borrowed_by(self, user_id: int) -> list[BorrowedBook]:
        """A user's borrowing history, newest borrow first."""
        statement = (
            select(TransactionTable, BookTable)
            .join(BookTable, col(BookTable.id) == col(TransactionTable.book_id))
            .where(TransactionTable.user_id == user_id)
            .order_by(col(TransactionTable.borrowed_at).desc(), col(TransactionTable.id).desc())
        )
        return [
            BorrowedBook(
                book=self._to_entity(book),
                borrowed_at=transaction.borrowed_at,
                returned_at=transaction.returned_at,
                is_currently_borrowed=transaction.returned_at is None,
            )
            for transaction, book in self._session.exec(statement).all()
        ]
