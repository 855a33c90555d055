"""Borrow and return: the per-book Available/Borrowed state machine.

A book moves to Borrowed when a transaction is opened for it and back to
Available when that transaction is closed. ``books.is_available`` mirrors
whether an open transaction exists; the partial unique index on
``transactions`` rejects a second open row for the same book.
"""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.library_api.core.exceptions import (
    BookUnavailableError,
    NotBorrowedError,
    NotFoundError,
    PermissionDeniedError,
)
from src.library_api.entities.core.user import User, UserRepository
from src.library_api.entities.service.book import BookRepository
from src.library_api.entities.service.transaction import Transaction, TransactionRepository

BOOK_NOT_AVAILABLE = "Book is not available"
BOOK_NOT_BORROWED = "Book is not currently borrowed"


class LendingService:
    def __init__(self, db_session: Session):
        self._book_repo = BookRepository(db_session)
        self._user_repo = UserRepository(db_session)
        self._transaction_repo = TransactionRepository(db_session)
        self._db_session = db_session

    def borrow(self, book_id: int, user_id: int) -> Transaction:
        """Open a transaction for ``user_id`` on ``book_id``.

        Raises:
            NotFoundError: If the book or the user does not exist
            BookUnavailableError: If the book already has an open transaction
        """
        book = self._book_repo.get(book_id)
        if book is None:
            raise NotFoundError("Book not found")
        if self._user_repo.get(user_id) is None:
            raise NotFoundError("User not found")

        if not book.is_available or self._transaction_repo.get_open_for_book(book_id):
            logger.warning(f"Borrow of unavailable book {book_id} by user {user_id} refused")
            raise BookUnavailableError(BOOK_NOT_AVAILABLE)

        try:
            transaction = self._transaction_repo.create(Transaction(user_id=user_id, book_id=book_id))
            self._book_repo.update(
                book.model_copy(update={"is_available": False, "borrow_count": book.borrow_count + 1})
            )
            self._db_session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent borrow of the same book
            self._db_session.rollback()
            logger.warning(f"Concurrent borrow of book {book_id} rejected by open-transaction index")
            raise BookUnavailableError(BOOK_NOT_AVAILABLE) from e

        logger.info(f"Book {book_id} borrowed by user {user_id} (transaction {transaction.id})")
        return transaction

    def return_book(self, book_id: int, actor: User) -> Transaction:
        """Close the open transaction on ``book_id``.

        Raises:
            NotFoundError: If the book does not exist
            NotBorrowedError: If the book has no open transaction
            PermissionDeniedError: If ``actor`` is neither the borrower nor an admin
        """
        book = self._book_repo.get(book_id)
        if book is None:
            raise NotFoundError("Book not found")

        open_transaction = self._transaction_repo.get_open_for_book(book_id)
        if open_transaction is None or open_transaction.id is None:
            raise NotBorrowedError(BOOK_NOT_BORROWED)

        if open_transaction.user_id != actor.id and not actor.is_admin:
            raise PermissionDeniedError("Only the borrower or an admin can return this book")

        transaction = self._transaction_repo.close(open_transaction.id)
        self._book_repo.update(book.model_copy(update={"is_available": True}))
        self._db_session.commit()

        logger.info(f"Book {book_id} returned (transaction {transaction.id})")
        return transaction
