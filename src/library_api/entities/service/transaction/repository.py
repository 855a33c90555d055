"""Transaction repository for data access operations."""

from sqlalchemy import func
from sqlmodel import Session, col, select

from src.library_api.entities.core._base import utc_now
from src.library_api.entities.service.transaction.entity import Transaction
from src.library_api.entities.service.transaction.table import TransactionTable


class TransactionRepository:
    """Data-access layer for borrow transactions.

    Transactions are appended and closed, never deleted.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _to_entity(row: TransactionTable) -> Transaction:
        return Transaction.model_validate(row.model_dump())

    def get(self, transaction_id: int) -> Transaction | None:
        row = self._session.get(TransactionTable, transaction_id)
        if row is None:
            return None
        return self._to_entity(row)

    def get_open_for_book(self, book_id: int) -> Transaction | None:
        statement = select(TransactionTable).where(
            TransactionTable.book_id == book_id,
            col(TransactionTable.returned_at).is_(None),
        )
        row = self._session.exec(statement).first()
        return self._to_entity(row) if row else None

    def create(self, transaction: Transaction) -> Transaction:
        row = TransactionTable(**transaction.model_dump(exclude={"id"}))
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self._to_entity(row)

    def close(self, transaction_id: int) -> Transaction:
        """Mark a transaction returned now."""
        row = self._session.get(TransactionTable, transaction_id)
        if row is None:
            raise ValueError(f"Transaction {transaction_id} not found")
        now = utc_now()
        row.returned_at = now
        row.updated_at = now
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self._to_entity(row)

    def exists_for_user(self, user_id: int) -> bool:
        statement = select(TransactionTable.id).where(TransactionTable.user_id == user_id).limit(1)
        return self._session.exec(statement).first() is not None

    def list_page(
        self,
        offset: int,
        limit: int,
        user_id: int | None = None,
        book_id: int | None = None,
        status: str | None = None,
    ) -> tuple[list[Transaction], int]:
        """Return one page of transactions, newest first, plus the total match count.

        ``status`` is ``"open"`` or ``"returned"``; anything else means both.
        """
        conditions = []
        if user_id is not None:
            conditions.append(TransactionTable.user_id == user_id)
        if book_id is not None:
            conditions.append(TransactionTable.book_id == book_id)
        if status == "open":
            conditions.append(col(TransactionTable.returned_at).is_(None))
        elif status == "returned":
            conditions.append(col(TransactionTable.returned_at).is_not(None))

        statement = select(TransactionTable).where(*conditions)
        count_statement = select(func.count()).select_from(TransactionTable).where(*conditions)

        total = self._session.exec(count_statement).one()
        rows = self._session.exec(
            statement.order_by(
                col(TransactionTable.borrowed_at).desc(), col(TransactionTable.id).desc()
            )
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._to_entity(row) for row in rows], total
