"""User repository for data access operations."""

from sqlalchemy import func, or_
from sqlmodel import Session, select

from src.library_api.entities.core._base import utc_now
from src.library_api.entities.core.user.entity import User
from src.library_api.entities.core.user.table import UserTable


class UserRepository:
    """Data-access layer for users.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _to_entity(row: UserTable) -> User:
        return User.model_validate(row.model_dump())

    def get(self, user_id: int) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return self._to_entity(row)

    def get_by_email(self, email: str) -> User | None:
        statement = select(UserTable).where(func.lower(UserTable.email) == email.lower())
        row = self._session.exec(statement).first()
        return self._to_entity(row) if row else None

    def get_by_username(self, username: str) -> User | None:
        statement = select(UserTable).where(UserTable.username == username)
        row = self._session.exec(statement).first()
        return self._to_entity(row) if row else None

    def get_by_identifier(self, identifier: str) -> User | None:
        """Look a user up by email or username, as accepted at login."""
        return self.get_by_email(identifier) or self.get_by_username(identifier)

    def create(self, user: User) -> User:
        row = UserTable(**user.model_dump(exclude={"id"}))
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self._to_entity(row)

    def update(self, user: User) -> User:
        if user.id is None:
            raise ValueError("Cannot update a user without an id")
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise ValueError(f"User {user.id} not found")

        for key, value in user.model_dump(exclude={"id", "created_at", "updated_at"}).items():
            setattr(row, key, value)
        row.updated_at = utc_now()

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self._to_entity(row)

    def delete(self, user_id: int) -> bool:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def list_page(self, offset: int, limit: int, search: str | None = None) -> tuple[list[User], int]:
        """Return one page of users ordered by id, plus the total match count."""
        statement = select(UserTable)
        count_statement = select(func.count()).select_from(UserTable)

        if search:
            term = search.lower()
            condition = or_(
                func.lower(UserTable.full_name).contains(term, autoescape=True),
                func.lower(UserTable.email).contains(term, autoescape=True),
                func.lower(func.coalesce(UserTable.username, "")).contains(term, autoescape=True),
            )
            statement = statement.where(condition)
            count_statement = count_statement.where(condition)

        total = self._session.exec(count_statement).one()
        rows = self._session.exec(
            statement.order_by(UserTable.id).offset(offset).limit(limit)
        ).all()
        return [self._to_entity(row) for row in rows], total

    def add_token(self, user_id: int, jti: str, keep: int) -> None:
        """Store a session token id, keeping only the ``keep`` most recent."""
        row = self._session.get(UserTable, user_id)
        if row is None:
            raise ValueError(f"User {user_id} not found")
        tokens = [*(row.tokens or []), jti]
        # Reassign so the JSON column is marked dirty
        row.tokens = tokens[-keep:] if keep > 0 else tokens
        self._session.add(row)
        self._session.flush()

    def remove_token(self, user_id: int, jti: str) -> bool:
        row = self._session.get(UserTable, user_id)
        if row is None or not row.tokens or jti not in row.tokens:
            return False
        row.tokens = [token for token in row.tokens if token != jti]
        self._session.add(row)
        self._session.flush()
        return True
