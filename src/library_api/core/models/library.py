"""Request and response bodies for the library endpoints.

Request models are deliberately loose: the validation chains in
``core.validation`` produce the user-facing messages, these models only
carry the already-checked values into the handlers.
"""

from datetime import datetime

from pydantic import Field

from src.library_api.core.models.base import CamelModel
from src.library_api.entities import Book, BookBorrowCount, BorrowedBook, Transaction, User, UserRole

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class BookCreate(CamelModel):
    title: str
    author: str
    genre: str
    published_year: int
    isbn: str | None = None


class BookUpdate(CamelModel):
    title: str | None = None
    author: str | None = None
    genre: str | None = None
    published_year: int | None = None
    isbn: str | None = None


class UserRegister(CamelModel):
    full_name: str
    email: str
    password: str
    username: str | None = None
    phone: str | None = None


class LoginRequest(CamelModel):
    """``identifier`` is either the email address or the username."""

    identifier: str
    password: str


class UserUpdate(CamelModel):
    full_name: str | None = None
    email: str | None = None
    password: str | None = None
    username: str | None = None
    phone: str | None = None
    role: UserRole | None = None


class BorrowRequest(CamelModel):
    book_id: int
    user_id: int | None = None


class ReturnRequest(CamelModel):
    book_id: int


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class UserPublic(CamelModel):
    """A user as shown to clients; no password hash, no stored tokens."""

    id: int
    full_name: str
    email: str
    username: str | None = None
    phone: str | None = None
    role: UserRole
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls.model_validate(user.model_dump(exclude={"password", "tokens"}))


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: UserPublic


class MessageResponse(CamelModel):
    message: str


class PageInfo(CamelModel):
    page: int
    limit: int
    total_pages: int

    @staticmethod
    def count_pages(total: int, limit: int) -> int:
        return (total + limit - 1) // limit if limit > 0 else 0


class BookPageInfo(PageInfo):
    total_books: int


class UserPageInfo(PageInfo):
    total_users: int


class TransactionPageInfo(PageInfo):
    total_transactions: int


class BookListResponse(CamelModel):
    success: bool = True
    data: list[Book]
    pagination: BookPageInfo


class UserListResponse(CamelModel):
    success: bool = True
    data: list[UserPublic]
    pagination: UserPageInfo


class TransactionListResponse(CamelModel):
    success: bool = True
    data: list[Transaction]
    pagination: TransactionPageInfo


__all__ = [
    "BookBorrowCount",
    "BookCreate",
    "BookListResponse",
    "BookPageInfo",
    "BookUpdate",
    "BorrowRequest",
    "BorrowedBook",
    "LoginRequest",
    "MessageResponse",
    "PageInfo",
    "ReturnRequest",
    "TokenResponse",
    "TransactionListResponse",
    "TransactionPageInfo",
    "UserListResponse",
    "UserPageInfo",
    "UserPublic",
    "UserRegister",
    "UserUpdate",
]
