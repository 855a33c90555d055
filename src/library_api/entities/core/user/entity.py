"""User domain entity."""

from enum import StrEnum
from typing import Any

from pydantic import Field

from src.library_api.entities.core._base import Entity


class UserRole(StrEnum):
    ADMIN = "ADMIN"
    USER = "USER"


class User(Entity):
    """User entity representing a library member or administrator.

    ``password`` holds the hash, never the plain text. ``tokens`` holds the
    ``jti`` of every access token that is still accepted for this user.
    Neither is ever serialized to clients; see ``UserPublic``.
    """

    full_name: str = Field(description="User's full name")
    email: str = Field(description="User's email address")
    password: str = Field(default="", description="Password hash")
    username: str | None = Field(default=None, description="Optional login name")
    phone: str | None = Field(default=None, description="User's phone number")
    tokens: list[str] | None = Field(default=None, description="Stored session token ids")
    role: UserRole = Field(default=UserRole.USER, description="Access role")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def has_token(self, jti: str | None) -> bool:
        return bool(jti) and jti in (self.tokens or [])

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.full_name == other.full_name
            and self.email == other.email
            and self.username == other.username
            and self.phone == other.phone
            and self.role == other.role
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.full_name,
            self.email,
            self.username,
            self.phone,
            self.role,
        ))
