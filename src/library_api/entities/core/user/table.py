"""User database table model."""

from sqlalchemy import JSON
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field

from src.library_api.entities.core._base import EntityTable
from src.library_api.entities.core.user.entity import UserRole


class UserTable(EntityTable, table=True):
    """Database persistence model for users."""

    __tablename__ = "users"

    full_name: str
    email: str = Field(unique=True, index=True)
    password: str
    username: str | None = Field(default=None, unique=True)
    phone: str | None = None
    tokens: list[str] | None = Field(default=None, sa_type=JSON)
    role: UserRole = Field(
        default=UserRole.USER,
        sa_type=SAEnum(UserRole, name="user_role"),
        nullable=False,
    )
