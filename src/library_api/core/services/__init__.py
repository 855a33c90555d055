"""Core services exports."""

from .catalog_service import CatalogService
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService
from .jwt.jwt_gen import IssuedToken, JwtGeneratorService
from .jwt.jwt_verify import JwtVerificationService
from .lending_service import LendingService
from .password_service import PasswordService
from .user.user_management import UserManagementService

__all__ = [
    # JWT Services
    "IssuedToken",
    "JwtGeneratorService",
    "JwtVerificationService",
    # Database Services
    "DbManageService",
    "DbSessionService",
    # Domain Services
    "CatalogService",
    "LendingService",
    "PasswordService",
    "UserManagementService",
]
