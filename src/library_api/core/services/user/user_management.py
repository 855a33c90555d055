from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.library_api.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from src.library_api.core.models.library import UserRegister, UserUpdate
from src.library_api.core.services.password_service import PasswordService
from src.library_api.entities.core.user import User, UserRepository, UserRole
from src.library_api.entities.service.transaction import TransactionRepository

EMAIL_TAKEN = "User with this email already exists"
USERNAME_TAKEN = "Username is already taken"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserManagementService:
    def __init__(self, password_service: PasswordService, db_session: Session):
        self._password_service = password_service
        self._user_repo = UserRepository(db_session)
        self._transaction_repo = TransactionRepository(db_session)
        self._db_session = db_session

    def _ensure_unique(self, email: str | None, username: str | None, exclude_id: int | None = None) -> None:
        if email is not None:
            existing = self._user_repo.get_by_email(email)
            if existing and existing.id != exclude_id:
                raise ConflictError(EMAIL_TAKEN)
        if username is not None:
            existing = self._user_repo.get_by_username(username)
            if existing and existing.id != exclude_id:
                raise ConflictError(USERNAME_TAKEN)

    def _commit(self) -> None:
        try:
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            logger.warning(f"User write rejected by database constraint: {e.orig}")
            raise ConflictError("User with this email or username already exists") from e

    def register(self, data: UserRegister, role: UserRole = UserRole.USER) -> User:
        """Create a user with a hashed password.

        Raises:
            ConflictError: If the email or username is already in use
        """
        email = normalize_email(data.email)
        self._ensure_unique(email, data.username)

        user = self._user_repo.create(
            User(
                full_name=data.full_name.strip(),
                email=email,
                password=self._password_service.hash(data.password),
                username=data.username,
                phone=data.phone,
                role=role,
            )
        )
        self._commit()
        logger.info(f"Registered user {user.id} with role {user.role}")
        return user

    def authenticate(self, identifier: str, password: str) -> User | None:
        """Return the user if the identifier and password match, otherwise None."""
        user = self._user_repo.get_by_identifier(identifier.strip())
        if user is None or not self._password_service.verify(password, user.password):
            logger.warning("Failed login attempt")
            return None

        if self._password_service.needs_rehash(user.password):
            user.password = self._password_service.hash(password)
            user = self._user_repo.update(user)
            self._commit()
        return user

    def remember_token(self, user_id: int, jti: str, keep: int) -> None:
        self._user_repo.add_token(user_id, jti, keep)
        self._db_session.commit()

    def forget_token(self, user_id: int, jti: str) -> bool:
        removed = self._user_repo.remove_token(user_id, jti)
        self._db_session.commit()
        return removed

    def update_user(self, user_id: int, changes: UserUpdate, actor: User) -> User:
        """Apply a partial update on behalf of ``actor``.

        Raises:
            NotFoundError: If the user does not exist
            PermissionDeniedError: If a non-admin tries to change a role
            ConflictError: If the new email or username belongs to someone else
        """
        user = self._user_repo.get(user_id)
        if user is None:
            raise NotFoundError("User not found")

        updates = changes.model_dump(exclude_unset=True, exclude_none=True)

        if "role" in updates and updates["role"] != user.role and not actor.is_admin:
            raise PermissionDeniedError("Only an admin can change a user's role")

        if "email" in updates:
            updates["email"] = normalize_email(updates["email"])
        self._ensure_unique(updates.get("email"), updates.get("username"), exclude_id=user_id)

        if "password" in updates:
            updates["password"] = self._password_service.hash(updates["password"])
            # Changing the password signs the user out everywhere
            updates["tokens"] = []

        updated = self._user_repo.update(user.model_copy(update=updates))
        self._commit()
        logger.info(f"User {user_id} updated by user {actor.id}: {sorted(k for k in updates if k != 'password')}")
        return updated

    def delete_user(self, user_id: int) -> None:
        """Delete a user that has no transaction history.

        Raises:
            NotFoundError: If the user does not exist
            ConflictError: If transactions reference the user
        """
        if self._user_repo.get(user_id) is None:
            raise NotFoundError("User not found")
        if self._transaction_repo.exists_for_user(user_id):
            raise ConflictError("User has transaction history and cannot be deleted")

        self._user_repo.delete(user_id)
        self._db_session.commit()
        logger.info(f"Deleted user {user_id}")
