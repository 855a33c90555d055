"""Password hashing."""

from passlib.context import CryptContext

from src.library_api.runtime.context import get_config


class PasswordService:
    """Hashes and verifies user passwords with passlib.

    The first configured scheme hashes new passwords; hashes made with any
    later scheme still verify and are reported by :meth:`needs_rehash`.
    """

    def __init__(self, schemes: list[str] | None = None):
        schemes = schemes or get_config().security.password_schemes
        self._context = CryptContext(schemes=schemes, deprecated="auto")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            # Unrecognized hash format
            return False

    def needs_rehash(self, hashed: str) -> bool:
        return self._context.needs_update(hashed)
