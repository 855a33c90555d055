"""FastAPI dependency implementations."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Path, Query, Request
from loguru import logger
from sqlmodel import Session

from src.library_api.api.http.app_data import ApplicationDependencies
from src.library_api.api.http.errors import ValidationFailed
from src.library_api.core.services import (
    CatalogService,
    JwtGeneratorService,
    JwtVerificationService,
    LendingService,
    PasswordService,
    UserManagementService,
)
from src.library_api.core.validation import FieldChain, run_rules
from src.library_api.core.validation.rules import MAX_ID
from src.library_api.entities.core.user import User, UserRepository
from src.library_api.runtime.context import get_config

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}

# Path ids beyond the database integer range are rejected as validation errors
RowId = Annotated[int, Path(le=MAX_ID)]


def _app_deps(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Open a session for the request and close it when the response is sent."""
    session = _app_deps(request).database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    return _app_deps(request).jwt_verify_service


def get_jwt_generation_service(request: Request) -> JwtGeneratorService:
    """Get the JWT generation service instance."""
    return _app_deps(request).jwt_generation_service


def get_password_service(request: Request) -> PasswordService:
    """Get the password hashing service instance."""
    return _app_deps(request).password_service


def get_user_management_service(
    password_service: PasswordService = Depends(get_password_service),
    db_session: Session = Depends(get_db_session),
) -> UserManagementService:
    return UserManagementService(password_service, db_session)


def get_catalog_service(db_session: Session = Depends(get_db_session)) -> CatalogService:
    return CatalogService(db_session)


def get_lending_service(db_session: Session = Depends(get_db_session)) -> LendingService:
    return LendingService(db_session)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers=_BEARER_CHALLENGE)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db_session),
    jwt_verify: JwtVerificationService = Depends(get_jwt_verify_service),
) -> User:
    """Authenticate the request using a Bearer token issued at login.

    The token must still be among the user's stored session tokens, so a
    token stops working as soon as the user logs out with it.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise _unauthorized("Missing Bearer token")

    token = auth_header.split(" ", 1)[1].strip()
    try:
        claims = jwt_verify.verify_jwt(token)
    except HTTPException as exc:
        if exc.status_code == 401:
            raise _unauthorized(str(exc.detail)) from exc
        raise

    user_id = claims.user_id
    if user_id is None:
        raise _unauthorized("Invalid token subject")

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _unauthorized("User not found")

    if not user.has_token(claims.jti):
        logger.info(f"Rejected revoked token for user {user_id}")
        raise _unauthorized("Token has been revoked")

    request.state.user = user
    request.state.claims = claims
    # Roles come from the database so a role change applies immediately
    request.state.roles = {user.role.value}
    return user


def require_role(required_role: str):
    """Create a dependency that requires a specific role for the authenticated user."""

    def dep(request: Request, _user: User = Depends(get_current_user)) -> None:
        roles: set[str] = getattr(request.state, "roles", set())
        if required_role not in roles:
            raise HTTPException(
                status_code=403, detail=f"Missing required role: {required_role}"
            )

    return dep


def require_self_or_admin(user_id: int, current_user: User) -> None:
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Not allowed to access this user")


def validate_body(rules: Callable[[], list[FieldChain]]):
    """Create a guard that runs validation chains against the JSON body.

    Any failure stops the request with 400 and the collected messages.
    """
    chains = rules()

    async def dep(request: Request) -> None:
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = None

        errors = run_rules(payload, chains)
        if errors:
            logger.debug(f"Request body rejected: {errors}")
            raise ValidationFailed(errors)

    return dep


# ---------------------------------------------------------------------------
# Query parsing
# ---------------------------------------------------------------------------


def _positive_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if 0 < value <= MAX_ID else None


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_page_params(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
) -> PageParams:
    """Parse ``page``/``limit``; malformed, non-positive or out-of-range values fall back to defaults."""
    cfg = get_config().pagination
    parsed_limit = min(_positive_int(limit) or cfg.default_limit, cfg.max_limit)
    parsed_page = _positive_int(page) or cfg.default_page
    # The row offset has to fit the database integer type as well
    if (parsed_page - 1) * parsed_limit > MAX_ID:
        parsed_page = cfg.default_page
    return PageParams(page=parsed_page, limit=parsed_limit)


def get_search(search: str | None = Query(default=None)) -> str | None:
    if search is None or not search.strip():
        return None
    return search.strip()


def parse_id_filter(raw: str | None, field: str, label: str) -> int | None:
    """Parse an optional id query filter; a malformed value is a validation failure."""
    if raw is None or raw == "":
        return None
    value = _positive_int(raw)
    if value is None:
        raise ValidationFailed({field: [f"{label} must be a positive integer"]})
    return value
