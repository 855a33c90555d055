"""Registration, login and session endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.library_api.api.http.deps import (
    get_current_user,
    get_jwt_generation_service,
    get_user_management_service,
    validate_body,
)
from src.library_api.api.http.errors import http_error
from src.library_api.core.exceptions import LibraryError
from src.library_api.core.models.library import (
    LoginRequest,
    MessageResponse,
    TokenResponse,
    UserPublic,
    UserRegister,
)
from src.library_api.core.services import JwtGeneratorService, UserManagementService
from src.library_api.core.validation import rule_sets
from src.library_api.entities.core.user import User
from src.library_api.runtime.context import get_config

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=UserPublic,
    dependencies=[Depends(validate_body(rule_sets.registration_rules))],
)
def register(
    data: UserRegister,
    users: UserManagementService = Depends(get_user_management_service),
) -> UserPublic:
    """Create a new account with the USER role."""
    try:
        user = users.register(data)
    except LibraryError as e:
        raise http_error(e) from e
    return UserPublic.from_user(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    dependencies=[Depends(validate_body(rule_sets.login_rules))],
)
def login(
    data: LoginRequest,
    users: UserManagementService = Depends(get_user_management_service),
    jwt_gen: JwtGeneratorService = Depends(get_jwt_generation_service),
) -> TokenResponse:
    """Exchange an email or username and password for a bearer token."""
    user = users.authenticate(data.identifier, data.password)
    if user is None or user.id is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    issued = jwt_gen.generate_access_token(user_id=user.id, roles=[user.role.value])
    users.remember_token(user.id, issued.jti, keep=get_config().jwt.max_stored_tokens)

    return TokenResponse(
        access_token=issued.token,
        expires_in=issued.expires_in,
        user=UserPublic.from_user(user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    user: User = Depends(get_current_user),
    users: UserManagementService = Depends(get_user_management_service),
) -> MessageResponse:
    """Revoke the token this request was made with."""
    claims = request.state.claims
    if user.id is not None and claims.jti:
        users.forget_token(user.id, claims.jti)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserPublic)
def me(user: User = Depends(get_current_user)) -> UserPublic:
    return UserPublic.from_user(user)
