"""User administration router."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from src.library_api.api.http.deps import (
    PageParams,
    RowId,
    get_current_user,
    get_db_session,
    get_page_params,
    get_search,
    get_user_management_service,
    require_role,
    require_self_or_admin,
    validate_body,
)
from src.library_api.api.http.errors import http_error
from src.library_api.core.exceptions import LibraryError
from src.library_api.core.models.library import (
    MessageResponse,
    PageInfo,
    UserListResponse,
    UserPageInfo,
    UserPublic,
    UserUpdate,
)
from src.library_api.core.services import UserManagementService
from src.library_api.core.validation import rule_sets
from src.library_api.entities.core.user import User, UserRepository

router = APIRouter(tags=["users"])


@router.get(
    "/users",
    response_model=UserListResponse,
    dependencies=[Depends(require_role("ADMIN"))],
)
def list_users(
    paging: PageParams = Depends(get_page_params),
    search: str | None = Depends(get_search),
    session: Session = Depends(get_db_session),
) -> UserListResponse:
    users, total = UserRepository(session).list_page(paging.offset, paging.limit, search)
    return UserListResponse(
        data=[UserPublic.from_user(user) for user in users],
        pagination=UserPageInfo(
            page=paging.page,
            limit=paging.limit,
            total_users=total,
            total_pages=PageInfo.count_pages(total, paging.limit),
        ),
    )


@router.get("/user/{user_id}", response_model=UserPublic)
def get_user(
    user_id: RowId,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
) -> UserPublic:
    """Get a user; members may only read themselves."""
    require_self_or_admin(user_id, current_user)
    user = UserRepository(session).get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserPublic.from_user(user)


@router.put(
    "/user/update/{user_id}",
    response_model=UserPublic,
    dependencies=[
        Depends(get_current_user),
        Depends(validate_body(rule_sets.update_user_rules)),
    ],
)
def update_user(
    user_id: RowId,
    changes: UserUpdate,
    current_user: User = Depends(get_current_user),
    users: UserManagementService = Depends(get_user_management_service),
) -> UserPublic:
    """Partially update a user. Only admins may change roles or edit other users."""
    require_self_or_admin(user_id, current_user)
    try:
        updated = users.update_user(user_id, changes, actor=current_user)
    except LibraryError as e:
        raise http_error(e) from e
    return UserPublic.from_user(updated)


@router.delete(
    "/user/delete/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_role("ADMIN"))],
)
def delete_user(
    user_id: RowId,
    users: UserManagementService = Depends(get_user_management_service),
) -> MessageResponse:
    try:
        users.delete_user(user_id)
    except LibraryError as e:
        raise http_error(e) from e
    return MessageResponse(message="User deleted successfully")
