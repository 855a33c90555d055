"""Transaction router: borrowing, returning and lending history."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from src.library_api.api.http.deps import (
    PageParams,
    RowId,
    get_current_user,
    get_db_session,
    get_lending_service,
    get_page_params,
    parse_id_filter,
    validate_body,
)
from src.library_api.api.http.errors import ValidationFailed, http_error
from src.library_api.core.exceptions import LibraryError
from src.library_api.core.models.library import (
    BorrowRequest,
    PageInfo,
    ReturnRequest,
    TransactionListResponse,
    TransactionPageInfo,
)
from src.library_api.core.services import LendingService
from src.library_api.core.validation import rule_sets
from src.library_api.entities.core.user import User
from src.library_api.entities.service.transaction import Transaction, TransactionRepository

router = APIRouter(tags=["transactions"])

STATUSES = ("open", "returned")


@router.post(
    "/transaction/borrow",
    status_code=201,
    response_model=Transaction,
    dependencies=[
        Depends(get_current_user),
        Depends(validate_body(rule_sets.borrow_rules)),
    ],
)
def borrow_book(
    data: BorrowRequest,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
) -> Transaction:
    """Borrow a book for yourself, or for another user when you are an admin."""
    borrower_id = data.user_id or current_user.id
    if borrower_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=403, detail="Only an admin can borrow on behalf of another user"
        )
    try:
        return lending.borrow(data.book_id, borrower_id)
    except LibraryError as e:
        raise http_error(e) from e


@router.post(
    "/transaction/return",
    response_model=Transaction,
    dependencies=[
        Depends(get_current_user),
        Depends(validate_body(rule_sets.return_rules)),
    ],
)
def return_book(
    data: ReturnRequest,
    current_user: User = Depends(get_current_user),
    lending: LendingService = Depends(get_lending_service),
) -> Transaction:
    try:
        return lending.return_book(data.book_id, actor=current_user)
    except LibraryError as e:
        raise http_error(e) from e


@router.get("/transaction/{transaction_id}", response_model=Transaction)
def get_transaction(
    transaction_id: RowId,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
) -> Transaction:
    transaction = TransactionRepository(session).get(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    if transaction.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Not allowed to view this transaction")
    return transaction


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    user_id: str | None = Query(default=None, alias="userId"),
    book_id: str | None = Query(default=None, alias="bookId"),
    status: str | None = Query(default=None),
    paging: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
) -> TransactionListResponse:
    """List transactions newest first. Members only ever see their own."""
    user_filter = parse_id_filter(user_id, "userId", "User id")
    book_filter = parse_id_filter(book_id, "bookId", "Book id")
    status_filter = status.lower() if status else None
    if status_filter is not None and status_filter not in STATUSES:
        raise ValidationFailed({"status": ["Status must be open or returned"]})

    if not current_user.is_admin:
        user_filter = current_user.id

    transactions, total = TransactionRepository(session).list_page(
        paging.offset,
        paging.limit,
        user_id=user_filter,
        book_id=book_filter,
        status=status_filter,
    )
    return TransactionListResponse(
        data=transactions,
        pagination=TransactionPageInfo(
            page=paging.page,
            limit=paging.limit,
            total_transactions=total,
            total_pages=PageInfo.count_pages(total, paging.limit),
        ),
    )
