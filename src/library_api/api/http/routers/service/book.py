"""Book API router: catalogue CRUD, listing, history and popularity."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from src.library_api.api.http.deps import (
    PageParams,
    RowId,
    get_catalog_service,
    get_current_user,
    get_db_session,
    get_page_params,
    get_search,
    validate_body,
)
from src.library_api.api.http.errors import http_error
from src.library_api.core.exceptions import LibraryError
from src.library_api.core.models.library import (
    BookCreate,
    BookListResponse,
    BookPageInfo,
    BookUpdate,
    MessageResponse,
    PageInfo,
)
from src.library_api.core.services import CatalogService
from src.library_api.core.validation import rule_sets
from src.library_api.entities.core.user import UserRepository
from src.library_api.entities.service.book import (
    Book,
    BookBorrowCount,
    BookRepository,
    BorrowedBook,
)
from src.library_api.runtime.context import get_config

router = APIRouter(tags=["books"])

DEFAULT_POPULAR_LIMIT = 10


@router.post(
    "/book/add",
    status_code=201,
    response_model=Book,
    dependencies=[
        Depends(get_current_user),
        Depends(validate_body(rule_sets.add_book_rules)),
    ],
)
def add_book(
    data: BookCreate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> Book:
    """Add a book to the catalogue; the ISBN, when given, must be unused."""
    try:
        return catalog.add_book(data)
    except LibraryError as e:
        raise http_error(e) from e


@router.put(
    "/book/update/{book_id}",
    response_model=Book,
    dependencies=[
        Depends(get_current_user),
        Depends(validate_body(rule_sets.update_book_rules)),
    ],
)
def update_book(
    book_id: RowId,
    changes: BookUpdate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> Book:
    """Merge the given fields into an existing book."""
    try:
        return catalog.update_book(book_id, changes)
    except LibraryError as e:
        raise http_error(e) from e


@router.delete(
    "/book/delete/{book_id}",
    response_model=MessageResponse,
    dependencies=[Depends(get_current_user)],
)
def delete_book(
    book_id: RowId,
    catalog: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    try:
        catalog.delete_book(book_id)
    except LibraryError as e:
        raise http_error(e) from e
    return MessageResponse(message="Book deleted successfully")


@router.get(
    "/book/borrowed/{user_id}",
    response_model=list[BorrowedBook],
    dependencies=[Depends(get_current_user)],
)
def borrowed_books(
    user_id: RowId,
    session: Session = Depends(get_db_session),
) -> list[BorrowedBook]:
    """Borrowing history of a user, newest first."""
    if UserRepository(session).get(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return BookRepository(session).borrowed_by(user_id)


@router.get("/book/{book_id}", response_model=Book)
def get_book(
    book_id: RowId,
    session: Session = Depends(get_db_session),
) -> Book:
    """Get a book by ID."""
    book = BookRepository(session).get(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return book


@router.get("/books", response_model=BookListResponse)
def list_books(
    paging: PageParams = Depends(get_page_params),
    search: str | None = Depends(get_search),
    session: Session = Depends(get_db_session),
) -> BookListResponse:
    """List books in id order, optionally filtered by title or author."""
    books, total = BookRepository(session).list_page(paging.offset, paging.limit, search)
    return BookListResponse(
        data=books,
        pagination=BookPageInfo(
            page=paging.page,
            limit=paging.limit,
            total_books=total,
            total_pages=PageInfo.count_pages(total, paging.limit),
        ),
    )


@router.get("/books/frequently-borrowed", response_model=list[BookBorrowCount])
def frequently_borrowed(
    limit: str | None = Query(default=None),
    session: Session = Depends(get_db_session),
) -> list[BookBorrowCount]:
    """Most borrowed books, by number of transactions."""
    try:
        parsed = int(limit) if limit is not None else DEFAULT_POPULAR_LIMIT
    except ValueError:
        parsed = DEFAULT_POPULAR_LIMIT
    if parsed <= 0:
        parsed = DEFAULT_POPULAR_LIMIT
    parsed = min(parsed, get_config().pagination.max_limit)
    return BookRepository(session).most_borrowed(parsed)
