"""Translation of domain and validation errors into HTTP responses."""

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from src.library_api.core.exceptions import (
    ConflictError,
    LibraryError,
    NotFoundError,
    PermissionDeniedError,
)

_STATUS_BY_ERROR: list[tuple[type[LibraryError], int]] = [
    (NotFoundError, 404),
    (PermissionDeniedError, 403),
    (ConflictError, 400),
]


class ValidationFailed(Exception):
    """Raised by the body and query guards with a ``{field: [messages]}`` map."""

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__("Validation failed")
        self.errors = errors


def http_error(exc: LibraryError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=400, detail=exc.message)


def _validation_response(errors: dict[str, list[str]]) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "errors": errors},
    )


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return _validation_response(exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report FastAPI's own parameter and body errors in the same shape as the rule chains."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "body"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return _validation_response(errors)
