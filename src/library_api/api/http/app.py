"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.library_api.api.http.app_data import ApplicationDependencies
from src.library_api.api.http.errors import (
    ValidationFailed,
    request_validation_handler,
    validation_failed_handler,
)
from src.library_api.api.http.routers import auth, health
from src.library_api.api.http.routers.service import book, transaction, user
from src.library_api.api.utils.app_startup import configure_logging
from src.library_api.core.services import (
    DbManageService,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    PasswordService,
)
from src.library_api.runtime.context import get_config

# Initialize logging
configure_logging()


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


def build_dependencies(database_service: DbSessionService | None = None) -> ApplicationDependencies:
    """Construct the application-wide services.

    Tests pass a ``database_service`` wrapping an in-memory engine.
    """
    return ApplicationDependencies(
        jwt_verify_service=JwtVerificationService(),
        jwt_generation_service=JwtGeneratorService(),
        password_service=PasswordService(),
        database_service=database_service or DbSessionService(),
    )


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    if not config.app.session_signing_secret:
        logger.warning("app.session_signing_secret is not set; login will fail")

    deps = build_dependencies()
    DbManageService(deps.database_service.engine).create_all()
    app.state.app_dependencies = deps


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="Library API",
    lifespan=lifespan,
    docs_url=None if get_config().app.environment == "production" else "/docs",
    redoc_url=None if get_config().app.environment == "production" else "/redoc",
)

app.add_middleware(SecurityHeadersMiddleware)

# --- CORS configuration ---
if get_config().app.environment == "production" and "*" in get_config().app.cors.origins:
    raise RuntimeError(
        "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().app.cors.origins,
    allow_credentials=get_config().app.cors.allow_credentials,
    allow_methods=get_config().app.cors.allow_methods,
    allow_headers=get_config().app.cors.allow_headers,
)

app.add_exception_handler(ValidationFailed, validation_failed_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)


# --- Request logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


# --- Router registration ---
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(book.router)
app.include_router(user.router)
app.include_router(transaction.router)

# expose startup for tests
__all__ = ["app", "build_dependencies", "startup", "shutdown"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # Access logging happens in log_requests
    )
