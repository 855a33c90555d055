"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from src.library_api.runtime.config.config_data import ConfigData
from src.library_api.runtime.context import get_config


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        Pass ``engine`` to reuse an existing engine (tests use an in-memory one).
        """
        if engine is not None:
            self._engine = engine
            return

        logger.info("Setting up database engine and session factory")
        main_config = get_config()
        db_config = main_config.database

        logger.info("Configuring database engine for environment: {}", main_config.app.environment)
        engine_kwargs: dict[str, Any] = {
            "pool_pre_ping": True,
            "echo": False,
            "echo_pool": False,
            "connect_args": self._get_connect_args(main_config),
        }
        if not db_config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                }
            )

        logger.info("Initializing database engine for {}", db_config.url.split("@")[-1])
        self._engine = create_engine(db_config.connection_string, **engine_kwargs)

        if main_config.app.environment == "production":
            logger.info(
                "Database engine initialized",
                extra={
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                },
            )

    @property
    def engine(self) -> Engine:
        return self._engine

    def _get_connect_args(self, config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict[str, Any] = {}

        if "postgresql" in config.database.url:
            connect_args.update(
                {
                    "application_name": f"library_api_{config.app.environment}",
                    "connect_timeout": 30,
                }
            )

        elif config.database.is_sqlite:
            connect_args.update(
                {
                    # Sync handlers run in the threadpool
                    "check_same_thread": False,
                    "timeout": 20,
                }
            )

            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )

        return connect_args

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Commit on success, roll back and re-raise on failure."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(
                "Database health check failed",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
