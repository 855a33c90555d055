"""Schema management for the library tables."""

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import SQLModel


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables."""
        # Register every table on the shared metadata
        from src.library_api.entities import BookTable, TransactionTable, UserTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        from src.library_api.entities import BookTable, TransactionTable, UserTable  # noqa: F401

        SQLModel.metadata.drop_all(self._engine)
        logger.warning("All library tables dropped.")
