"""Entities grouped by business concept.

Each entity package holds:
- entity.py: domain model
- table.py: database persistence model
- repository.py: data access layer
"""

from .core.user import User, UserRepository, UserRole, UserTable
from .service.book import Book, BookBorrowCount, BookRepository, BookTable, BorrowedBook
from .service.transaction import Transaction, TransactionRepository, TransactionTable

__all__ = [
    "User",
    "UserRole",
    "UserTable",
    "UserRepository",
    "Book",
    "BookBorrowCount",
    "BorrowedBook",
    "BookTable",
    "BookRepository",
    "Transaction",
    "TransactionTable",
    "TransactionRepository",
]
