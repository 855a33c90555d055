"""Entity package: Book."""

from .entity import Book, BookBorrowCount, BorrowedBook
from .repository import BookRepository
from .table import BookTable

__all__ = ["Book", "BookBorrowCount", "BorrowedBook", "BookRepository", "BookTable"]
