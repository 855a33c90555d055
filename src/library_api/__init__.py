"""Library management REST API: books, members and borrow/return transactions."""

__version__ = "0.1.0"
