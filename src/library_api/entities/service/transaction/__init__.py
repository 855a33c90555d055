"""Entity package: Transaction."""

from .entity import Transaction
from .repository import TransactionRepository
from .table import TransactionTable

__all__ = ["Transaction", "TransactionRepository", "TransactionTable"]
