"""Token and wire models."""

from .base import CamelModel
from .token import TokenClaims

__all__ = ["CamelModel", "TokenClaims"]
