"""Request validation chains."""

from . import rule_sets
from .rules import FieldChain, check_password, run_rules

__all__ = ["FieldChain", "check_password", "rule_sets", "run_rules"]
