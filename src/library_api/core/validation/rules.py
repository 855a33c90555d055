"""Declarative request-body validation.

A rule is a pure predicate returning ``(ok, message)``. A :class:`FieldChain`
binds an ordered list of rules to one body field. :func:`run_rules` runs every
chain against a payload and collects the failing messages per field.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic.alias_generators import to_snake

RuleResult = tuple[bool, str]
Rule = Callable[[Any], RuleResult]

_MISSING = object()

_SPECIAL_RE = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

# Largest value a 64-bit integer primary key can hold
MAX_ID = 2**63 - 1


@dataclass(frozen=True)
class FieldChain:
    """Ordered rules for a single body field.

    ``name`` is the camelCase key clients send; the snake_case spelling is
    accepted as well. A missing or null value fails with ``"<label> is
    required"`` unless the chain is optional, in which case it is skipped.
    """

    name: str
    rules: tuple[Rule, ...] = ()
    label: str | None = None
    optional: bool = False
    snake_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "snake_name", to_snake(self.name))

    @property
    def display_label(self) -> str:
        return self.label or self.name

    def lookup(self, payload: Mapping[str, Any]) -> Any:
        if self.name in payload:
            return payload[self.name]
        return payload.get(self.snake_name, _MISSING)

    def check(self, payload: Mapping[str, Any]) -> list[str]:
        value = self.lookup(payload)
        if value is _MISSING or value is None:
            if self.optional:
                return []
            return [f"{self.display_label} is required"]

        messages = []
        for rule in self.rules:
            ok, message = rule(value)
            if not ok:
                messages.append(message)
        return messages


def chain(name: str, *rules: Rule, label: str | None = None, optional: bool = False) -> FieldChain:
    return FieldChain(name=name, rules=tuple(rules), label=label, optional=optional)


def run_rules(payload: Any, chains: Iterable[FieldChain]) -> dict[str, list[str]]:
    """Run every chain and return ``{field: [messages]}`` for the failures."""
    if not isinstance(payload, Mapping):
        return {"body": ["Request body must be a JSON object"]}

    errors: dict[str, list[str]] = {}
    for field_chain in chains:
        messages = field_chain.check(payload)
        if messages:
            errors.setdefault(field_chain.name, []).extend(messages)
    return errors


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def not_empty(message: str) -> Rule:
    def rule(value: Any) -> RuleResult:
        return isinstance(value, str) and value.strip() != "", message

    return rule


def is_email(message: str = "Invalid email format") -> Rule:
    def rule(value: Any) -> RuleResult:
        if not isinstance(value, str):
            return False, message
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return False, message
        return True, message

    return rule


def min_length(length: int, message: str) -> Rule:
    def rule(value: Any) -> RuleResult:
        return isinstance(value, str) and len(value) >= length, message

    return rule


def matches(pattern: str | re.Pattern[str], message: str) -> Rule:
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern

    def rule(value: Any) -> RuleResult:
        return isinstance(value, str) and compiled.search(value) is not None, message

    return rule


def is_int(message: str, min_value: int | None = None, max_value: int | Callable[[], int] | None = None) -> Rule:
    """Integer (bools rejected) within an inclusive range; max may be computed per call."""

    def rule(value: Any) -> RuleResult:
        if isinstance(value, bool) or not isinstance(value, int):
            return False, message
        if min_value is not None and value < min_value:
            return False, message
        upper = max_value() if callable(max_value) else max_value
        if upper is not None and value > upper:
            return False, message
        return True, message

    return rule


def is_positive_int(message: str) -> Rule:
    return is_int(message, min_value=1, max_value=MAX_ID)


def one_of(choices: Iterable[str], message: str) -> Rule:
    allowed = frozenset(choices)

    def rule(value: Any) -> RuleResult:
        return isinstance(value, str) and value in allowed, message

    return rule


def normalize_isbn(value: str) -> str:
    return re.sub(r"[\s-]", "", value).upper()


def is_isbn(message: str = "ISBN must contain 10 or 13 digits") -> Rule:
    def rule(value: Any) -> RuleResult:
        if not isinstance(value, str):
            return False, message
        digits = normalize_isbn(value)
        ok = bool(re.fullmatch(r"\d{13}", digits) or re.fullmatch(r"\d{9}[\dX]", digits))
        return ok, message

    return rule


def current_year() -> int:
    return datetime.now(UTC).year


def password_rules() -> tuple[Rule, ...]:
    """Password composition: length, lowercase, uppercase, digit, special."""
    return (
        min_length(8, "Password should be at least 8 characters long"),
        matches(r"[a-z]", "Password should contain at least one lowercase letter"),
        matches(r"[A-Z]", "Password should contain at least one uppercase letter"),
        matches(r"[0-9]", "Password should contain at least one digit"),
        matches(_SPECIAL_RE, "Password should contain at least one special character"),
    )


def check_password(password: str) -> list[str]:
    """Return the composition messages a password fails, empty when it is valid."""
    return chain("password", *password_rules(), label="Password").check({"password": password})
