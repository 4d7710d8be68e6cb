"""
Snippetbox - Form Validator
===========================

What:  Accumulates field-keyed and general validation errors for one form.
How:   Predicate helpers return booleans; `check_field()` records an error
       under a key only when the predicate failed and the key has no error
       yet, so the first failure per field wins.
Who:   Held as the `validator` field of every form model in forms.py.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Pattern

# Anchored e-mail pattern (same shape browsers use for <input type="email">).
EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+\/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*\Z"
)


@dataclass
class Validator:
    """
    Error accumulator for a single form submission.

    Attributes:
        field_errors:     field name → first error message for that field
        non_field_errors: messages not tied to a field (e.g. bad credentials)
    """

    field_errors: Dict[str, str] = field(default_factory=dict)
    non_field_errors: List[str] = field(default_factory=list)

    def valid(self) -> bool:
        return not self.field_errors and not self.non_field_errors

    def add_field_error(self, key: str, message: str) -> None:
        if key not in self.field_errors:
            self.field_errors[key] = message

    def add_non_field_error(self, message: str) -> None:
        self.non_field_errors.append(message)

    def check_field(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_field_error(key, message)


def not_blank(value: str) -> bool:
    """True unless the value is empty or whitespace only."""
    return value.strip() != ""


def max_chars(value: str, n: int) -> bool:
    # len() counts code points, not bytes
    return len(value) <= n


def min_chars(value: str, n: int) -> bool:
    return len(value) >= n


def matches(value: str, rx: Pattern[str]) -> bool:
    return rx.match(value) is not None


def permitted_value(value: Any, *permitted_values: Any) -> bool:
    return value in permitted_values
