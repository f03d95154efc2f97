"""Input checks shared by the CLI and the user repository.

Each check returns a :class:`ValidationResult` instead of raising so callers
can report the reason and ask again.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from finance_tracker.core.models import to_amount

_EMAIL_RX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MONTH_RX = re.compile(r"^\d{4}-\d{2}$")


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


VALID = ValidationResult(True)


def _invalid(reason: str) -> ValidationResult:
    return ValidationResult(False, reason)


def validate_name(name: str) -> ValidationResult:
    if not name or not name.strip():
        return _invalid("Name cannot be empty.")
    return VALID


def validate_email(email: str) -> ValidationResult:
    if not email or not email.strip():
        return _invalid("Email cannot be empty.")
    if not _EMAIL_RX.match(email.strip()):
        return _invalid(f"'{email}' is not a valid email address.")
    return VALID


def validate_password(password: str) -> ValidationResult:
    if not password:
        return _invalid("Password cannot be empty.")
    return VALID


def validate_date(value: str) -> ValidationResult:
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        return _invalid(f"'{value}' is not a date in yyyy-MM-dd format.")
    return VALID


def validate_month(value: str) -> ValidationResult:
    if not value or not _MONTH_RX.match(value):
        return _invalid(f"'{value}' is not a month in yyyy-MM format.")
    if not 1 <= int(value[5:]) <= 12:
        return _invalid(f"'{value}' has no month {value[5:]}.")
    return VALID


def validate_amount(value) -> ValidationResult:
    try:
        to_amount(value)
    except ValueError as exc:
        return _invalid(str(exc))
    return VALID
