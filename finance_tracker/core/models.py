# finance_tracker/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Optional

DELIMITER = "|"
FIELD_SEPARATOR = f" {DELIMITER} "
_CENTS = Decimal("0.01")


def to_amount(value) -> Decimal:
    """Coerce ``value`` into a finite ``Decimal``.

    Floats go through ``str`` so ``10.1`` becomes ``Decimal("10.1")`` rather
    than its binary expansion.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return amount


def format_amount(amount: Decimal) -> str:
    return f"{amount.quantize(_CENTS, rounding=ROUND_HALF_UP):.2f}"


@dataclass(frozen=True)
class Record:
    date: str
    category: str
    amount: Decimal
    description: str

    def __post_init__(self) -> None:
        for name in ("date", "category", "description"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ValueError(f"Record {name} must be a string: {value!r}")
            if "\n" in value or "\r" in value:
                raise ValueError(f"Record {name} must not contain a line break: {value!r}")
            if value.strip().startswith("["):
                raise ValueError(f"Record {name} must not start with '[': {value!r}")
        for name in ("date", "category"):
            if DELIMITER in getattr(self, name):
                raise ValueError(f"Record {name} must not contain '{DELIMITER}'")
        object.__setattr__(self, "amount", to_amount(self.amount))

    def canonical(self) -> str:
        """Return the line written to the store, used for exact-match deletes."""
        return FIELD_SEPARATOR.join(
            (self.date, self.category, format_amount(self.amount), self.description)
        ).strip()

    def __str__(self) -> str:
        return self.canonical()

    @classmethod
    def parse(cls, line: str) -> Optional["Record"]:
        """Parse a stored line, or return ``None`` if it is not a full record."""
        parts = [p.strip() for p in line.split(DELIMITER)]
        if len(parts) < 4:
            return None
        date, category, amount, *rest = parts
        try:
            return cls(date, category, to_amount(amount), FIELD_SEPARATOR.join(rest).strip())
        except ValueError:
            return None


@dataclass
class User:
    id: int
    name: str
    email: str
    password_hash: str
    budgets: Dict[str, Decimal] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"User(id={self.id}, name='{self.name}', email='{self.email}')"
