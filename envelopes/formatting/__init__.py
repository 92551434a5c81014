"""Mini README: Budget display settings.

Structure:
    * BudgetSettings - date and currency formats chosen for a budget.
    * CurrencyFormat / format_milliunits - currency rendering (``currency``).
    * DateFormat - date rendering (``dates``).

The ledger engines never consult these; they exist so presentation and
persistence collaborators can render the plain integers the core returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .currency import CurrencyFormat, CurrencyISOCode, Separator, format_milliunits
from .dates import DateFormat


@dataclass(frozen=True, slots=True)
class BudgetSettings:
    """Customisable display options of a budget."""

    date_format: DateFormat = field(default_factory=DateFormat)
    currency_format: CurrencyFormat = field(
        default_factory=lambda: CurrencyFormat.for_code(CurrencyISOCode.USD)
    )

    @classmethod
    def for_locale(cls, currency_code: str, date_pattern: str) -> "BudgetSettings":
        return cls(
            date_format=DateFormat(date_pattern),
            currency_format=CurrencyFormat.for_code(CurrencyISOCode.from_str(currency_code)),
        )

    def format_amount(self, amount: int) -> str:
        return format_milliunits(amount, self.currency_format)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date_format": self.date_format.pattern,
            "currency_format": self.currency_format.as_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BudgetSettings":
        return cls(
            date_format=DateFormat(payload["date_format"]),
            currency_format=CurrencyFormat.from_dict(payload["currency_format"]),
        )


__all__ = [
    "BudgetSettings",
    "CurrencyFormat",
    "CurrencyISOCode",
    "DateFormat",
    "Separator",
    "format_milliunits",
]
