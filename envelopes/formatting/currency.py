"""Mini README: Currency display formats for milliunit amounts.

Structure:
    * CurrencyISOCode - currencies with built-in presets.
    * Separator - decimal/group separator choices.
    * CurrencyFormat - display settings with ``for_code`` presets.
    * format_milliunits - render an integer amount for display.

Rounding to the displayed number of decimal digits is half away from zero
and done in integers, so ``-1005`` milliunits shows as ``-$1.01``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from ..money import ensure_milliunits


class CurrencyISOCode(str, Enum):
    EUR = "EUR"
    BRL = "BRL"
    USD = "USD"

    @classmethod
    def from_str(cls, value: str) -> "CurrencyISOCode":
        """Coerce arbitrary casing into a supported ISO code."""

        try:
            return cls(value.strip().upper())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported currency code: {value}") from error


class Separator(str, Enum):
    COMMA = ","
    PERIOD = "."


@dataclass(frozen=True, slots=True)
class CurrencyFormat:
    """How amounts in the budget currency are displayed."""

    iso_code: CurrencyISOCode
    decimal_digits: int
    decimal_separator: Separator
    symbol_first: bool
    group_separator: Separator
    currency_symbol: str
    display_symbol: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.decimal_digits <= 3:
            raise ValueError("Currency formats support between 0 and 3 decimal digits")
        if self.decimal_separator == self.group_separator:
            raise ValueError("Decimal and group separators must differ")

    @classmethod
    def for_code(cls, iso_code: CurrencyISOCode) -> "CurrencyFormat":
        return _PRESETS[CurrencyISOCode(iso_code)]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "iso_code": self.iso_code.value,
            "decimal_digits": self.decimal_digits,
            "decimal_separator": self.decimal_separator.value,
            "symbol_first": self.symbol_first,
            "group_separator": self.group_separator.value,
            "currency_symbol": self.currency_symbol,
            "display_symbol": self.display_symbol,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CurrencyFormat":
        return cls(
            iso_code=CurrencyISOCode(payload["iso_code"]),
            decimal_digits=int(payload["decimal_digits"]),
            decimal_separator=Separator(payload["decimal_separator"]),
            symbol_first=bool(payload["symbol_first"]),
            group_separator=Separator(payload["group_separator"]),
            currency_symbol=str(payload["currency_symbol"]),
            display_symbol=bool(payload.get("display_symbol", True)),
        )


_PRESETS = {
    CurrencyISOCode.USD: CurrencyFormat(
        iso_code=CurrencyISOCode.USD,
        decimal_digits=2,
        decimal_separator=Separator.PERIOD,
        symbol_first=True,
        group_separator=Separator.COMMA,
        currency_symbol="$",
    ),
    CurrencyISOCode.EUR: CurrencyFormat(
        iso_code=CurrencyISOCode.EUR,
        decimal_digits=2,
        decimal_separator=Separator.COMMA,
        symbol_first=False,
        group_separator=Separator.PERIOD,
        currency_symbol="€",
    ),
    CurrencyISOCode.BRL: CurrencyFormat(
        iso_code=CurrencyISOCode.BRL,
        decimal_digits=2,
        decimal_separator=Separator.COMMA,
        symbol_first=True,
        group_separator=Separator.PERIOD,
        currency_symbol="R$",
    ),
}


def format_milliunits(amount: int, currency_format: CurrencyFormat) -> str:
    """Render ``amount`` milliunits using ``currency_format``."""

    ensure_milliunits(amount)
    digits = currency_format.decimal_digits
    scale = 10 ** (3 - digits)
    quotient, remainder = divmod(abs(amount), scale)
    if remainder * 2 >= scale:
        quotient += 1
    units, fraction = divmod(quotient, 10**digits)

    number = f"{units:,}".replace(",", currency_format.group_separator.value)
    if digits:
        number += currency_format.decimal_separator.value + str(fraction).zfill(digits)

    if currency_format.display_symbol:
        if currency_format.symbol_first:
            number = f"{currency_format.currency_symbol}{number}"
        else:
            number = f"{number} {currency_format.currency_symbol}"
    sign = "-" if amount < 0 and quotient else ""
    return f"{sign}{number}"
