"""Mini README: Calendar month keys used to address budget months.

Structure:
    * MonthKey - immutable, ordered (year, month) pair with navigation helpers.

Months in a budget form a gapless sequence, so most callers only need
``next``/``previous`` and ``months_until``. The key never parses locale
formatted text; ``parse`` accepts the ISO ``YYYY-MM`` form used in snapshots.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, order=True, slots=True)
class MonthKey:
    """A calendar month within a budget."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"Year out of range: {self.year}")

    @classmethod
    def from_date(cls, value: date) -> "MonthKey":
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, value: str) -> "MonthKey":
        """Parse an ISO ``YYYY-MM`` string."""

        try:
            year_text, month_text = value.strip().split("-")
            return cls(int(year_text), int(month_text))
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported month key: {value!r}") from error

    def shift(self, months: int) -> "MonthKey":
        index = self.year * 12 + (self.month - 1) + months
        return MonthKey(index // 12, index % 12 + 1)

    def next(self) -> "MonthKey":
        return self.shift(1)

    def previous(self) -> "MonthKey":
        return self.shift(-1)

    def months_until(self, other: "MonthKey") -> int:
        """Signed number of months from this key to ``other``."""

        return (other.year - self.year) * 12 + (other.month - self.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __str__(self) -> str:
        return self.isoformat()
