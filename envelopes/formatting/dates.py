"""Mini README: Date display formats for budget reports.

``DateFormat`` wraps one of a handful of user-facing patterns and renders
``datetime.date`` values with it. Parsing user text is left to the callers
that collect input.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..months import MonthKey

_PATTERNS = {
    "YYYY-MM-DD": "%Y-%m-%d",
    "YYYY/MM/DD": "%Y/%m/%d",
    "DD/MM/YYYY": "%d/%m/%Y",
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD.MM.YYYY": "%d.%m.%Y",
}


@dataclass(frozen=True, slots=True)
class DateFormat:
    pattern: str = "YYYY-MM-DD"

    def __post_init__(self) -> None:
        if self.pattern not in _PATTERNS:
            raise ValueError(
                f"Unsupported date format {self.pattern!r}; choose one of {sorted(_PATTERNS)}"
            )

    def format(self, value: date) -> str:
        return value.strftime(_PATTERNS[self.pattern])

    def format_month(self, value: MonthKey) -> str:
        """Render a month in the year/month order of the pattern."""

        if self.pattern.startswith("YYYY"):
            return f"{value.year:04d}{self.pattern[4]}{value.month:02d}"
        return f"{value.month:02d}{self.pattern[5]}{value.year:04d}"
