"""Mini README: Exact milliunit arithmetic.

Structure:
    * MILLIUNITS_PER_UNIT - number of milliunits in one currency unit.
    * ensure_milliunits - reject anything that is not a plain integer.
    * add / subtract / negate - exact helpers used by the engines.
    * split_evenly - floor/remainder allocation across periods.

Amounts are plain Python integers counting 1/1000 of the budget currency.
Floats are refused outright so rounding error can never enter a balance.
"""

from __future__ import annotations

from typing import List

MILLIUNITS_PER_UNIT = 1000


def ensure_milliunits(value: object) -> int:
    """Return ``value`` unchanged if it is an integer amount."""

    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Amounts must be integer milliunits, got {value!r}")
    return value


def add(left: int, right: int) -> int:
    return ensure_milliunits(left) + ensure_milliunits(right)


def subtract(left: int, right: int) -> int:
    return ensure_milliunits(left) - ensure_milliunits(right)


def negate(amount: int) -> int:
    return -ensure_milliunits(amount)


def split_evenly(amount: int, parts: int) -> List[int]:
    """Split ``amount`` into ``parts`` integers that sum to it exactly.

    Every part receives the floor share; the remainder left by floor
    division is handed out one milliunit at a time to the earliest parts.
    ``split_evenly(100, 3)`` is ``[34, 33, 33]`` and
    ``split_evenly(-100, 3)`` is ``[-33, -33, -34]``.
    """

    ensure_milliunits(amount)
    if isinstance(parts, bool) or not isinstance(parts, int) or parts <= 0:
        raise ValueError(f"Cannot split an amount into {parts!r} parts")
    base, remainder = divmod(amount, parts)
    return [base + 1 if index < remainder else base for index in range(parts)]


def ceil_divide(amount: int, parts: int) -> int:
    """Return the largest share produced by ``split_evenly``."""

    return split_evenly(amount, parts)[0]
