"""Fixed-point currency values parsed from spreadsheet-formatted text.

Accepted input looks like what a spreadsheet export produces for money cells:
``"$1,234.56"``, ``"$(12.50)"`` (accounting-style negative) or the bare
placeholder ``"$ -"`` for an empty amount. Parsing is tolerant rather than
strict:

- the text is split on the first ``.``;
- digits in the whole part are accumulated right to left, and any ``(`` marks
  the value negative; every other character (currency symbols, thousands
  separators, the closing parenthesis, spaces) is ignored;
- the fractional part is scanned the same way and kept non-negative; it is
  expected to hold exactly two digits, and anything longer wraps modulo 100.

Values never pass through ``float``; :meth:`Currency.to_decimal` yields the
exact ``Decimal`` stored in the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .errors import CurrencyParseError

EMPTY_PLACEHOLDER = "$-"


def _scan_digits(chars: str) -> int:
    value = 0
    magnitude = 1
    for c in reversed(chars):
        if "0" <= c <= "9":
            value += int(c) * magnitude
            magnitude *= 10
    return value


@dataclass(frozen=True, slots=True)
class Currency:
    """A signed whole part plus a two-digit fraction (0-99).

    The sign lives on ``whole`` only, so ``Currency(-12, 50)`` is -12.50.
    """

    whole: int = 0
    fraction: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.fraction <= 99:
            raise ValueError(f"Currency.fraction must be within [0, 99], got {self.fraction}")

    @classmethod
    def zero(cls) -> Currency:
        return cls(0, 0)

    @classmethod
    def parse(cls, text: str) -> Currency:
        """Parse ``text``; raises :class:`CurrencyParseError` when it has no
        decimal point and is not the empty placeholder."""

        whole_chars, sep, fraction_chars = text.partition(".")
        if not sep:
            if text.replace(" ", "") == EMPTY_PLACEHOLDER:
                return cls.zero()
            raise CurrencyParseError(text)

        whole = _scan_digits(whole_chars)
        if "(" in whole_chars:
            whole = -whole
        return cls(whole, _scan_digits(fraction_chars) % 100)

    def to_decimal(self) -> Decimal:
        return Decimal(str(self))

    def __str__(self) -> str:
        return f"{self.whole}.{self.fraction:02}"


__all__ = ["Currency", "EMPTY_PLACEHOLDER"]
