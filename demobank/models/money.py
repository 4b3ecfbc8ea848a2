"""
Money Model

Amounts arrive from fixtures as display strings ("1 245 kr", "18 200 SEK").
We parse them ONCE at the decode boundary into integer minor units and only
format back to text for display and serialization.

DESIGN DECISION: Money serializes to its display string. Override files stay
human-readable and an amount saved as "999 kr" reads back as "999 kr".
"""

import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator


class Currency(str, Enum):
    """Supported currencies."""
    SEK = "SEK"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    Currency.SEK: "kr",
}

# Unit markers we strip from the end of display strings
_UNIT_MARKERS = {
    "kr": Currency.SEK,
    "sek": Currency.SEK,
    ":-": Currency.SEK,
}

# Whitespace used as a thousands separator (space, nbsp, narrow nbsp)
_GROUPING_SPACES = re.compile(r"\s+")

# Whole part may carry grouping dots/commas; a trailing separator followed by
# one or two digits is the decimal part.
_NUMBER_PATTERN = re.compile(r"(\d[\d.,]*?)(?:[.,](\d{1,2}))?")


class Money(BaseModel):
    """
    An amount of money in minor units (öre for SEK).

    Accepts a display string, a plain number (major units) or a mapping
    with ``minor_units`` / ``currency`` when validating.
    """
    model_config = ConfigDict(frozen=True)

    minor_units: int = Field(
        ...,
        description="Amount in minor units (1 kr = 100)"
    )
    currency: Currency = Field(
        default=Currency.SEK,
        description="ISO currency code"
    )

    @model_validator(mode="before")
    @classmethod
    def parse_input(cls, data: Any) -> Any:
        """Turn display strings and plain numbers into field mappings."""
        if isinstance(data, str):
            return parse_amount(data)
        if isinstance(data, bool):
            raise ValueError("Boolean is not an amount")
        if isinstance(data, (int, float, Decimal)):
            return {"minor_units": _to_minor_units(str(data))}
        return data

    @model_serializer
    def serialize(self) -> str:
        return self.format()

    # -------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------

    def format(self, code: bool = False) -> str:
        """
        Format for display.

        "1 245 kr" by default, "1 245 SEK" with ``code=True``.
        Öre are only shown when non-zero ("1 245,50 kr").
        """
        whole, fraction = divmod(abs(self.minor_units), 100)
        text = f"{whole:,}".replace(",", " ")
        if fraction:
            text += f",{fraction:02d}"
        sign = "-" if self.minor_units < 0 else ""
        unit = self.currency.value if code else self.currency.symbol
        return f"{sign}{text} {unit}"

    def __str__(self) -> str:
        return self.format()

    @property
    def major(self) -> Decimal:
        """Amount in major units (kronor)."""
        return Decimal(self.minor_units) / 100

    # -------------------------------------------------------------------
    # Arithmetic (same currency only)
    # -------------------------------------------------------------------

    def _check_currency(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot combine Money with {type(other).__name__}")
        if other.currency != self.currency:
            raise ValueError(
                f"Currency mismatch: {self.currency.value} vs {other.currency.value}"
            )

    def __add__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(minor_units=self.minor_units + other.minor_units, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(minor_units=self.minor_units - other.minor_units, currency=self.currency)

    def __neg__(self) -> "Money":
        return Money(minor_units=-self.minor_units, currency=self.currency)

    def __lt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.minor_units < other.minor_units

    def __le__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.minor_units <= other.minor_units

    def __gt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.minor_units > other.minor_units

    def __ge__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.minor_units >= other.minor_units

    @classmethod
    def zero(cls, currency: Currency = Currency.SEK) -> "Money":
        return cls(minor_units=0, currency=currency)

    @classmethod
    def sum(cls, amounts: Iterable["Money"], currency: Currency = Currency.SEK) -> "Money":
        """Sum amounts; an empty iterable gives zero."""
        total = cls.zero(currency)
        for amount in amounts:
            total = total + amount
        return total


def parse_amount(text: str) -> dict:
    """
    Parse a display amount into Money field values.

    Handles "1 245 kr", "18 200 SEK", "-499 kr", "−499 kr",
    "1 245,50 kr", "1245.50" and "199:-".

    Raises:
        ValueError: If the text is not an amount
    """
    cleaned = text.strip().replace("−", "-").lower()
    if not cleaned:
        raise ValueError("Empty amount")

    currency = Currency.SEK
    for marker, marker_currency in _UNIT_MARKERS.items():
        if cleaned.endswith(marker):
            cleaned = cleaned[: -len(marker)]
            currency = marker_currency
            break

    cleaned = _GROUPING_SPACES.sub("", cleaned)
    negative = cleaned.startswith("-")
    if cleaned[:1] in ("-", "+"):
        cleaned = cleaned[1:]

    minor_units = _to_minor_units(cleaned, original=text)
    return {
        "minor_units": -minor_units if negative else minor_units,
        "currency": currency,
    }


def _to_minor_units(number: str, original: Optional[str] = None) -> int:
    match = _NUMBER_PATTERN.fullmatch(number)
    if match is None:
        # Numeric input such as "-499.5" or "1E+3"
        try:
            value = Decimal(number)
        except InvalidOperation:
            raise ValueError(f"Not an amount: {original or number!r}") from None
        if not value.is_finite():
            raise ValueError(f"Not an amount: {original or number!r}")
        try:
            return int((value * 100).to_integral_value())
        except ArithmeticError:
            # Exponent beyond the decimal context, e.g. "1e999999999"
            raise ValueError(f"Amount out of range: {original or number!r}") from None

    whole = re.sub(r"[.,]", "", match.group(1))
    fraction = (match.group(2) or "0").ljust(2, "0")
    return int(whole) * 100 + int(fraction)
