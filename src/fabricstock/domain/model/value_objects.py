"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum

from fabricstock.domain.exceptions import ValidationError

_CENT = Decimal("0.01")

# Amounts and lengths are stored as integer hundredths in a signed 64-bit column.
MAX_UNITS = Decimal(2**62).scaleb(-2)


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )
        if self.amount > MAX_UNITS:
            raise ValidationError(f"Money amount too large, got {self.amount}")

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal | Meters) -> Money:
        if isinstance(factor, Meters):
            factor = factor.value
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int, Decimal or Meters, got {type(factor).__name__}"
            )
        try:
            amount = (self.amount * factor).quantize(_CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise ValidationError(f"Money amount too large: {self} x {factor}") from None
        return Money(amount, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = "USD") -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str) -> Money:
        return Money(Decimal("0.00"), currency)


@dataclass(frozen=True)
class Meters:
    """A non-negative length of fabric with centimetre resolution.

    Stored as a Decimal with two fractional digits.  Anything finer than a
    centimetre is rejected instead of rounded, so a reservation never holds
    a different length from the one the operator asked for.
    """

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise ValidationError(
                f"Meters must be a Decimal, got {type(self.value).__name__}"
            )
        if not self.value.is_finite():
            raise ValidationError(f"Meters must be finite, got {self.value}")
        if self.value < Decimal("0"):
            raise ValidationError(f"Meters cannot be negative, got {self.value}")
        if self.value > MAX_UNITS:
            raise ValidationError(f"Meters cannot exceed {MAX_UNITS}, got {self.value}")
        if self.value != self.value.quantize(_CENT):
            raise ValidationError(
                f"Meters support at most two decimal places, got {self.value}"
            )

    @property
    def centimeters(self) -> int:
        return int(self.value * 100)

    @property
    def is_positive(self) -> bool:
        return self.value > 0

    def __add__(self, other: Meters) -> Meters:
        return Meters(self.value + other.value)

    def __sub__(self, other: Meters) -> Meters:
        result = self.value - other.value
        if result < Decimal("0"):
            raise ValidationError("Meters subtraction would result in a negative length")
        return Meters(result)

    def __lt__(self, other: Meters) -> bool:
        return self.value < other.value

    def __le__(self, other: Meters) -> bool:
        return self.value <= other.value

    def __gt__(self, other: Meters) -> bool:
        return self.value > other.value

    def __ge__(self, other: Meters) -> bool:
        return self.value >= other.value

    def __str__(self) -> str:
        return f"{self.value:.2f}m"

    @staticmethod
    def of(value: str | float | int | Decimal) -> Meters:
        """Coerce user input into Meters; floats go through ``str`` first."""
        try:
            decimal = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid length: {value!r}") from exc
        if (
            decimal.is_finite()
            and abs(decimal) <= MAX_UNITS
            and decimal == decimal.quantize(_CENT)
        ):
            decimal = decimal.quantize(_CENT)
        return Meters(decimal)

    @staticmethod
    def from_centimeters(centimeters: int) -> Meters:
        return Meters((Decimal(centimeters) / 100).quantize(_CENT))

    @staticmethod
    def zero() -> Meters:
        return Meters(Decimal("0.00"))


class Market(Enum):
    """Regional sales configuration: currency and payment provider."""

    TR = "TR"
    GLOBAL = "GLOBAL"

    @property
    def currency(self) -> str:
        return _MARKET_CURRENCY[self]

    @property
    def payment_provider(self) -> str:
        return _MARKET_PROVIDER[self]


_MARKET_CURRENCY = {Market.TR: "TRY", Market.GLOBAL: "USD"}
_MARKET_PROVIDER = {Market.TR: "iyzico", Market.GLOBAL: "stripe"}
