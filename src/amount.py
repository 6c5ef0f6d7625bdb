from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Union

from exceptions import ParseError

SCALE_DIGITS = 4
SCALE = 10 ** SCALE_DIGITS

# Signed 64-bit range of the underlying unit count.
MIN_UNITS = -(2 ** 63)
MAX_UNITS = 2 ** 63 - 1


@dataclass(frozen=True, order=True)
class Amount:
    """
    Fixed-point currency amount stored as an integer count of 1/10000th units.
    Arithmetic is plain integer arithmetic, so it never drifts.
    """

    units: int = 0

    @classmethod
    def parse(cls, value: Union[str, int, Decimal]) -> "Amount":
        """Parse a decimal string or number with at most 4 fractional digits."""
        if isinstance(value, bool):
            raise ParseError(f"not an amount: {value!r}")

        if isinstance(value, int):
            units = value * SCALE
        else:
            try:
                decimal = Decimal(value.strip() if isinstance(value, str) else value)
            except (InvalidOperation, TypeError, ValueError) as e:
                raise ParseError(f"not an amount: {value!r}") from e

            if not decimal.is_finite():
                raise ParseError(f"not an amount: {value!r}")
            if decimal and decimal.adjusted() > 18:
                raise ParseError(f"amount out of range: {value!r}")

            units = cls._units_from_decimal(decimal, value)

        if not MIN_UNITS <= units <= MAX_UNITS:
            raise ParseError(f"amount out of range: {value!r}")
        return cls(units)

    @staticmethod
    def _units_from_decimal(decimal: Decimal, value) -> int:
        # Works on the digit tuple directly; Decimal arithmetic would round
        # to the context precision.
        sign, digits, exponent = decimal.as_tuple()
        if not any(digits):
            return 0

        excess = -exponent - SCALE_DIGITS
        if excess > 0:
            if any(digits[-excess:]):
                raise ParseError(f"more than {SCALE_DIGITS} fractional digits: {value!r}")
            digits = digits[:-excess]
            exponent = -SCALE_DIGITS

        units = int("".join(map(str, digits))) * 10 ** (exponent + SCALE_DIGITS)
        return -units if sign else units

    def __add__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.units + other.units)

    def __sub__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.units - other.units)

    def __bool__(self) -> bool:
        return self.units != 0

    def is_negative(self) -> bool:
        return self.units < 0

    def to_decimal(self) -> Decimal:
        return Decimal(self.units).scaleb(-SCALE_DIGITS)

    def __str__(self) -> str:
        sign = "-" if self.units < 0 else ""
        whole, fraction = divmod(abs(self.units), SCALE)
        return f"{sign}{whole}.{fraction:0{SCALE_DIGITS}d}"

    def __repr__(self) -> str:
        return f"Amount({self})"


ZERO = Amount(0)
