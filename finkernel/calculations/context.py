"""
Decimal Context

Single decimal context shared by every kernel calculation. All arithmetic
runs inside ``localcontext(KERNEL_CONTEXT)`` so results do not depend on the
caller's thread-local context.
"""

from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_EVEN, localcontext
from typing import Union

from finkernel.calculations.errors import InvalidInput

KERNEL_PRECISION = 28

KERNEL_CONTEXT = Context(prec=KERNEL_PRECISION, rounding=ROUND_HALF_EVEN)

DecimalLike = Union[Decimal, int, str]

ZERO = Decimal("0")
ONE = Decimal("1")
TWO = Decimal("2")
HALF = Decimal("0.5")


def kernel_context():
    """Enter the kernel's decimal context."""
    return localcontext(KERNEL_CONTEXT)


def to_decimal(value: DecimalLike) -> Decimal:
    """
    Coerce a value to Decimal.

    Floats are rejected: by the time a float reaches the kernel it has
    already lost exactness, and converting it would make results depend on
    binary representation. Infinity and NaN are rejected too, since every
    kernel loop is bounded only for finite values.

    Raises:
        TypeError: If value is a float, bool or any non-numeric type
        InvalidInput: If value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)) and not isinstance(value, bool):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise InvalidInput("value", f"{value!r} is not a number")
    else:
        raise TypeError(f"Expected Decimal, int or str, got {type(value).__name__}")

    if not result.is_finite():
        raise InvalidInput("value", f"{result} is not a finite number")
    return result
