"""
Decimal Math Primitives

Square root, natural logarithm, exponential and power built only from the
four basic Decimal operations and comparison. No float and no math module,
so results are identical on every platform.

Every calculation that needs one of these primitives imports it from here
rather than carrying its own copy.
"""

from decimal import Decimal, Overflow, ROUND_HALF_EVEN

from finkernel.calculations.context import (
    DecimalLike,
    HALF,
    ONE,
    TWO,
    ZERO,
    kernel_context,
    to_decimal,
)
from finkernel.calculations.errors import DivisionByZero, InvalidInput

SQRT_TOLERANCE = Decimal("1e-10")
SQRT_MAX_ITERATIONS = 50

LN_SERIES_TERMS = 20
EXP_SERIES_TERMS = 25

LN_2 = Decimal("0.6931471805599453094172321214581765680755")


def sqrt(x: DecimalLike) -> Decimal:
    """
    Square root by Newton's method.

    Non-positive input returns 0 rather than raising, so a zero or negative
    variance degrades to zero risk.

    Iteration stops once successive guesses differ by less than
    SQRT_TOLERANCE, or after SQRT_MAX_ITERATIONS. The last guess is always
    returned. Because the seed is x / 2, inputs above roughly 1e24 exhaust
    the iteration cap before converging and the result is not a usable
    square root (sqrt(1e40) returns about 4.44e24, not 1e20).

    Args:
        x: Value to take the square root of

    Returns:
        sqrt(x), or 0 for x <= 0
    """
    x = to_decimal(x)
    if x <= ZERO:
        return ZERO
    if x == ONE:
        return ONE

    with kernel_context():
        guess = x / TWO
        if guess == ZERO:
            guess = ONE

        for _ in range(SQRT_MAX_ITERATIONS):
            new_guess = (guess + x / guess) / TWO
            if abs(new_guess - guess) < SQRT_TOLERANCE:
                return new_guess
            guess = new_guess

    return guess


def ln(x: DecimalLike) -> Decimal:
    """
    Natural logarithm.

    Returns 0 for x == 1 and for x <= 0. Callers that need an error on a
    non-positive argument must check the domain themselves.

    Algorithm:
        1. Halve or double x until it lies in [0.5, 2], counting k.
        2. With u = (m - 1) / (m + 1), ln(m) = 2 * sum(u^(2n+1) / (2n+1))
           over a fixed number of terms.
        3. ln(x) = ln(m) + k * ln(2).

    Args:
        x: Positive value

    Returns:
        ln(x)
    """
    x = to_decimal(x)
    if x <= ZERO or x == ONE:
        return ZERO

    with kernel_context():
        m = +x
        k = 0
        while m > TWO:
            m = m / TWO
            k += 1
        while m < HALF:
            m = m * TWO
            k -= 1

        u = (m - ONE) / (m + ONE)
        u_squared = u * u
        term = u
        total = ZERO
        for n in range(LN_SERIES_TERMS):
            total += term / Decimal(2 * n + 1)
            term *= u_squared

        return TWO * total + Decimal(k) * LN_2


def exp(x: DecimalLike) -> Decimal:
    """
    Exponential function.

    Range reduction writes x = k * ln(2) + r with |r| <= ln(2) / 2, evaluates
    a fixed Taylor series for exp(r), then scales by 2^k.
    """
    x = to_decimal(x)
    if x == ZERO:
        return ONE

    with kernel_context():
        k = int((x / LN_2).to_integral_value(rounding=ROUND_HALF_EVEN))
        r = x - Decimal(k) * LN_2

        total = ONE
        term = ONE
        for n in range(1, EXP_SERIES_TERMS + 1):
            term = term * r / Decimal(n)
            total += term

        try:
            if k >= 0:
                return total * _square_and_multiply(TWO, k)
            return total / _square_and_multiply(TWO, -k)
        except Overflow:
            if k < 0:
                return ZERO
            raise InvalidInput("x", f"exp({x}) exceeds the representable range")


def _square_and_multiply(base: Decimal, n: int) -> Decimal:
    result = ONE
    factor = +base
    while n > 0:
        if n & 1:
            result *= factor
        n >>= 1
        if n:
            factor *= factor
    return result


def int_power(base: Decimal, n: int) -> Decimal:
    """
    Raise base to a non-negative integer power by square-and-multiply.

    Raises:
        InvalidInput: If n is negative or the result overflows the context
    """
    if n < 0:
        raise InvalidInput("exponent", "int_power requires a non-negative exponent")

    with kernel_context():
        try:
            return _square_and_multiply(base, n)
        except Overflow:
            raise InvalidInput("exponent", f"{base} ** {n} exceeds the representable range")


def power(base: DecimalLike, exponent: DecimalLike) -> Decimal:
    """
    Raise base to an arbitrary Decimal exponent.

    Integral exponents use exact repeated multiplication. Fractional
    exponents use exp(exponent * ln(base)) and need a positive base.

    Args:
        base: Value to raise
        exponent: Power, may be fractional or negative

    Returns:
        base ** exponent

    Raises:
        DivisionByZero: If base is 0 and exponent is negative
        InvalidInput: If base is negative and exponent is fractional, or the
            result overflows the context
    """
    base = to_decimal(base)
    exponent = to_decimal(exponent)

    if exponent == ZERO:
        return ONE

    if base == ZERO:
        if exponent < ZERO:
            raise DivisionByZero("zero raised to a negative power")
        return ZERO

    if exponent == exponent.to_integral_value():
        n = int(exponent)
        if n > 0:
            return int_power(base, n)
        with kernel_context():
            try:
                divisor = _square_and_multiply(base, -n)
            except Overflow:
                return ZERO
            if divisor == ZERO:
                raise InvalidInput("exponent", f"{base} ** {n} exceeds the representable range")
            try:
                return ONE / divisor
            except Overflow:
                raise InvalidInput("exponent", f"{base} ** {n} exceeds the representable range")

    if base < ZERO:
        raise InvalidInput(
            "base", f"negative base {base} with fractional exponent {exponent}"
        )

    with kernel_context():
        try:
            scaled = exponent * ln(base)
        except Overflow:
            raise InvalidInput("exponent", f"{base} ** {exponent} exceeds the representable range")
        return exp(scaled)
