"""
Time Value of Money

Present value, future value and payment for level annuities, matching
Excel's PV, FV and PMT functions (including their sign convention: money
paid out is negative).
"""

from decimal import Decimal

from finkernel.calculations.context import DecimalLike, ONE, ZERO, kernel_context, to_decimal
from finkernel.calculations.decimal_math import int_power
from finkernel.calculations.errors import DivisionByZero, InvalidInput


def pv(rate: DecimalLike, nper: int, pmt: DecimalLike, fv: DecimalLike = 0) -> Decimal:
    """
    Calculate present value.

    Matches Excel's PV() function.

    Args:
        rate: Interest rate per period
        nper: Number of periods
        pmt: Payment made each period
        fv: Future value at the end of the last period

    Returns:
        Present value
    """
    rate, pmt, fv = to_decimal(rate), to_decimal(pmt), to_decimal(fv)
    if nper < 0:
        raise InvalidInput("nper", "Number of periods must be >= 0")

    with kernel_context():
        if rate == ZERO:
            return -(pmt * Decimal(nper) + fv)

        factor = int_power(ONE + rate, nper)
        if factor == ZERO:
            raise DivisionByZero("PV factor")

        annuity_factor = (ONE - ONE / factor) / rate
        return -(pmt * annuity_factor + fv / factor)


def fv(rate: DecimalLike, nper: int, pmt: DecimalLike, present_value: DecimalLike = 0) -> Decimal:
    """
    Calculate future value.

    Matches Excel's FV() function.
    """
    rate, pmt, present_value = to_decimal(rate), to_decimal(pmt), to_decimal(present_value)
    if nper < 0:
        raise InvalidInput("nper", "Number of periods must be >= 0")

    with kernel_context():
        if rate == ZERO:
            return -(present_value + pmt * Decimal(nper))

        factor = int_power(ONE + rate, nper)
        annuity_factor = (factor - ONE) / rate
        return -(present_value * factor + pmt * annuity_factor)


def pmt(
    rate: DecimalLike, nper: int, present_value: DecimalLike, future_value: DecimalLike = 0
) -> Decimal:
    """
    Calculate the level payment per period.

    Matches Excel's PMT() function.

    Args:
        rate: Interest rate per period (e.g., annual rate / 12 for monthly)
        nper: Number of periods
        present_value: Loan principal or present value
        future_value: Balance remaining after the last payment

    Returns:
        Payment per period (negative for a loan received)

    Raises:
        InvalidInput: If nper <= 0
        DivisionByZero: If the annuity factor is zero
    """
    if nper <= 0:
        raise InvalidInput("nper", "Number of periods must be > 0")
    rate = to_decimal(rate)
    present_value, future_value = to_decimal(present_value), to_decimal(future_value)

    with kernel_context():
        if rate == ZERO:
            return -(present_value + future_value) / Decimal(nper)

        factor = int_power(ONE + rate, nper)
        annuity_factor = (factor - ONE) / rate
        if annuity_factor == ZERO:
            raise DivisionByZero("PMT annuity factor")

        return -(present_value * factor + future_value) / annuity_factor
