"""
NPV and XNPV Calculations

Discounts whole-period or calendar-dated cash flows back to time zero, and
provides the analytic derivatives with respect to rate used by the IRR and
XIRR solvers.
"""

from datetime import date
from decimal import Decimal, Overflow
from typing import List, Sequence, Tuple, Union

from finkernel.calculations.context import (
    DecimalLike,
    ONE,
    ZERO,
    kernel_context,
    to_decimal,
)
from finkernel.calculations.decimal_math import int_power, power
from finkernel.calculations.errors import DivisionByZero, InvalidInput, InvalidRate
from finkernel.calculations.types import CashFlow, DatedCashFlow

DAYS_PER_YEAR = Decimal("365.25")

PeriodicFlow = Union[CashFlow, DecimalLike]
DatedFlow = Union[DatedCashFlow, Tuple[date, DecimalLike]]


def periodic_amounts(cash_flows: Sequence[PeriodicFlow]) -> List[Tuple[int, Decimal]]:
    """
    Normalize cash flows to (period, amount) pairs.

    Plain amounts take their position as the period. CashFlow items keep
    their own period index.
    """
    result = []
    for index, cf in enumerate(cash_flows):
        if isinstance(cf, CashFlow):
            if cf.period < 0:
                raise InvalidInput("period", f"period must be >= 0, got {cf.period}")
            result.append((cf.period, to_decimal(cf.amount)))
        else:
            result.append((index, to_decimal(cf)))
    return result


def dated_amounts(dated_flows: Sequence[DatedFlow]) -> List[Tuple[date, Decimal]]:
    """Normalize dated flows to (date, amount) pairs."""
    result = []
    for flow in dated_flows:
        if isinstance(flow, DatedCashFlow):
            result.append((flow.date, to_decimal(flow.amount)))
        else:
            flow_date, amount = flow
            result.append((flow_date, to_decimal(amount)))
    return result


def year_fraction(start: date, end: date) -> Decimal:
    """Years between two dates on an actual/365.25 basis."""
    with kernel_context():
        return Decimal((end - start).days) / DAYS_PER_YEAR


def _check_rate(rate: Decimal, context: str) -> Decimal:
    if rate <= -ONE:
        raise InvalidRate(rate, f"{context}: discount rate must be greater than -100%")
    with kernel_context():
        return ONE + rate


def _out_of_range(rate: Decimal, context: str) -> InvalidRate:
    return InvalidRate(rate, f"{context}: discounted value exceeds the representable range")


def _is_sequential(flows: List[Tuple[int, Decimal]]) -> bool:
    return all(period == index for index, (period, _) in enumerate(flows))


def npv(rate: DecimalLike, cash_flows: Sequence[PeriodicFlow]) -> Decimal:
    """
    Calculate NPV (Net Present Value) of whole-period cash flows.

    The discount factor compounds by repeated multiplication by (1 + rate),
    so npv(0, flows) equals sum(flows) exactly.

    Args:
        rate: Discount rate per period (e.g., Decimal("0.10") for 10%)
        cash_flows: Amounts in period order, or CashFlow items

    Returns:
        NPV value

    Raises:
        InvalidRate: If rate <= -1, or a discounted value overflows
        DivisionByZero: If a discount factor evaluates to zero
    """
    rate = to_decimal(rate)
    one_plus_r = _check_rate(rate, "NPV")
    flows = periodic_amounts(cash_flows)

    with kernel_context():
        try:
            result = ZERO
            if _is_sequential(flows):
                discount = ONE
                for period, cf in flows:
                    if period > 0:
                        discount *= one_plus_r
                    if discount == ZERO:
                        raise DivisionByZero(f"NPV discount factor at period {period}")
                    result += cf / discount
            else:
                for period, cf in flows:
                    discount = int_power(one_plus_r, period)
                    if discount == ZERO:
                        raise DivisionByZero(f"NPV discount factor at period {period}")
                    result += cf / discount
            return result
        except Overflow:
            raise _out_of_range(rate, "NPV")


def npv_derivative(rate: DecimalLike, cash_flows: Sequence[PeriodicFlow]) -> Decimal:
    """Derivative of NPV with respect to rate: sum(-t * cf / (1 + r)^(t + 1))."""
    rate = to_decimal(rate)
    one_plus_r = _check_rate(rate, "NPV derivative")

    with kernel_context():
        try:
            dnpv = ZERO
            for period, cf in periodic_amounts(cash_flows):
                if period == 0:
                    continue
                discount = int_power(one_plus_r, period + 1)
                if discount == ZERO:
                    raise DivisionByZero(f"NPV derivative discount factor at period {period}")
                dnpv -= Decimal(period) * cf / discount
            return dnpv
        except Overflow:
            raise _out_of_range(rate, "NPV derivative")


def xnpv(rate: DecimalLike, dated_flows: Sequence[DatedFlow]) -> Decimal:
    """
    Calculate XNPV (NPV with specific dates).

    Each flow is discounted by (1 + rate)^years, where years is measured from
    the first flow's date on an actual/365.25 basis.

    Raises:
        InvalidRate: If rate <= -1, or a discounted value overflows
        DivisionByZero: If a discount factor evaluates to zero
    """
    rate = to_decimal(rate)
    one_plus_r = _check_rate(rate, "XNPV")
    flows = dated_amounts(dated_flows)
    if not flows:
        return ZERO

    base_date = flows[0][0]
    with kernel_context():
        try:
            result = ZERO
            for flow_date, amount in flows:
                discount = power(one_plus_r, year_fraction(base_date, flow_date))
                if discount == ZERO:
                    raise DivisionByZero(f"XNPV discount factor at {flow_date.isoformat()}")
                result += amount / discount
            return result
        except Overflow:
            raise _out_of_range(rate, "XNPV")


def xnpv_derivative(rate: DecimalLike, dated_flows: Sequence[DatedFlow]) -> Decimal:
    """Derivative of XNPV with respect to rate."""
    rate = to_decimal(rate)
    one_plus_r = _check_rate(rate, "XNPV derivative")
    flows = dated_amounts(dated_flows)
    if not flows:
        return ZERO

    base_date = flows[0][0]
    with kernel_context():
        try:
            dxnpv = ZERO
            for flow_date, amount in flows:
                years = year_fraction(base_date, flow_date)
                if years == ZERO:
                    continue
                discount = power(one_plus_r, years)
                if discount == ZERO:
                    raise DivisionByZero(
                        f"XNPV derivative discount factor at {flow_date.isoformat()}"
                    )
                dxnpv -= years * amount / (one_plus_r * discount)
            return dxnpv
        except Overflow:
            raise _out_of_range(rate, "XNPV derivative")
