"""
IRR and XIRR Calculations

Implements IRR and XIRR with Newton-Raphson over exact Decimal arithmetic,
matching Excel's IRR/XIRR functions on well-behaved cash flows.
"""

from datetime import date
from decimal import Decimal
from typing import List, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from finkernel.calculations.context import (
    DecimalLike,
    ONE,
    ZERO,
    kernel_context,
    to_decimal,
)
from finkernel.calculations.decimal_math import int_power, power
from finkernel.calculations.discounting import (
    DatedFlow,
    PeriodicFlow,
    dated_amounts,
    npv,
    npv_derivative,
    periodic_amounts,
    xnpv,
    xnpv_derivative,
)
from finkernel.calculations.errors import InsufficientData, InvalidInput
from finkernel.calculations.solver import RateFunction, newton_raphson, solve
from finkernel.calculations.types import CashFlow, DatedCashFlow, SolverOutcome

DEFAULT_GUESS = Decimal("0.10")


def _positive_base(rate: Decimal) -> bool:
    return rate > -ONE


def _period_flows(cash_flows: Sequence[PeriodicFlow]) -> List[CashFlow]:
    """Normalize cash flows to CashFlow items, keeping sparse periods sparse."""
    return [
        CashFlow(amount=amount, period=period)
        for period, amount in periodic_amounts(cash_flows)
    ]


def _irr_functions(cash_flows: Sequence[PeriodicFlow]) -> Tuple[RateFunction, RateFunction]:
    if len(cash_flows) < 2:
        raise InsufficientData("IRR requires at least 2 cash flows")

    flows = _period_flows(cash_flows)
    return (
        lambda rate: npv(rate, flows),
        lambda rate: npv_derivative(rate, flows),
    )


def _xirr_functions(dated_flows: Sequence[DatedFlow]) -> Tuple[RateFunction, RateFunction]:
    if len(dated_flows) < 2:
        raise InsufficientData("XIRR requires at least 2 cash flows")

    flows = dated_amounts(dated_flows)
    return (
        lambda rate: xnpv(rate, flows),
        lambda rate: xnpv_derivative(rate, flows),
    )


def irr(cash_flows: Sequence[PeriodicFlow], guess: DecimalLike = DEFAULT_GUESS) -> Decimal:
    """
    Calculate IRR (Internal Rate of Return) using Newton-Raphson method.

    Args:
        cash_flows: Periodic cash flows (index 0 = initial flow) or CashFlow items
        guess: Initial guess for rate (default 0.10 = 10%)

    Returns:
        IRR per period as Decimal (e.g., Decimal("0.15") for 15%)

    Raises:
        InsufficientData: If fewer than 2 cash flows are supplied
        ConvergenceFailure: If the solve does not converge
    """
    f, f_prime = _irr_functions(cash_flows)
    return newton_raphson("IRR", f, f_prime, to_decimal(guess), in_domain=_positive_base)


def irr_outcome(
    cash_flows: Sequence[PeriodicFlow], guess: DecimalLike = DEFAULT_GUESS
) -> SolverOutcome:
    """Run the IRR solve and return the outcome without raising on non-convergence."""
    f, f_prime = _irr_functions(cash_flows)
    return solve("IRR", f, f_prime, to_decimal(guess), in_domain=_positive_base)


def xirr(dated_flows: Sequence[DatedFlow], guess: DecimalLike = DEFAULT_GUESS) -> Decimal:
    """
    Calculate XIRR (IRR with specific dates).

    Years are measured from the first flow's date on an actual/365.25 basis.
    Dates need not be strictly increasing; flows sharing a date are simply
    discounted by the same factor.

    Args:
        dated_flows: DatedCashFlow items or (date, amount) pairs
        guess: Initial guess for rate (default 0.10 = 10%)

    Returns:
        Annual IRR as Decimal

    Raises:
        InsufficientData: If fewer than 2 cash flows are supplied
        ConvergenceFailure: If the solve does not converge, or (1 + rate)
            is non-positive when a rate is evaluated
    """
    f, f_prime = _xirr_functions(dated_flows)
    return newton_raphson("XIRR", f, f_prime, to_decimal(guess), in_domain=_positive_base)


def xirr_outcome(
    dated_flows: Sequence[DatedFlow], guess: DecimalLike = DEFAULT_GUESS
) -> SolverOutcome:
    """Run the XIRR solve and return the outcome without raising on non-convergence."""
    f, f_prime = _xirr_functions(dated_flows)
    return solve("XIRR", f, f_prime, to_decimal(guess), in_domain=_positive_base)


def calculate_multiple(cash_flows: Sequence[DecimalLike]) -> Decimal:
    """
    Calculate equity multiple.

    Args:
        cash_flows: Array of cash flows (investments are negative)

    Returns:
        Multiple (e.g., Decimal("2.0") = 2.0x return)
    """
    amounts = [to_decimal(cf) for cf in cash_flows]
    with kernel_context():
        total_inflows = sum((cf for cf in amounts if cf > ZERO), ZERO)
        total_outflows = abs(sum((cf for cf in amounts if cf < ZERO), ZERO))

        if total_outflows == ZERO:
            raise InvalidInput("cash_flows", "No investment (outflows) found")

        return total_inflows / total_outflows


def calculate_profit(cash_flows: Sequence[DecimalLike]) -> Decimal:
    """Calculate profit (total inflows minus total outflows)."""
    with kernel_context():
        return sum((to_decimal(cf) for cf in cash_flows), ZERO)


def periodic_to_annual_rate(rate: DecimalLike, periods_per_year: int = 12) -> Decimal:
    """Convert a per-period rate (monthly by default) to an annual rate."""
    rate = to_decimal(rate)
    with kernel_context():
        return int_power(ONE + rate, periods_per_year) - ONE


def annual_to_periodic_rate(rate: DecimalLike, periods_per_year: int = 12) -> Decimal:
    """Convert an annual rate to a per-period rate (monthly by default)."""
    if periods_per_year <= 0:
        raise InvalidInput("periods_per_year", "must be a positive integer")
    rate = to_decimal(rate)
    with kernel_context():
        return power(ONE + rate, ONE / Decimal(periods_per_year)) - ONE


def dated_flows_from_schedule(
    start_date: date, amounts: Sequence[DecimalLike], months_between: int = 12
) -> List[DatedCashFlow]:
    """Place periodic amounts on a calendar, months_between months apart."""
    if months_between <= 0:
        raise InvalidInput("months_between", "must be a positive integer")
    return [
        DatedCashFlow(
            date=start_date + relativedelta(months=i * months_between),
            amount=to_decimal(amount),
        )
        for i, amount in enumerate(amounts)
    ]
