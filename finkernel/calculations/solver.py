"""
Newton-Raphson Root Solver

Generic driver over a function and its derivative. IRR and XIRR are both
just different (f, f') pairs fed into the same loop.
"""

from decimal import Decimal
from typing import Callable, Optional

from finkernel.calculations.context import ZERO, kernel_context, to_decimal
from finkernel.calculations.errors import ConvergenceFailure
from finkernel.calculations.types import ConvergenceState, SolverOutcome

MAX_ITERATIONS = 100
TOLERANCE = Decimal("1e-7")
RATE_FLOOR = Decimal("-0.99")
RATE_CEILING = Decimal("100.0")

RateFunction = Callable[[Decimal], Decimal]
DomainCheck = Callable[[Decimal], bool]


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    """Clamp value into [lower, upper]."""
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value


def solve(
    name: str,
    f: RateFunction,
    f_prime: RateFunction,
    guess: Decimal,
    *,
    tolerance: Decimal = TOLERANCE,
    max_iterations: int = MAX_ITERATIONS,
    lower: Decimal = RATE_FLOOR,
    upper: Decimal = RATE_CEILING,
    in_domain: Optional[DomainCheck] = None,
) -> SolverOutcome:
    """
    Run Newton-Raphson from guess and report the outcome.

    Each iteration evaluates f(rate). If |f(rate)| < tolerance the solve has
    converged. A zero derivative stops the solve immediately. Otherwise the
    next rate is rate - f(rate) / f'(rate), clamped into [lower, upper].

    If in_domain is given and returns False for the current rate, the solve
    stops as a failure before evaluating f.

    Args:
        name: Solver name used in failure records (e.g. "IRR")
        f: Function whose root is sought
        f_prime: Analytic derivative of f
        guess: Starting rate
        tolerance: Absolute residual tolerance
        max_iterations: Iteration cap
        lower: Clamp floor for the rate
        upper: Clamp ceiling for the rate
        in_domain: Optional predicate that the rate must satisfy

    Returns:
        SolverOutcome, converged or not
    """
    state = ConvergenceState(rate=to_decimal(guess), value=ZERO, derivative=ZERO)

    with kernel_context():
        for iteration in range(max_iterations):
            state.iteration = iteration

            if in_domain is not None and not in_domain(state.rate):
                return SolverOutcome(name, False, state.rate, iteration, state.value)

            state.value = f(state.rate)
            if abs(state.value) < tolerance:
                return SolverOutcome(name, True, state.rate, iteration, state.value)

            state.derivative = f_prime(state.rate)
            if state.derivative == ZERO:
                return SolverOutcome(name, False, state.rate, iteration, state.value)

            state.rate = clamp(state.rate - state.value / state.derivative, lower, upper)

        if in_domain is None or in_domain(state.rate):
            state.value = f(state.rate)

    return SolverOutcome(name, False, state.rate, max_iterations, state.value)


def newton_raphson(
    name: str,
    f: RateFunction,
    f_prime: RateFunction,
    guess: Decimal,
    **options,
) -> Decimal:
    """
    Solve f(rate) = 0 and return the rate.

    Accepts the same keyword options as solve().

    Raises:
        ConvergenceFailure: If the solve stops without converging
    """
    outcome = solve(name, f, f_prime, guess, **options)
    if not outcome.converged:
        raise ConvergenceFailure(outcome)
    return outcome.rate
