"""
Kernel Errors

All errors raised by the calculation kernel derive from KernelError, which is
a ValueError so existing ``except ValueError`` handlers keep working.
"""

from decimal import Decimal

from finkernel.calculations.types import SolverOutcome


class KernelError(ValueError):
    """Base class for calculation kernel errors."""

    kind = "kernel_error"


class InvalidInput(KernelError):
    """An input field is outside its valid domain."""

    kind = "invalid_input"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid input '{field}': {reason}")


class InsufficientData(KernelError):
    """Not enough cash flows to run a calculation."""

    kind = "insufficient_data"


class InvalidRate(KernelError):
    """A rate makes (1 + rate) non-positive where that is fatal."""

    kind = "invalid_rate"

    def __init__(self, rate: Decimal, context: str):
        self.rate = rate
        self.context = context
        super().__init__(f"Invalid rate {rate} for {context}")


class DivisionByZero(KernelError):
    """A discount factor or divisor evaluated to exactly zero."""

    kind = "division_by_zero"

    def __init__(self, context: str):
        self.context = context
        super().__init__(f"Division by zero: {context}")


class ConvergenceFailure(KernelError):
    """A root solver stopped without reaching the tolerance."""

    kind = "convergence_failure"

    def __init__(self, outcome: SolverOutcome):
        self.outcome = outcome
        super().__init__(
            f"{outcome.solver} did not converge after {outcome.iterations} "
            f"iterations (last residual {outcome.last_residual})"
        )

    @property
    def solver(self) -> str:
        return self.outcome.solver

    @property
    def iterations(self) -> int:
        return self.outcome.iterations

    @property
    def last_residual(self) -> Decimal:
        return self.outcome.last_residual
