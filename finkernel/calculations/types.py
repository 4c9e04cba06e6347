"""
Cash flow and solver data types.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class CashFlow:
    """A cash flow at a whole-period index (0 = initial flow)."""

    amount: Decimal
    period: int


@dataclass(frozen=True)
class DatedCashFlow:
    """A cash flow occurring on a calendar date."""

    date: date
    amount: Decimal
    label: Optional[str] = None


@dataclass
class ConvergenceState:
    """Per-invocation Newton-Raphson state. Never shared between calls."""

    rate: Decimal
    value: Decimal
    derivative: Decimal
    iteration: int = 0


@dataclass(frozen=True)
class SolverOutcome:
    """Result of a root solve: a converged rate or a failure record."""

    solver: str
    converged: bool
    rate: Decimal
    iterations: int
    last_residual: Decimal
