"""
Financial Calculation Kernel

Deterministic Decimal primitives (sqrt, ln, exp, pow), cash flow discounting
and Newton-Raphson IRR/XIRR solving. No float arithmetic anywhere, so every
result reproduces exactly across platforms.
"""

from finkernel.calculations import decimal_math, discounting, irr, solver, time_value

__all__ = ["decimal_math", "discounting", "irr", "solver", "time_value"]
