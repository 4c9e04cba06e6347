"""
Deterministic Decimal kernel for financial analytics.
"""

__version__ = "0.1.0"
