"""
Print kernel outputs for a fixed set of reference inputs.

Run before and after changing a primitive and diff the output: every line
must match to the last decimal place.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date
from decimal import Decimal

from finkernel.calculations import decimal_math, discounting, irr, time_value

D = Decimal

PRIMITIVE_INPUTS = ["0.0001", "0.5", "2", "3", "10", "12345.6789"]

PERIODIC_FLOWS = [
    [D(-1000), D(400), D(400), D(400)],
    [D(-100), D(20), D(20), D(20), D(20), D(120)],
    [D(-100), D(40), D(40), D(10)],
]

DATED_FLOWS = [
    [(date(2025, 1, 1), D(-100)), (date(2026, 1, 1), D(50)), (date(2027, 1, 1), D(60))],
    [(date(2020, 1, 1), D(-1000)), (date(2021, 7, 15), D(300)), (date(2024, 1, 1), D(900))],
]


def main():
    for x in PRIMITIVE_INPUTS:
        print(f"sqrt({x}) = {decimal_math.sqrt(D(x))}")
        print(f"ln({x}) = {decimal_math.ln(D(x))}")
        print(f"exp({x}) = {decimal_math.exp(D(x))}")

    for flows in PERIODIC_FLOWS:
        label = ", ".join(str(cf) for cf in flows)
        print(f"npv(0.10, [{label}]) = {discounting.npv(D('0.10'), flows)}")
        outcome = irr.irr_outcome(flows)
        print(f"irr([{label}]) = {outcome.rate} ({outcome.iterations} iterations)")

    for flows in DATED_FLOWS:
        label = ", ".join(f"{d.isoformat()}:{cf}" for d, cf in flows)
        outcome = irr.xirr_outcome(flows)
        print(f"xirr([{label}]) = {outcome.rate} ({outcome.iterations} iterations)")

    print(f"pv(0.08, 10, -100) = {time_value.pv(D('0.08'), 10, D(-100))}")
    print(f"fv(0.05, 10, -100) = {time_value.fv(D('0.05'), 10, D(-100))}")
    print(f"pmt(0.05/12, 360, 1000000) = {time_value.pmt(D('0.05') / 12, 360, D(1000000))}")


if __name__ == "__main__":
    main()
