"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results. Decimal values
are serialized as JSON strings so no precision is lost in transit.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from finkernel.calculations import decimal_math, discounting, irr, time_value
from finkernel.calculations.errors import ConvergenceFailure, KernelError
from finkernel.calculations.types import DatedCashFlow
from finkernel.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_http(error: KernelError):
    """Translate a kernel error into an HTTP error response."""
    if isinstance(error, ConvergenceFailure):
        logger.warning(
            f"{error.solver} failed to converge after {error.iterations} iterations"
        )
        raise HTTPException(
            status_code=422,
            detail={
                "error": error.kind,
                "message": str(error),
                "solver": error.solver,
                "iterations": error.iterations,
                "last_residual": str(error.last_residual),
            },
        )
    logger.info(f"Rejected calculation request: {error}")
    raise HTTPException(
        status_code=400,
        detail={"error": error.kind, "message": str(error)},
    )


def _zip_dated(cash_flows: List[Decimal], dates: List[date]) -> List[DatedCashFlow]:
    if len(cash_flows) != len(dates):
        raise HTTPException(
            status_code=400,
            detail={
                "error": "invalid_input",
                "message": "Cash flows and dates arrays must have same length",
            },
        )
    return [DatedCashFlow(date=d, amount=cf) for d, cf in zip(dates, cash_flows)]


class ScalarInput(BaseModel):
    """Input for a single-argument primitive."""

    x: Decimal


class PowerInput(BaseModel):
    """Input for a power calculation."""

    base: Decimal
    exponent: Decimal


class ScalarResponse(BaseModel):
    """Result of a primitive calculation."""

    result: Decimal


@router.post("/sqrt", response_model=ScalarResponse)
async def calculate_sqrt(inputs: ScalarInput):
    """Square root (0 for non-positive input)."""
    try:
        return ScalarResponse(result=decimal_math.sqrt(inputs.x))
    except KernelError as e:
        _raise_http(e)


@router.post("/ln", response_model=ScalarResponse)
async def calculate_ln(inputs: ScalarInput):
    """Natural logarithm (0 for non-positive input)."""
    try:
        return ScalarResponse(result=decimal_math.ln(inputs.x))
    except KernelError as e:
        _raise_http(e)


@router.post("/pow", response_model=ScalarResponse)
async def calculate_pow(inputs: PowerInput):
    """Raise base to a possibly fractional exponent."""
    try:
        return ScalarResponse(result=decimal_math.power(inputs.base, inputs.exponent))
    except KernelError as e:
        _raise_http(e)


class NPVInput(BaseModel):
    """Input for NPV calculation."""

    rate: Decimal
    cash_flows: List[Decimal]
    dates: Optional[List[date]] = None


class NPVResponse(BaseModel):
    """Response with NPV calculation."""

    npv: Decimal


@router.post("/npv", response_model=NPVResponse)
async def calculate_npv_endpoint(inputs: NPVInput):
    """Calculate NPV, date-weighted when dates are supplied."""
    try:
        if inputs.dates is not None:
            flows = _zip_dated(inputs.cash_flows, inputs.dates)
            return NPVResponse(npv=discounting.xnpv(inputs.rate, flows))
        return NPVResponse(npv=discounting.npv(inputs.rate, inputs.cash_flows))
    except KernelError as e:
        _raise_http(e)


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[Decimal]
    dates: Optional[List[date]] = None
    guess: Optional[Decimal] = None


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: Decimal
    iterations: int
    multiple: Decimal
    profit: Decimal
    npv_at_reference_rate: Decimal


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for given cash flows (XIRR when dates are supplied)."""
    settings = get_settings()
    guess = inputs.guess if inputs.guess is not None else settings.default_guess

    try:
        if inputs.dates is not None:
            flows = _zip_dated(inputs.cash_flows, inputs.dates)
            outcome = irr.xirr_outcome(flows, guess)
            reference_npv = discounting.xnpv(settings.reference_discount_rate, flows)
        else:
            outcome = irr.irr_outcome(inputs.cash_flows, guess)
            reference_npv = discounting.npv(
                settings.reference_discount_rate, inputs.cash_flows
            )

        if not outcome.converged:
            raise ConvergenceFailure(outcome)

        return IRRResponse(
            irr=outcome.rate,
            iterations=outcome.iterations,
            multiple=irr.calculate_multiple(inputs.cash_flows),
            profit=irr.calculate_profit(inputs.cash_flows),
            npv_at_reference_rate=reference_npv,
        )
    except KernelError as e:
        _raise_http(e)


class DatedFlowInput(BaseModel):
    """A single dated cash flow."""

    date: date
    amount: Decimal
    label: Optional[str] = None


class XIRRInput(BaseModel):
    """Input for XIRR calculation."""

    flows: List[DatedFlowInput]
    guess: Optional[Decimal] = None


class XIRRResponse(BaseModel):
    """Response with XIRR calculation."""

    xirr: Decimal
    iterations: int
    xnpv_at_reference_rate: Decimal


@router.post("/xirr", response_model=XIRRResponse)
async def calculate_xirr_endpoint(inputs: XIRRInput):
    """Calculate XIRR for dated cash flows."""
    settings = get_settings()
    guess = inputs.guess if inputs.guess is not None else settings.default_guess
    flows = [
        DatedCashFlow(date=f.date, amount=f.amount, label=f.label) for f in inputs.flows
    ]

    try:
        outcome = irr.xirr_outcome(flows, guess)
        if not outcome.converged:
            raise ConvergenceFailure(outcome)

        return XIRRResponse(
            xirr=outcome.rate,
            iterations=outcome.iterations,
            xnpv_at_reference_rate=discounting.xnpv(
                settings.reference_discount_rate, flows
            ),
        )
    except KernelError as e:
        _raise_http(e)


class AnnuityInput(BaseModel):
    """Input for PV/FV/PMT calculations."""

    rate: Decimal
    nper: int
    pmt: Decimal = Decimal("0")
    present_value: Decimal = Decimal("0")
    future_value: Decimal = Decimal("0")


class AnnuityResponse(BaseModel):
    """Result of a time value calculation."""

    result: Decimal


@router.post("/tvm/pv", response_model=AnnuityResponse)
async def calculate_pv(inputs: AnnuityInput):
    """Present value of a level annuity plus a terminal amount."""
    try:
        return AnnuityResponse(
            result=time_value.pv(inputs.rate, inputs.nper, inputs.pmt, inputs.future_value)
        )
    except KernelError as e:
        _raise_http(e)


@router.post("/tvm/fv", response_model=AnnuityResponse)
async def calculate_fv(inputs: AnnuityInput):
    """Future value of a level annuity plus a present amount."""
    try:
        return AnnuityResponse(
            result=time_value.fv(inputs.rate, inputs.nper, inputs.pmt, inputs.present_value)
        )
    except KernelError as e:
        _raise_http(e)


@router.post("/tvm/pmt", response_model=AnnuityResponse)
async def calculate_pmt(inputs: AnnuityInput):
    """Level payment that amortizes present_value down to future_value."""
    try:
        return AnnuityResponse(
            result=time_value.pmt(
                inputs.rate, inputs.nper, inputs.present_value, inputs.future_value
            )
        )
    except KernelError as e:
        _raise_http(e)
