"""POST /v1/simulations - Installment-with-interest preview"""

from typing import Optional
from fastapi import APIRouter

from debt_tracker.api.v1.schemas import SimulationRequest, SimulationResponse
from debt_tracker.domain.amortization import simulate_installment_purchase

router = APIRouter()


@router.post("/simulations", response_model=Optional[SimulationResponse])
def simulate(request_body: SimulationRequest):
    """
    Preview what a purchase costs when split into installments.

    Returns null when no simulation is possible (no rate configured for the
    card, non-positive principal, or fewer than one installment).
    """
    result = simulate_installment_purchase(
        request_body.principal,
        request_body.installments,
        request_body.annual_rate_percent,
    )
    if result is None:
        return None

    return SimulationResponse(
        installment_amount=result.installment_amount,
        total_payable=result.total_payable,
        total_interest=result.total_interest,
        extra_paid_percentage=result.extra_paid_percentage,
    )
