"""Installment-with-interest simulation (French system, fixed installment)"""

from typing import Optional
from debt_tracker.domain.models import SimulationResult


def monthly_rate_from_annual(annual_rate_percent: float) -> float:
    """
    Convert an effective annual rate (percent) to the equivalent monthly rate.

    Uses compounding, (1 + TEA)^(1/12) - 1, not TEA / 12.
    """
    return (1 + annual_rate_percent / 100) ** (1 / 12) - 1


def simulate_installment_purchase(
    principal: float,
    installments: int,
    annual_rate_percent: Optional[float],
) -> Optional[SimulationResult]:
    """
    Simulate paying `principal` in `installments` equal monthly payments.

    Returns None when the simulation is not possible: non-positive principal,
    fewer than one installment, or no rate configured for the card.
    A zero rate is valid and splits the principal evenly.

    Example:
        1200 over 12 installments at 0% -> 100.00 each, 0.00 interest
    """
    if principal is None or principal <= 0:
        return None
    if installments is None or installments < 1:
        return None
    if annual_rate_percent is None or annual_rate_percent < 0:
        return None

    if installments == 1:
        return SimulationResult(
            installment_amount=round(principal, 2),
            total_payable=round(principal, 2),
            total_interest=0.0,
            extra_paid_percentage=0.0,
        )

    rate = monthly_rate_from_annual(annual_rate_percent)

    # r = 0 would divide by zero in the annuity formula
    if rate == 0:
        installment = principal / installments
    else:
        installment = principal * rate / (1 - (1 + rate) ** (-installments))

    total_payable = installment * installments
    total_interest = total_payable - principal
    extra_paid = total_interest / principal * 100

    return SimulationResult(
        installment_amount=round(installment, 2),
        total_payable=round(total_payable, 2),
        total_interest=round(total_interest, 2),
        extra_paid_percentage=round(extra_paid, 2),
    )
