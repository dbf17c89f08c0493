"""Unit tests for installment-with-interest simulation"""

import pytest
from debt_tracker.domain.amortization import monthly_rate_from_annual, simulate_installment_purchase


def test_simulate_zero_rate_splits_evenly():
    """Zero rate avoids the annuity formula's division by zero"""
    result = simulate_installment_purchase(1200, 12, 0)

    assert result.installment_amount == 100
    assert result.total_payable == 1200
    assert result.total_interest == 0
    assert result.extra_paid_percentage == 0


def test_simulate_with_interest():
    """1000 over 12 months at 60% effective annual"""
    result = simulate_installment_purchase(1000, 12, 60)

    rate = monthly_rate_from_annual(60)
    expected_installment = 1000 * rate / (1 - (1 + rate) ** -12)

    assert result.installment_amount == round(expected_installment, 2)
    assert result.total_payable == round(expected_installment * 12, 2)
    assert result.total_interest == pytest.approx(result.total_payable - 1000, abs=0.01)
    assert result.extra_paid_percentage == pytest.approx(result.total_interest / 10, abs=0.01)
    assert result.total_interest > 0


def test_monthly_rate_compounds_instead_of_dividing():
    """60% annual is ~3.99% monthly, not 5%"""
    assert monthly_rate_from_annual(60) == pytest.approx(0.03994, abs=1e-5)
    assert (1 + monthly_rate_from_annual(60)) ** 12 == pytest.approx(1.6)


def test_simulate_single_installment_costs_no_interest():
    result = simulate_installment_purchase(350, 1, 60)

    assert result.installment_amount == 350
    assert result.total_interest == 0


@pytest.mark.parametrize(
    "principal, installments, rate",
    [
        (0, 12, 60),  # Nothing to finance
        (-100, 12, 60),
        (1000, 0, 60),  # No installments
        (1000, 12, None),  # Card has no rate configured
        (1000, 12, -5),
    ],
)
def test_simulate_returns_none_when_not_possible(principal, installments, rate):
    assert simulate_installment_purchase(principal, installments, rate) is None
