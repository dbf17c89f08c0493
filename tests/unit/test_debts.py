"""Unit tests for debt classification and aggregation"""

import pytest
from datetime import date
from debt_tracker.domain.debts import (
    days_overdue,
    filter_active_debts,
    filter_active_subscriptions,
    is_active_debt,
    is_active_subscription,
    is_overdue,
    payment_progress_percent,
    total_outstanding,
    validate_consistency,
)
from debt_tracker.domain.models import ExpenseStatus


def test_active_debt_follows_balance_not_status(make_debt):
    """A stale 'paid' flag does not hide money still owed"""
    stale = make_debt(total_paid_amount=300, status=ExpenseStatus.PAID)
    settled = make_debt(total_paid_amount=899.995, status=ExpenseStatus.PENDING)

    assert is_active_debt(stale) is True
    assert is_active_debt(settled) is False


def test_subscription_is_never_an_active_debt(make_subscription):
    subscription = make_subscription()

    assert is_active_debt(subscription) is False
    assert is_active_subscription(subscription) is True
    assert is_active_subscription(make_subscription(status=ExpenseStatus.PAID)) is False


def test_filter_active_debts(make_debt, make_subscription, events):
    expenses = [
        make_debt(id="A"),
        make_debt(id="B", total_paid_amount=900, status=ExpenseStatus.PAID),
        make_subscription(id="S"),
        make_debt(id="C", total_paid_amount=450),
    ]

    active = filter_active_debts(expenses)

    assert [e.id for e in active] == ["A", "C"]
    # Nothing with a balance was excluded
    assert not [e for e in events if e.name == "debts.classification_anomaly"]


def test_filter_active_subscriptions(make_debt, make_subscription):
    expenses = [make_debt(id="A"), make_subscription(id="S1"), make_subscription(id="S2", status=ExpenseStatus.PAID)]

    assert [e.id for e in filter_active_subscriptions(expenses)] == ["S1"]


def test_total_outstanding_ignores_subscriptions(make_debt, make_subscription):
    expenses = [
        make_debt(id="A"),  # 900 owed
        make_debt(id="B", total_paid_amount=300),  # 600 owed
        make_debt(id="C", total_paid_amount=1000),  # Overpaid, counts as 0
        make_subscription(id="S", total_amount=44.9),
    ]

    assert total_outstanding(expenses) == 1500


def test_payment_progress_percent(make_debt):
    assert payment_progress_percent(make_debt(total_paid_amount=300)) == pytest.approx(33.333, abs=0.001)
    assert payment_progress_percent(make_debt(total_paid_amount=1200)) == 100
    assert payment_progress_percent(make_debt(total_amount=0)) == 100


def test_days_overdue():
    today = date(2024, 3, 10)

    assert days_overdue("2024-03-05", today) == 5
    assert days_overdue("2024-03-15", today) == -5
    assert days_overdue("2024-03-10T23:59:00Z", today) == 0  # Time of day ignored
    assert days_overdue("", today) == 0


def test_is_overdue(make_debt):
    today = date(2024, 3, 10)

    assert is_overdue(make_debt(due_date="2024-03-09"), today) is True
    assert is_overdue(make_debt(due_date="2024-03-10"), today) is False
    assert is_overdue(make_debt(due_date="2024-03-09", status=ExpenseStatus.PAID), today) is False


def test_validate_consistency_flags_each_problem(make_debt, make_subscription):
    expenses = [
        make_debt(id="A", description="Stale", total_paid_amount=100, status=ExpenseStatus.PAID),
        make_debt(id="B", description="Overpaid", total_paid_amount=950, status=ExpenseStatus.PAID),
        make_debt(id="", description="Orphan"),
        make_debt(id="D", description="Fine"),
        make_subscription(id="", description="Ignored"),
    ]

    warnings = validate_consistency(expenses)

    assert len(warnings) == 3
    assert "Stale" in warnings[0] and "800.00" in warnings[0]
    assert "Overpaid" in warnings[1] and "950.00" in warnings[1]
    assert "Orphan" in warnings[2] and "missing id" in warnings[2]


def test_validate_consistency_clean_data(make_debt):
    assert validate_consistency([make_debt(), make_debt(id="B", total_paid_amount=900, status=ExpenseStatus.PAID)]) == []


def test_unreadable_due_date_counts_as_blank(make_debt):
    """A hand-edited "15/02/2026" cell is never reported as overdue"""
    today = date(2026, 3, 10)

    assert days_overdue("15/02/2026", today) == 0
    assert is_overdue(make_debt(due_date="15/02/2026"), today) is False
