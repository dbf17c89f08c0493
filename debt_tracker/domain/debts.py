"""Classification and aggregation over normalized pending expenses"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from debt_tracker.domain.diagnostics import diagnostics
from debt_tracker.domain.models import ExpenseKind, ExpenseStatus, PendingExpense
from debt_tracker.domain.normalizer import BALANCE_EPSILON, outstanding_balance
from debt_tracker.utils.date_utils import parse_iso_date


def is_active_debt(expense: PendingExpense) -> bool:
    """A debt is active while money is owed on it, whatever its status says"""
    if expense.kind != ExpenseKind.DEBT:
        return False
    return outstanding_balance(expense) > BALANCE_EPSILON


def is_active_subscription(expense: PendingExpense) -> bool:
    return expense.kind == ExpenseKind.SUBSCRIPTION and expense.status == ExpenseStatus.PENDING


def filter_active_debts(expenses: Iterable[PendingExpense]) -> List[PendingExpense]:
    """
    Active debts only.

    A debt with a positive balance that is still excluded indicates a
    classification bug and is reported as `debts.classification_anomaly`.
    """
    active = []
    for expense in expenses:
        if expense.kind == ExpenseKind.SUBSCRIPTION:
            continue

        if is_active_debt(expense):
            active.append(expense)
        elif outstanding_balance(expense) > BALANCE_EPSILON:
            diagnostics.emit(
                "debts.classification_anomaly",
                f"'{expense.description}' owes {outstanding_balance(expense):.2f} but was not classified active",
                level=logging.ERROR,
                expense_id=expense.id,
                outstanding=outstanding_balance(expense),
            )

    return active


def filter_active_subscriptions(expenses: Iterable[PendingExpense]) -> List[PendingExpense]:
    return [e for e in expenses if is_active_subscription(e)]


def total_outstanding(expenses: Iterable[PendingExpense]) -> float:
    """Sum of outstanding balances across debts; subscriptions are excluded"""
    return sum(outstanding_balance(e) for e in expenses if e.kind == ExpenseKind.DEBT)


def payment_progress_percent(expense: PendingExpense) -> float:
    if expense.total_amount == 0:
        return 100.0
    return min(100.0, expense.total_paid_amount / expense.total_amount * 100)


def days_overdue(due_date: str, today: Optional[date] = None) -> int:
    """Days past due (positive) or days remaining (negative); 0 for a blank or unreadable date"""
    try:
        due = parse_iso_date(due_date)
    except ValueError:
        return 0
    if due is None:
        return 0
    today = today or date.today()
    return (today - due).days


def is_overdue(expense: PendingExpense, today: Optional[date] = None) -> bool:
    if expense.status == ExpenseStatus.PAID:
        return False
    return days_overdue(expense.due_date, today) > 0


def validate_consistency(expenses: Iterable[PendingExpense]) -> List[str]:
    """Human-readable warnings for debts whose stored fields disagree"""
    warnings = []

    for expense in expenses:
        if expense.kind == ExpenseKind.SUBSCRIPTION:
            continue

        balance = outstanding_balance(expense)
        label = expense.description or expense.id or "<unnamed>"

        if balance > BALANCE_EPSILON and expense.status == ExpenseStatus.PAID:
            warnings.append(f"Debt '{label}': status=paid but outstanding={balance:.2f}")

        if expense.total_paid_amount > expense.total_amount + BALANCE_EPSILON:
            warnings.append(
                f"Debt '{label}': paid ({expense.total_paid_amount:.2f}) exceeds total ({expense.total_amount:.2f})"
            )

        if not expense.id:
            warnings.append(f"Debt '{label}': missing id")

    return warnings
