"""Payment validation and the new authoritative state a payment produces"""

import dataclasses
import math
from datetime import date
from typing import Iterable, Optional

from debt_tracker.domain.exceptions import (
    InsufficientFundsError,
    InvalidPaymentError,
    OverpaymentError,
)
from debt_tracker.domain.ledger import balance_for_account
from debt_tracker.domain.models import (
    Account,
    ExpenseKind,
    ExpenseStatus,
    LedgerEntry,
    PaymentIntent,
    PaymentType,
    PendingExpense,
)
from debt_tracker.domain.normalizer import BALANCE_EPSILON, outstanding_balance
from debt_tracker.utils.date_utils import add_months, parse_iso_date

# Slack allowed over the outstanding balance for rounded installment amounts
OVERPAYMENT_TOLERANCE = 0.1


def installment_amount(expense: PendingExpense) -> float:
    return expense.total_amount / expense.installment_count


def suggested_amount(expense: PendingExpense, payment_type: PaymentType) -> Optional[float]:
    """
    Pre-filled amount for a payment form.

    Installment -> one installment (never more than what is owed)
    SettleAll   -> the whole outstanding balance
    Partial     -> None, the user types the amount
    """
    balance = outstanding_balance(expense)
    if payment_type == PaymentType.INSTALLMENT:
        return round(min(installment_amount(expense), balance), 2)
    if payment_type == PaymentType.SETTLE_ALL:
        return round(balance, 2)
    return None


def installment_number(expense: PendingExpense, payment_type: PaymentType) -> Optional[int]:
    """Ordinal of the installment being paid, only for installment payments"""
    if payment_type != PaymentType.INSTALLMENT:
        return None
    return math.floor(expense.installments_paid) + 1


def validate_payment(
    intent: PaymentIntent,
    expense: PendingExpense,
    ledger_entries: Iterable[LedgerEntry],
    accounts: Iterable[Account],
) -> None:
    """
    Reject a payment before any remote call.

    Raises:
        InvalidPaymentError: amount <= 0 or intent targets another expense
        InsufficientFundsError: tracked funding account cannot cover the amount
        OverpaymentError: debt payment above outstanding balance (+ tolerance),
            or any payment on an already settled debt
    """
    if intent.expense_id != expense.id:
        raise InvalidPaymentError(f"Payment targets '{intent.expense_id}' but expense is '{expense.id}'")
    if not intent.amount or intent.amount <= 0:
        raise InvalidPaymentError(f"Payment amount must be positive, got {intent.amount}")

    available = balance_for_account(intent.funding_account, ledger_entries, accounts)
    if intent.amount > available:
        raise InsufficientFundsError(intent.funding_account, intent.amount, available)

    if expense.kind == ExpenseKind.DEBT:
        balance = outstanding_balance(expense)
        if balance <= BALANCE_EPSILON or intent.amount > balance + OVERPAYMENT_TOLERANCE:
            raise OverpaymentError(intent.amount, balance)


def roll_subscription(expense: PendingExpense, today: Optional[date] = None) -> PendingExpense:
    """Advance billing dates one calendar month; the charge stays pending"""
    try:
        due = parse_iso_date(expense.due_date) or today or date.today()
        closing = parse_iso_date(expense.closing_date)
    except ValueError as e:
        raise InvalidPaymentError(f"Unreadable billing date on '{expense.id}': {e}") from e

    return dataclasses.replace(
        expense,
        due_date=add_months(due).isoformat(),
        closing_date=add_months(closing).isoformat() if closing else expense.closing_date,
        status=ExpenseStatus.PENDING,
    )


def apply_debt_payment(expense: PendingExpense, amount: float) -> PendingExpense:
    """Accumulate a payment; paid total and installment fraction are capped"""
    per_installment = installment_amount(expense)
    new_total_paid = min(expense.total_amount, expense.total_paid_amount + amount)

    if per_installment > 0:
        new_installments = min(expense.installment_count, new_total_paid / per_installment)
    else:
        new_installments = float(expense.installment_count)

    settled = (
        new_installments >= expense.installment_count
        or expense.total_amount - new_total_paid <= BALANCE_EPSILON
    )

    return dataclasses.replace(
        expense,
        total_paid_amount=new_total_paid,
        installments_paid=new_installments,
        status=ExpenseStatus.PAID if settled else ExpenseStatus.PENDING,
    )


def apply_payment(expense: PendingExpense, intent: PaymentIntent, today: Optional[date] = None) -> PendingExpense:
    """Expected record after the store applies `intent`. No I/O."""
    if expense.kind == ExpenseKind.SUBSCRIPTION:
        return roll_subscription(expense, today)
    return apply_debt_payment(expense, intent.amount)
