"""
Balance normalization for pending expenses.

Invariants enforced on every normalized record:
- outstanding balance = total_amount - total_paid_amount, never negative
- status is PAID iff outstanding balance <= BALANCE_EPSILON
The stored status is informative only; the balance always wins.
"""

import dataclasses
import logging
import re
from typing import Any, Mapping, Optional, Union

from debt_tracker.domain.diagnostics import diagnostics
from debt_tracker.domain.models import ExpenseKind, ExpenseStatus, PendingExpense
from debt_tracker.utils.date_utils import clean_date_cell

# Floating point tolerance on balances, one cent
BALANCE_EPSILON = 0.01

_PLAIN_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def parse_number(value: Any) -> float:
    """
    Parse a spreadsheet cell into a float.

    Handles "2.500,00" (LATAM/EU), "2,500.00" (US), "S/ 1,234.56", "10,50",
    plain numbers and blanks (0.0). A lone separator followed by exactly three
    digits is read as a thousands separator.
    """
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)

    clean = re.sub(r"[^0-9.,-]", "", str(value))
    if not clean:
        return 0.0
    if _PLAIN_NUMBER.match(clean):
        return float(clean)

    if "." in clean and "," in clean:
        if clean.rfind(",") > clean.rfind("."):
            clean = clean.replace(".", "").replace(",", ".")
        else:
            clean = clean.replace(",", "")
    elif "," in clean:
        if clean.count(",") > 1:
            clean = clean.replace(",", "")
        elif len(clean.split(",")[1]) == 2:
            clean = clean.replace(",", ".")
        else:
            clean = clean.replace(",", "")
    elif "." in clean:
        if clean.count(".") > 1 or len(clean.split(".")[1]) == 3:
            clean = clean.replace(".", "")

    try:
        return float(clean)
    except ValueError:
        return 0.0


def outstanding_balance(expense: PendingExpense) -> float:
    """Single source of truth for what is still owed"""
    return max(0.0, expense.total_amount - expense.total_paid_amount)


def _parse_kind(value: Any) -> ExpenseKind:
    if isinstance(value, ExpenseKind):
        return value
    try:
        return ExpenseKind(str(value).strip().lower()) if value else ExpenseKind.DEBT
    except ValueError:
        return ExpenseKind.DEBT


def _parse_status(value: Any) -> Optional[ExpenseStatus]:
    if isinstance(value, ExpenseStatus):
        return value
    try:
        return ExpenseStatus(str(value).strip().lower()) if value else None
    except ValueError:
        return None


def _text(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value)


def normalize_expense(raw: Union[Mapping[str, Any], PendingExpense]) -> PendingExpense:
    """
    Build a canonical PendingExpense from a possibly incomplete record.

    - Missing (or zero) total_paid_amount with installments_paid > 0 is
      reconstructed as installments_paid * (total_amount / installment_count),
      which recovers records written before paid totals were tracked.
    - Status is corrected to agree with the outstanding balance.
    - Absent text fields become "" and absent kind becomes DEBT.

    Never raises. Corrections are reported on the diagnostics bus.
    """
    if isinstance(raw, PendingExpense):
        raw = dataclasses.asdict(raw)

    description = _text(raw, "description")
    total_amount = parse_number(raw.get("total_amount"))
    installment_count = int(parse_number(raw.get("installment_count"))) or 1
    if installment_count < 1:
        installment_count = 1
    installments_paid = max(0.0, parse_number(raw.get("installments_paid")))

    total_paid = max(0.0, parse_number(raw.get("total_paid_amount")))
    if total_paid == 0 and installments_paid > 0:
        total_paid = installments_paid * (total_amount / installment_count)
        diagnostics.emit(
            "expense.paid_amount_reconstructed",
            f"Paid total for '{description}' rebuilt from installments",
            expense_id=_text(raw, "id"),
            installments_paid=installments_paid,
            total_paid_amount=total_paid,
        )

    balance = max(0.0, total_amount - total_paid)
    status = _parse_status(raw.get("status"))

    if balance > BALANCE_EPSILON and status == ExpenseStatus.PAID:
        diagnostics.emit(
            "expense.status_corrected",
            f"'{description}' marked paid with {balance:.2f} outstanding, reset to pending",
            level=logging.WARNING,
            expense_id=_text(raw, "id"),
            outstanding=balance,
            from_status=status.value,
            to_status=ExpenseStatus.PENDING.value,
        )
        status = ExpenseStatus.PENDING
    elif balance <= BALANCE_EPSILON and status == ExpenseStatus.PENDING:
        diagnostics.emit(
            "expense.status_corrected",
            f"'{description}' has no outstanding balance, marked paid",
            level=logging.WARNING,
            expense_id=_text(raw, "id"),
            outstanding=balance,
            from_status=status.value,
            to_status=ExpenseStatus.PAID.value,
        )
        status = ExpenseStatus.PAID

    if status is None:
        status = ExpenseStatus.PENDING if balance > BALANCE_EPSILON else ExpenseStatus.PAID

    return PendingExpense(
        id=_text(raw, "id"),
        kind=_parse_kind(raw.get("kind")),
        total_amount=total_amount,
        installment_count=installment_count,
        installments_paid=installments_paid,
        total_paid_amount=total_paid,
        status=status,
        account=_text(raw, "account"),
        description=description,
        category=_text(raw, "category"),
        expense_date=clean_date_cell(_text(raw, "expense_date")),
        closing_date=clean_date_cell(_text(raw, "closing_date")),
        due_date=clean_date_cell(_text(raw, "due_date")),
        notes=_text(raw, "notes"),
        timestamp=_text(raw, "timestamp"),
    )
