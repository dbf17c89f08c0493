"""Pydantic schemas for the spreadsheet script wire format"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from debt_tracker.domain.models import (
    Account,
    AccountType,
    EntryType,
    LedgerEntry,
    PaymentType,
    Snapshot,
)
from debt_tracker.domain.normalizer import normalize_expense

# Spreadsheet cells arrive as numbers or locale formatted strings
Cell = Union[float, str, None]


class PendingExpenseRecord(BaseModel):
    """Row of the pending expenses sheet; gaps are filled by the normalizer"""

    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    kind: Optional[str] = None
    total_amount: Cell = None
    installment_count: Cell = None
    installments_paid: Cell = None
    total_paid_amount: Cell = None
    status: Optional[str] = None
    account: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    expense_date: Optional[str] = None
    closing_date: Optional[str] = None
    due_date: Optional[str] = None
    notes: Optional[str] = None
    timestamp: Optional[str] = None

    def to_raw(self) -> Dict[str, Any]:
        raw = self.model_dump(exclude_none=True)
        if "id" in raw:
            raw["id"] = str(raw["id"])
        return raw


class LedgerEntryRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: str
    category: str = ""
    description: str = ""
    amount: float
    account: str
    entry_type: EntryType
    timestamp: str = ""


class AccountRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    alias: str = Field(..., min_length=1)
    account_type: AccountType
    credit_limit: float = 0.0
    annual_rate_percent: Optional[float] = None


class SnapshotPayload(BaseModel):
    """Response body of the GET endpoint"""

    pending_expenses: List[PendingExpenseRecord]
    ledger_entries: List[LedgerEntryRecord]
    accounts: List[AccountRecord]

    def to_domain(self) -> Snapshot:
        return Snapshot(
            pending_expenses=[normalize_expense(r.to_raw()) for r in self.pending_expenses],
            ledger_entries=[LedgerEntry(**r.model_dump()) for r in self.ledger_entries],
            accounts=[Account(**r.model_dump()) for r in self.accounts],
        )


class PaymentMutation(BaseModel):
    """Payment row POSTed to the store; the store updates the expense itself"""

    sheet: Literal["payments"] = "payments"
    payment_id: str
    expense_id: str
    payment_date: date
    account: str
    funding_account: str
    description: str
    amount: float = Field(..., gt=0)
    payment_type: PaymentType
    installment_number: Optional[int] = None
    timestamp: str

    def to_form(self) -> Dict[str, str]:
        """Flat string form fields; absent values are omitted"""
        data = self.model_dump(mode="json", exclude_none=True)
        return {key: str(value) for key, value in data.items()}
