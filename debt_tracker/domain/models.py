"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ExpenseKind(str, Enum):
    DEBT = "debt"
    SUBSCRIPTION = "subscription"


class ExpenseStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class PaymentType(str, Enum):
    INSTALLMENT = "installment"
    SETTLE_ALL = "settle_all"
    PARTIAL = "partial"


class EntryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    GOAL_CONTRIBUTION = "goal_contribution"
    GOAL_RELEASE = "goal_release"


class AccountType(str, Enum):
    CREDIT = "credit"  # Draws on a credit line, balance not tracked
    DEBIT = "debit"
    CASH = "cash"


@dataclass
class PendingExpense:
    """A debt paid in installments or a recurring subscription charge.

    Outstanding balance is never stored; see normalizer.outstanding_balance.
    `status` is informative and always re-derived from the balance.
    """

    id: str
    kind: ExpenseKind
    total_amount: float
    installment_count: int
    installments_paid: float  # Fractional: partial payments accumulate
    total_paid_amount: float
    status: ExpenseStatus
    account: str = ""
    description: str = ""
    category: str = ""
    expense_date: str = ""
    closing_date: str = ""
    due_date: str = ""
    notes: str = ""
    timestamp: str = ""


@dataclass(frozen=True)
class PaymentIntent:
    """Ephemeral request to pay against one pending expense"""

    expense_id: str
    amount: float
    payment_type: PaymentType
    funding_account: str


@dataclass(frozen=True)
class LedgerEntry:
    """Transaction history record, immutable once written"""

    date: str
    category: str
    description: str
    amount: float
    account: str
    entry_type: EntryType
    timestamp: str = ""


@dataclass(frozen=True)
class Account:
    """Funding account or card"""

    alias: str
    account_type: AccountType
    credit_limit: float = 0.0
    annual_rate_percent: Optional[float] = None  # Effective annual rate, e.g. 60 = 60%

    @property
    def is_tracked(self) -> bool:
        return self.account_type != AccountType.CREDIT


@dataclass
class Snapshot:
    """Full state read from the remote store"""

    pending_expenses: List[PendingExpense] = field(default_factory=list)
    ledger_entries: List[LedgerEntry] = field(default_factory=list)
    accounts: List[Account] = field(default_factory=list)

    def find_expense(self, expense_id: str) -> Optional[PendingExpense]:
        for expense in self.pending_expenses:
            if expense.id == expense_id:
                return expense
        return None


@dataclass(frozen=True)
class SimulationResult:
    """Equal-installment schedule summary, display only"""

    installment_amount: float
    total_payable: float
    total_interest: float
    extra_paid_percentage: float
