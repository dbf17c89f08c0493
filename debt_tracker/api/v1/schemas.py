"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import List, Optional

from debt_tracker.domain.debts import days_overdue, is_overdue, payment_progress_percent
from debt_tracker.domain.models import ExpenseKind, ExpenseStatus, PaymentType, PendingExpense
from debt_tracker.domain.normalizer import outstanding_balance


class ExpenseSchema(BaseModel):
    """Pending expense with derived balance figures"""

    id: str
    kind: ExpenseKind
    description: str
    category: str
    account: str
    total_amount: float
    installment_count: int
    installments_paid: float
    total_paid_amount: float
    outstanding_balance: float
    progress_percent: float
    status: ExpenseStatus
    closing_date: str
    due_date: str
    days_overdue: int
    overdue: bool

    @classmethod
    def from_domain(cls, expense: PendingExpense) -> "ExpenseSchema":
        return cls(
            id=expense.id,
            kind=expense.kind,
            description=expense.description,
            category=expense.category,
            account=expense.account,
            total_amount=expense.total_amount,
            installment_count=expense.installment_count,
            installments_paid=expense.installments_paid,
            total_paid_amount=expense.total_paid_amount,
            outstanding_balance=outstanding_balance(expense),
            progress_percent=payment_progress_percent(expense),
            status=expense.status,
            closing_date=expense.closing_date,
            due_date=expense.due_date,
            days_overdue=days_overdue(expense.due_date),
            overdue=is_overdue(expense),
        )


class DebtsResponse(BaseModel):
    """Response for GET /v1/debts"""

    debts: List[ExpenseSchema]
    subscriptions: List[ExpenseSchema]
    total_outstanding: float
    warnings: List[str]


class PaymentRequest(BaseModel):
    """Request body for POST /v1/payments"""

    expense_id: str = Field(..., min_length=1, description="Pending expense identifier")
    amount: float = Field(..., gt=0, description="Amount to pay")
    payment_type: PaymentType
    funding_account: str = Field(..., min_length=1, description="Account the money comes from")


class PaymentResponse(BaseModel):
    """Response for POST /v1/payments"""

    payment_id: str
    verification_attempts: int
    expense: ExpenseSchema


class SimulationRequest(BaseModel):
    """Request body for POST /v1/simulations"""

    principal: float
    installments: int
    annual_rate_percent: Optional[float] = None


class SimulationResponse(BaseModel):
    installment_amount: float
    total_payable: float
    total_interest: float
    extra_paid_percentage: float
