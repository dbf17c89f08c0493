"""
Payment reconciliation against an eventually consistent store.

Lifecycle of one attempt:

    INITIATED -> VALIDATED -> SUBMITTED -> AWAITING_VERIFICATION
        -> VERIFIED | MISMATCH (retried once) | FAILED

The store gives no write confirmation, so a payment only counts once a fresh
snapshot shows it. The verified remote record is returned, not the locally
predicted one, because the store may apply its own clamping.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable

from debt_tracker.config import settings
from debt_tracker.domain.diagnostics import EventBus, diagnostics
from debt_tracker.domain.exceptions import (
    InsufficientFundsError,
    InvalidCredentialError,
    InvalidPaymentError,
    OverpaymentError,
    ReconciliationError,
    RecordNotFoundError,
    SnapshotSchemaError,
    SubmissionFailedError,
    SyncGatewayError,
    VerificationMismatchError,
)
from debt_tracker.domain.models import ExpenseKind, PaymentIntent, PendingExpense, Snapshot
from debt_tracker.domain.payments import apply_payment, installment_number, validate_payment
from debt_tracker.infrastructure.clients.gateway import Credential, SyncGateway
from debt_tracker.infrastructure.clients.schemas import PaymentMutation
from debt_tracker.infrastructure.observability.metrics import record_payment
from debt_tracker.services.expense_book import ExpenseBook
from debt_tracker.utils.ids import generate_id


class PaymentState(str, Enum):
    INITIATED = "initiated"
    VALIDATED = "validated"
    SUBMITTED = "submitted"
    AWAITING_VERIFICATION = "awaiting_verification"
    VERIFIED = "verified"
    MISMATCH = "mismatch"
    FAILED = "failed"


# Order matters: subclasses before their bases
_OUTCOMES = (
    (InsufficientFundsError, "insufficient_funds"),
    (OverpaymentError, "overpayment"),
    (InvalidPaymentError, "invalid_payment"),
    (SubmissionFailedError, "submission_failed"),
    (RecordNotFoundError, "record_not_found"),
    (VerificationMismatchError, "verification_mismatch"),
    (InvalidCredentialError, "invalid_credential"),
    (SnapshotSchemaError, "snapshot_schema"),
    (SyncGatewayError, "gateway_unavailable"),
)


def outcome_label(error: ReconciliationError) -> str:
    for error_type, label in _OUTCOMES:
        if isinstance(error, error_type):
            return label
    return "failed"


@dataclass
class PaymentReceipt:
    """Verified outcome of one payment"""

    payment_id: str
    expense: PendingExpense
    attempts: int  # Snapshot reads needed to see the write


@dataclass
class _Attempt:
    payment_id: str
    expense_id: str
    reads: int = 0


class PaymentReconciler:
    """Applies payments through a SyncGateway and verifies them by re-reading"""

    def __init__(
        self,
        gateway: SyncGateway,
        credential: Credential,
        settle_seconds: float | None = None,
        retry_settle_seconds: float | None = None,
        tolerance: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        today: Callable[[], date] = date.today,
        bus: EventBus = diagnostics,
    ):
        self.gateway = gateway
        self.credential = credential
        self.settle_seconds = settings.verify_settle_seconds if settle_seconds is None else settle_seconds
        self.retry_settle_seconds = (
            settings.verify_retry_settle_seconds if retry_settle_seconds is None else retry_settle_seconds
        )
        self.tolerance = settings.verification_tolerance if tolerance is None else tolerance
        self.sleep = sleep
        self.today = today
        self.bus = bus

    def _transition(self, attempt: _Attempt, state: PaymentState) -> None:
        self.bus.emit(
            "payment.state_changed",
            f"Payment {attempt.payment_id} -> {state.value}",
            level=logging.DEBUG,
            payment_id=attempt.payment_id,
            expense_id=attempt.expense_id,
            state=state.value,
        )

    def build_mutation(self, intent: PaymentIntent, expense: PendingExpense, payment_id: str) -> PaymentMutation:
        return PaymentMutation(
            payment_id=payment_id,
            expense_id=expense.id,
            payment_date=self.today(),
            account=expense.account,
            funding_account=intent.funding_account,
            description=expense.description,
            amount=intent.amount,
            payment_type=intent.payment_type,
            installment_number=installment_number(expense, intent.payment_type),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    def _compare(self, expected: PendingExpense, remote: PendingExpense) -> tuple[bool, str, Any, Any]:
        """(matches, field, expected value, actual value)"""
        if expected.kind == ExpenseKind.SUBSCRIPTION:
            return remote.due_date == expected.due_date, "due_date", expected.due_date, remote.due_date

        diff = abs(remote.total_paid_amount - expected.total_paid_amount)
        return (
            diff <= self.tolerance,
            "total_paid_amount",
            round(expected.total_paid_amount, 2),
            round(remote.total_paid_amount, 2),
        )

    async def submit_payment(
        self,
        intent: PaymentIntent,
        expense: PendingExpense,
        snapshot: Snapshot,
    ) -> PendingExpense:
        """
        Validate, submit, and verify one payment.

        `snapshot` is the prior state used for validation (ledger entries and
        accounts). Returns the verified remote record. On any failure raises a
        ReconciliationError and the caller keeps its local state as it was.

        Raises:
            InvalidPaymentError, InsufficientFundsError, OverpaymentError:
                rejected locally, nothing sent
            SubmissionFailedError: POST failed, not retried
            RecordNotFoundError: expense missing after the settling delay
            VerificationMismatchError: still different after one retry
            InvalidCredentialError, SyncGatewayError: verification read failed
        """
        receipt = await self.reconcile(intent, expense, snapshot)
        return receipt.expense

    async def reconcile(self, intent: PaymentIntent, expense: PendingExpense, snapshot: Snapshot) -> PaymentReceipt:
        """submit_payment, returning the payment id and read count as well"""
        attempt = self._start(expense.id)
        return await self._reconcile(attempt, intent, expense, snapshot)

    def _start(self, expense_id: str) -> _Attempt:
        attempt = _Attempt(payment_id=generate_id("PG"), expense_id=expense_id)
        self._transition(attempt, PaymentState.INITIATED)
        return attempt

    def _fail(self, attempt: _Attempt, error: ReconciliationError) -> None:
        self._transition(attempt, PaymentState.FAILED)
        self.bus.emit(
            "payment.failed",
            f"Payment {attempt.payment_id} failed: {error}",
            level=logging.WARNING,
            payment_id=attempt.payment_id,
            expense_id=attempt.expense_id,
            outcome=outcome_label(error),
            error=str(error),
        )
        record_payment(outcome_label(error), attempt.reads)

    async def _reconcile(
        self,
        attempt: _Attempt,
        intent: PaymentIntent,
        expense: PendingExpense,
        snapshot: Snapshot,
    ) -> PaymentReceipt:
        try:
            validate_payment(intent, expense, snapshot.ledger_entries, snapshot.accounts)
            expected = apply_payment(expense, intent, self.today())
            self._transition(attempt, PaymentState.VALIDATED)

            mutation = self.build_mutation(intent, expense, attempt.payment_id)
            await self.gateway.submit_mutation(self.credential, mutation.to_form())
            self._transition(attempt, PaymentState.SUBMITTED)

            verified = await self._verify(attempt, expected)

        except ReconciliationError as e:
            self._fail(attempt, e)
            raise

        self._transition(attempt, PaymentState.VERIFIED)
        self.bus.emit(
            "payment.verified",
            f"Payment {attempt.payment_id} verified after {attempt.reads} read(s)",
            payment_id=attempt.payment_id,
            expense_id=expense.id,
            total_paid_amount=verified.total_paid_amount,
            attempts=attempt.reads,
        )
        record_payment("verified", attempt.reads)
        return PaymentReceipt(payment_id=attempt.payment_id, expense=verified, attempts=attempt.reads)

    async def _verify(self, attempt: _Attempt, expected: PendingExpense) -> PendingExpense:
        delays = (self.settle_seconds, self.retry_settle_seconds)
        field, expected_value, actual_value = "", None, None

        for read, delay in enumerate(delays, start=1):
            self._transition(attempt, PaymentState.AWAITING_VERIFICATION)
            await self.sleep(delay)

            attempt.reads = read
            fresh = await self.gateway.fetch_snapshot(self.credential)
            remote = fresh.find_expense(expected.id)
            if remote is None:
                raise RecordNotFoundError(expected.id)

            matches, field, expected_value, actual_value = self._compare(expected, remote)
            if matches:
                return remote

            self._transition(attempt, PaymentState.MISMATCH)
            if read < len(delays):
                self.bus.emit(
                    "payment.verification_retry",
                    f"Payment {attempt.payment_id} not visible yet, re-reading in {delays[read]}s",
                    payment_id=attempt.payment_id,
                    expense_id=expected.id,
                    expected=expected_value,
                    actual=actual_value,
                )

        raise VerificationMismatchError(field, expected_value, actual_value)

    async def pay(self, intent: PaymentIntent, book: ExpenseBook) -> PaymentReceipt:
        """
        Caller flow: hold the expense's payment slot, read the prior state,
        reconcile, and commit the verified record into the book.

        The book is written exactly once, and only after verification.
        A failed prior read is reported like any other failed attempt.
        """
        with book.payment_slot(intent.expense_id):
            attempt = self._start(intent.expense_id)
            try:
                prior = await self.gateway.fetch_snapshot(self.credential)
                expense = prior.find_expense(intent.expense_id)
                if expense is None:
                    raise RecordNotFoundError(intent.expense_id)
            except ReconciliationError as e:
                self._fail(attempt, e)
                raise

            receipt = await self._reconcile(attempt, intent, expense, prior)
            book.commit(receipt.expense)
            return receipt
