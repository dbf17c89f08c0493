"""POST /v1/payments - Pay a debt installment or renew a subscription"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from debt_tracker.api.v1.schemas import ExpenseSchema, PaymentRequest, PaymentResponse
from debt_tracker.api.dependencies import get_expense_book, get_reconciler, get_request_id
from debt_tracker.domain.exceptions import (
    InsufficientFundsError,
    InvalidCredentialError,
    InvalidPaymentError,
    OverpaymentError,
    PaymentInFlightError,
    ReconciliationError,
    RecordNotFoundError,
    SubmissionFailedError,
    SyncGatewayError,
    VerificationMismatchError,
)
from debt_tracker.domain.models import PaymentIntent
from debt_tracker.infrastructure.observability.logging import log_payment
from debt_tracker.services.expense_book import ExpenseBook
from debt_tracker.services.reconciliation import PaymentReconciler, outcome_label

router = APIRouter()

# Validation failures are user-correctable; the rest are terminal for this attempt
_STATUS_CODES = (
    (InsufficientFundsError, 422),
    (OverpaymentError, 422),
    (InvalidPaymentError, 422),
    (InvalidCredentialError, 401),
    (RecordNotFoundError, 404),
    (VerificationMismatchError, 409),
    (SubmissionFailedError, 502),
    (SyncGatewayError, 502),
)


def _status_for(error: ReconciliationError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


@router.post("/payments", response_model=PaymentResponse)
async def create_payment(
    request_body: PaymentRequest,
    request: Request,
    reconciler: PaymentReconciler = Depends(get_reconciler),
    book: ExpenseBook = Depends(get_expense_book),
):
    """
    Apply a payment and wait until the spreadsheet shows it.

    Flow:
    1. Read the current snapshot (prior state)
    2. Validate against the funding account balance and outstanding debt
    3. Submit the payment row (fire-and-forget)
    4. Re-read after a settling delay, once more after a longer one on mismatch
    5. Commit the verified record to the local book and return it

    Any failure leaves the local book unchanged.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    intent = PaymentIntent(
        expense_id=request_body.expense_id,
        amount=request_body.amount,
        payment_type=request_body.payment_type,
        funding_account=request_body.funding_account,
    )

    try:
        receipt = await reconciler.pay(intent, book)

    except PaymentInFlightError as e:
        raise HTTPException(status_code=409, detail=str(e))

    except ReconciliationError as e:
        duration_ms = (time.time() - start_time) * 1000
        log_payment(request_id, intent.expense_id, outcome_label(e), intent.amount, 0, duration_ms)
        raise HTTPException(status_code=_status_for(e), detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    log_payment(request_id, intent.expense_id, "verified", intent.amount, receipt.attempts, duration_ms)

    return PaymentResponse(
        payment_id=receipt.payment_id,
        verification_attempts=receipt.attempts,
        expense=ExpenseSchema.from_domain(receipt.expense),
    )
