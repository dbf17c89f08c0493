"""Domain-specific exceptions"""

from typing import Any


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ReconciliationError(DomainException):
    """A payment could not be applied and verified; local state must stay untouched"""

    pass


class InvalidPaymentError(ReconciliationError):
    """Payment intent is malformed (non-positive amount, wrong expense) or the expense has an unreadable billing date"""

    pass


class InsufficientFundsError(ReconciliationError):
    """Funding account does not hold enough to cover the payment"""

    def __init__(self, account: str, requested: float, available: float):
        self.account = account
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds in '{account}': requested {requested:.2f}, available {available:.2f}"
        )


class OverpaymentError(ReconciliationError):
    """Payment exceeds what is still owed on a debt"""

    def __init__(self, requested: float, outstanding: float):
        self.requested = requested
        self.outstanding = outstanding
        super().__init__(f"Payment of {requested:.2f} exceeds outstanding balance {outstanding:.2f}")


class SubmissionFailedError(ReconciliationError):
    """Transport failure while sending a mutation. Never retried."""

    pass


class RecordNotFoundError(ReconciliationError):
    """Expense missing from the remote snapshot after submission"""

    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__(f"Expense '{expense_id}' not found in remote snapshot")


class VerificationMismatchError(ReconciliationError):
    """Remote state still differs from the expected update after the retry"""

    def __init__(self, field: str, expected: Any, actual: Any):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"Verification mismatch on {field}: expected {expected}, got {actual}")


class InvalidCredentialError(ReconciliationError):
    """Script URL or PIN missing, or rejected by the store"""

    pass


class SyncGatewayError(ReconciliationError):
    """Remote store unreachable or returned an HTTP error on read"""

    pass


class SnapshotSchemaError(SyncGatewayError):
    """Snapshot payload does not match the expected schema"""

    pass


class PaymentInFlightError(DomainException):
    """Another payment for the same expense has not finished yet"""

    pass
