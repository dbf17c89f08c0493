"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from debt_tracker.config import settings
from debt_tracker.infrastructure.clients.gateway import Credential, SyncGateway
from debt_tracker.infrastructure.clients.sheet import SheetClient
from debt_tracker.services.expense_book import ExpenseBook
from debt_tracker.services.reconciliation import PaymentReconciler


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_gateway() -> SyncGateway:
    """Provide spreadsheet endpoint client instance"""
    return SheetClient()


def get_credential() -> Credential:
    """Credential for the configured spreadsheet"""
    return Credential.from_settings(settings)


def get_reconciler(
    gateway: SyncGateway = Depends(get_gateway),
    credential: Credential = Depends(get_credential),
) -> PaymentReconciler:
    return PaymentReconciler(gateway, credential)


def get_expense_book(request: Request) -> ExpenseBook:
    """Application-wide local copy of pending expenses"""
    return request.app.state.expense_book
