"""Pytest fixtures for testing"""

import dataclasses
import pytest
from datetime import date
from typing import Any, Dict, List, Mapping
from fastapi.testclient import TestClient

from debt_tracker.api.dependencies import get_credential, get_gateway, get_reconciler
from debt_tracker.api.main import create_app
from debt_tracker.domain.diagnostics import DiagnosticEvent, diagnostics
from debt_tracker.domain.models import (
    Account,
    AccountType,
    EntryType,
    ExpenseKind,
    ExpenseStatus,
    LedgerEntry,
    PendingExpense,
    Snapshot,
)
from debt_tracker.infrastructure.clients.gateway import Credential, SyncGateway
from debt_tracker.services.reconciliation import PaymentReconciler

TEST_CREDENTIAL = Credential(script_url="https://script.example.com/macros/s/test/exec", pin="1234")
TODAY = date(2024, 1, 15)


class FakeGateway(SyncGateway):
    """Scripted gateway: serves snapshots in order (last one repeats), records mutations"""

    def __init__(self, snapshots: List[Snapshot], submit_error: Exception | None = None):
        self.snapshots = list(snapshots)
        self.submit_error = submit_error
        self.mutations: List[Dict[str, Any]] = []
        self.fetches = 0

    async def fetch_snapshot(self, credential: Credential) -> Snapshot:
        self.fetches += 1
        if len(self.snapshots) > 1:
            return self.snapshots.pop(0)
        return self.snapshots[0]

    async def submit_mutation(self, credential: Credential, payload: Mapping[str, Any]) -> None:
        if self.submit_error:
            raise self.submit_error
        self.mutations.append(dict(payload))


@pytest.fixture
def make_debt():
    """Factory for normalized debts: 900 over 3 installments, nothing paid"""

    def factory(**overrides) -> PendingExpense:
        fields = dict(
            id="GP001",
            kind=ExpenseKind.DEBT,
            total_amount=900.0,
            installment_count=3,
            installments_paid=0.0,
            total_paid_amount=0.0,
            status=ExpenseStatus.PENDING,
            account="Visa BCP",
            description="Laptop",
            category="Technology",
            expense_date="2023-12-10",
            closing_date="2024-01-20",
            due_date="2024-02-05",
        )
        fields.update(overrides)
        return PendingExpense(**fields)

    return factory


@pytest.fixture
def make_subscription(make_debt):
    def factory(**overrides) -> PendingExpense:
        fields = dict(
            id="GP100",
            kind=ExpenseKind.SUBSCRIPTION,
            total_amount=44.9,
            installment_count=1,
            description="Streaming",
            closing_date="2024-01-31",
            due_date="2024-01-31",
        )
        fields.update(overrides)
        return make_debt(**fields)

    return factory


@pytest.fixture
def wallet_snapshot() -> Snapshot:
    """Tracked cash wallet holding 200 and an untracked credit card"""
    return Snapshot(
        pending_expenses=[],
        ledger_entries=[
            LedgerEntry("2024-01-01", "Salary", "January pay", 500.0, "Billetera", EntryType.INCOME),
            LedgerEntry("2024-01-03", "Food", "Groceries", 250.0, "Billetera", EntryType.EXPENSE),
            LedgerEntry("2024-01-05", "Savings", "Trip fund", 100.0, "Billetera", EntryType.GOAL_CONTRIBUTION),
            LedgerEntry("2024-01-07", "Savings", "Trip fund refund", 50.0, "Billetera", EntryType.GOAL_RELEASE),
        ],
        accounts=[
            Account("Billetera", AccountType.CASH),
            Account("Visa BCP", AccountType.CREDIT, credit_limit=5000.0, annual_rate_percent=60.0),
        ],
    )


def with_expenses(snapshot: Snapshot, *expenses: PendingExpense) -> Snapshot:
    return dataclasses.replace(snapshot, pending_expenses=list(expenses))


@pytest.fixture
def snapshot_with():
    return with_expenses


@pytest.fixture
def gateway_factory():
    return FakeGateway


@pytest.fixture
def sleeps():
    """Async sleep stand-in recording requested delays"""
    calls: List[float] = []

    async def fake_sleep(delay: float) -> None:
        calls.append(delay)

    fake_sleep.calls = calls
    return fake_sleep


@pytest.fixture
def make_reconciler(sleeps):
    def factory(gateway: SyncGateway, **overrides) -> PaymentReconciler:
        options = dict(settle_seconds=3.0, retry_settle_seconds=6.0, tolerance=0.5, sleep=sleeps, today=lambda: TODAY)
        options.update(overrides)
        return PaymentReconciler(gateway, TEST_CREDENTIAL, **options)

    return factory


@pytest.fixture
def events() -> List[DiagnosticEvent]:
    """Collect diagnostics emitted during a test"""
    collected: List[DiagnosticEvent] = []
    unsubscribe = diagnostics.subscribe(collected.append)
    yield collected
    unsubscribe()


@pytest.fixture
def api(make_reconciler):
    """Build a TestClient whose spreadsheet is the given FakeGateway"""

    def factory(gateway: FakeGateway) -> TestClient:
        app = create_app()
        app.dependency_overrides[get_gateway] = lambda: gateway
        app.dependency_overrides[get_credential] = lambda: TEST_CREDENTIAL
        app.dependency_overrides[get_reconciler] = lambda: make_reconciler(gateway)
        return TestClient(app)

    return factory
