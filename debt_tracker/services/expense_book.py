"""Local view of pending expenses, replaced only by verified remote state"""

from contextlib import contextmanager
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Set

from debt_tracker.domain.exceptions import PaymentInFlightError
from debt_tracker.domain.models import PendingExpense, Snapshot


class ExpenseBook:
    """
    Application-side copy of the pending expenses.

    Every update swaps in a whole new mapping, so readers see either the
    state before a verified payment or the state after it, never a mix.
    """

    def __init__(self) -> None:
        self._expenses: Mapping[str, PendingExpense] = MappingProxyType({})
        self._in_flight: Set[str] = set()

    def load(self, snapshot: Snapshot) -> None:
        self._expenses = MappingProxyType({e.id: e for e in snapshot.pending_expenses})

    def get(self, expense_id: str) -> Optional[PendingExpense]:
        return self._expenses.get(expense_id)

    def all(self) -> List[PendingExpense]:
        return list(self._expenses.values())

    def commit(self, expense: PendingExpense) -> None:
        """Adopt a verified record"""
        updated: Dict[str, PendingExpense] = dict(self._expenses)
        updated[expense.id] = expense
        self._expenses = MappingProxyType(updated)

    def is_in_flight(self, expense_id: str) -> bool:
        return expense_id in self._in_flight

    @contextmanager
    def payment_slot(self, expense_id: str) -> Iterator[None]:
        """
        Hold the single payment slot for an expense.

        The reconciler itself takes no locks; callers use this to keep at most
        one submission per expense in flight.
        """
        if expense_id in self._in_flight:
            raise PaymentInFlightError(f"A payment for '{expense_id}' is already being processed")
        self._in_flight.add(expense_id)
        try:
            yield
        finally:
            self._in_flight.discard(expense_id)
