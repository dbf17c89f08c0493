"""Per-account available balance derived from the transaction history"""

import math
from typing import Iterable, Optional

from debt_tracker.domain.models import Account, AccountType, EntryType, LedgerEntry

_INFLOWS = (EntryType.INCOME, EntryType.GOAL_RELEASE)
_OUTFLOWS = (EntryType.EXPENSE, EntryType.GOAL_CONTRIBUTION)


def available_balance(
    account_ref: str,
    entries: Iterable[LedgerEntry],
    credit_limit: float = 0.0,
) -> float:
    """
    credit_limit + income + goal releases - expenses - goal contributions,
    counting only entries booked against `account_ref`.
    """
    balance = credit_limit
    for entry in entries:
        if entry.account != account_ref:
            continue
        if entry.entry_type in _INFLOWS:
            balance += entry.amount
        elif entry.entry_type in _OUTFLOWS:
            balance -= entry.amount
    return balance


def find_account(account_ref: str, accounts: Iterable[Account]) -> Optional[Account]:
    for account in accounts:
        if account.alias == account_ref:
            return account
    return None


def balance_for_account(
    account_ref: str,
    entries: Iterable[LedgerEntry],
    accounts: Iterable[Account],
) -> float:
    """
    Available balance for a tracked account, math.inf otherwise.

    Credit cards draw on a credit line and unknown accounts are not validated,
    so neither can block a payment.
    """
    account = find_account(account_ref, accounts)
    if account is None or not account.is_tracked:
        return math.inf
    # Only debit/prepaid accounts carry an overdraft line; wallets start at zero
    credit_limit = account.credit_limit if account.account_type == AccountType.DEBIT else 0.0
    return available_balance(account_ref, entries, credit_limit)
