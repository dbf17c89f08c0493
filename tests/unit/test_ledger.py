"""Unit tests for account balances derived from the ledger"""

import math
from debt_tracker.domain.ledger import available_balance, balance_for_account
from debt_tracker.domain.models import Account, AccountType, EntryType, LedgerEntry


def test_available_balance_sums_by_entry_type(wallet_snapshot):
    """500 income - 250 expense - 100 goal contribution + 50 goal release"""
    assert available_balance("Billetera", wallet_snapshot.ledger_entries) == 200


def test_available_balance_only_counts_matching_account(wallet_snapshot):
    entries = wallet_snapshot.ledger_entries + [
        LedgerEntry("2024-01-08", "Salary", "Side job", 1000.0, "BCP Ahorros", EntryType.INCOME),
    ]

    assert available_balance("Billetera", entries) == 200
    assert available_balance("BCP Ahorros", entries) == 1000


def test_available_balance_adds_credit_limit():
    entries = [LedgerEntry("2024-01-02", "Rent", "January", 300.0, "Debit BBVA", EntryType.EXPENSE)]

    assert available_balance("Debit BBVA", entries, credit_limit=500) == 200


def test_balance_for_credit_account_is_untracked(wallet_snapshot):
    assert balance_for_account("Visa BCP", wallet_snapshot.ledger_entries, wallet_snapshot.accounts) == math.inf
    assert balance_for_account("Unknown", wallet_snapshot.ledger_entries, wallet_snapshot.accounts) == math.inf


def test_balance_for_account_uses_limit_only_on_debit():
    entries = [LedgerEntry("2024-01-02", "Food", "Lunch", 30.0, "Prepaid", EntryType.EXPENSE)]
    accounts = [
        Account("Prepaid", AccountType.DEBIT, credit_limit=100.0),
        Account("Cash", AccountType.CASH, credit_limit=100.0),
    ]

    assert balance_for_account("Prepaid", entries, accounts) == 70
    assert balance_for_account("Cash", entries, accounts) == 0
