"""
Mock spreadsheet script endpoint.

Behaves like the deployed script: GET returns the whole sheet state when the
PIN matches, POST appends rows and applies payments to the pending expense
server-side. Writes can be held back for a number of reads to imitate the
delayed visibility of the real store.
"""

import calendar
import copy
from datetime import date
from typing import Any, Dict, List

from fastapi import FastAPI, Request

app = FastAPI(title="Mock Sheet Script", version="1.0.0")


def _next_month(value: str) -> str:
    current = date.fromisoformat(value)
    year = current.year + current.month // 12
    month = current.month % 12 + 1
    day = min(current.day, calendar.monthrange(year, month)[1])
    return date(year, month, day).isoformat()


class SheetStore:
    """In-memory sheets plus knobs for consistency tests"""

    def __init__(self) -> None:
        self.reset()

    def reset(
        self,
        pin: str = "1234",
        pending_expenses: List[Dict[str, Any]] | None = None,
        ledger_entries: List[Dict[str, Any]] | None = None,
        accounts: List[Dict[str, Any]] | None = None,
        visibility_lag: int = 0,
        paid_drift: float = 0.0,
    ) -> None:
        self.pin = pin
        self.pending_expenses = copy.deepcopy(pending_expenses or [])
        self.ledger_entries = copy.deepcopy(ledger_entries or [])
        self.accounts = copy.deepcopy(accounts or [])
        self.payments: List[Dict[str, Any]] = []
        self.visibility_lag = visibility_lag  # Reads a write stays invisible for
        self.paid_drift = paid_drift  # Added to applied paid totals
        self.queued: List[Dict[str, Any]] = []
        self.reads = 0

    def snapshot(self) -> Dict[str, Any]:
        self.reads += 1
        still_hidden = []
        for write in self.queued:
            if write["visible_after"] <= self.reads:
                self._apply_payment(write["form"])
            else:
                still_hidden.append(write)
        self.queued = still_hidden

        return {
            "pending_expenses": self.pending_expenses,
            "ledger_entries": self.ledger_entries,
            "accounts": self.accounts,
        }

    def record_payment(self, form: Dict[str, str]) -> None:
        if self.visibility_lag:
            self.queued.append({"form": form, "visible_after": self.reads + self.visibility_lag + 1})
        else:
            self._apply_payment(form)

    def _apply_payment(self, form: Dict[str, str]) -> None:
        self.payments.append(form)
        amount = float(form["amount"])

        for row in self.pending_expenses:
            if row.get("id") != form["expense_id"]:
                continue

            if row.get("kind") == "subscription":
                row["due_date"] = _next_month(row["due_date"])
                if row.get("closing_date"):
                    row["closing_date"] = _next_month(row["closing_date"])
                row["status"] = "pending"
            else:
                total = float(row["total_amount"])
                count = int(row.get("installment_count") or 1)
                paid = min(float(row.get("total_paid_amount") or 0) + amount, total) + self.paid_drift
                row["total_paid_amount"] = paid
                row["installments_paid"] = min(paid / (total / count), count)
                if row["installments_paid"] >= count:
                    row["status"] = "paid"
            break

        funding = next((a for a in self.accounts if a["alias"] == form.get("funding_account")), None)
        if funding and funding["account_type"] != "credit":
            self.ledger_entries.append(
                {
                    "date": form["payment_date"],
                    "category": "Debt payment",
                    "description": form.get("description", ""),
                    "amount": amount,
                    "account": funding["alias"],
                    "entry_type": "expense",
                    "timestamp": form.get("timestamp", ""),
                }
            )


store = SheetStore()


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/exec")
def get_snapshot(pin: str = "", t: str = ""):
    if pin != store.pin:
        return {"error": "Invalid PIN"}
    return store.snapshot()


@app.post("/exec")
async def post_mutation(request: Request):
    form = {key: str(value) for key, value in (await request.form()).items()}
    if form.get("pin") != store.pin:
        return {"error": "Invalid PIN"}
    if form.get("sheet") == "payments":
        store.record_payment(form)
    return {"success": True}
