"""GET /v1/debts - Active debts and subscriptions from the spreadsheet"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from debt_tracker.api.v1.schemas import DebtsResponse, ExpenseSchema
from debt_tracker.api.dependencies import get_credential, get_expense_book, get_gateway, get_request_id
from debt_tracker.domain.debts import (
    filter_active_debts,
    filter_active_subscriptions,
    total_outstanding,
    validate_consistency,
)
from debt_tracker.domain.exceptions import InvalidCredentialError, SyncGatewayError
from debt_tracker.infrastructure.clients.gateway import Credential, SyncGateway
from debt_tracker.services.expense_book import ExpenseBook

router = APIRouter()


@router.get("/debts", response_model=DebtsResponse)
async def list_debts(
    request: Request,
    gateway: SyncGateway = Depends(get_gateway),
    credential: Credential = Depends(get_credential),
    book: ExpenseBook = Depends(get_expense_book),
):
    """
    Refresh the local book from the spreadsheet and summarize it.

    Returns:
        Active debts (balance > 0.01), pending subscriptions, total owed,
        and consistency warnings for records whose fields disagree
    """
    request_id = get_request_id(request)

    try:
        snapshot = await gateway.fetch_snapshot(credential)
    except InvalidCredentialError as e:
        logging.warning(f"Credential rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=401, detail=str(e))
    except SyncGatewayError as e:
        logging.error(f"Spreadsheet read failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Spreadsheet unavailable")

    book.load(snapshot)
    expenses = book.all()

    return DebtsResponse(
        debts=[ExpenseSchema.from_domain(e) for e in filter_active_debts(expenses)],
        subscriptions=[ExpenseSchema.from_domain(e) for e in filter_active_subscriptions(expenses)],
        total_outstanding=round(total_outstanding(expenses), 2),
        warnings=validate_consistency(expenses),
    )
