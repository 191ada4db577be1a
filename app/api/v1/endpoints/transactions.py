from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse

from app.api.deps import get_ledger_context, require_admin
from app.core.context import LedgerContext
from app.models.transaction import Transaction
from app.schemas.transaction import TransactionCreate
from app.services.ledger_service import LedgerService
from app.services.report_service import ReportService

router = APIRouter()


@router.post("/", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def record_transaction(
    transaction_in: TransactionCreate,
    ctx: LedgerContext = Depends(get_ledger_context)
):
    """Charge a client's allowance"""
    return await LedgerService.record_transaction(
        ctx,
        transaction_in.client_id,
        transaction_in.amount,
        transaction_in.receipt_no,
        allow_overage=transaction_in.allow_overage
    )


@router.get("/", response_model=List[Transaction])
async def list_transactions(
    client_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    ctx: LedgerContext = Depends(get_ledger_context)
):
    return await LedgerService.list_transactions(ctx, client_id=client_id, limit=limit)


@router.get("/export", response_class=PlainTextResponse)
async def export_transactions(ctx: LedgerContext = Depends(get_ledger_context)):
    """Transactions as CSV"""
    return PlainTextResponse(await ReportService.transactions_csv(ctx), media_type="text/csv")


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(transaction_id: str, ctx: LedgerContext = Depends(get_ledger_context)):
    return await LedgerService.get_transaction(ctx, transaction_id)


@router.post("/{transaction_id}/flag", response_model=Transaction)
async def flag_transaction(transaction_id: str, ctx: LedgerContext = Depends(get_ledger_context)):
    return await LedgerService.flag_transaction(ctx, transaction_id)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(transaction_id: str, ctx: LedgerContext = Depends(require_admin)):
    """Delete a transaction and give the amount back to the client"""
    await LedgerService.delete_transaction(ctx, transaction_id)
