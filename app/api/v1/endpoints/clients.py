from typing import List, Optional
from fastapi import APIRouter, Depends, status

from app.api.deps import get_ledger_context, require_admin
from app.core.context import LedgerContext
from app.models.client import Client
from app.schemas.client import ClientCreate, ClientUpdate
from app.services.client_service import ClientService
from app.services.ledger_service import LedgerService

router = APIRouter()


@router.post("/", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(client_in: ClientCreate, ctx: LedgerContext = Depends(require_admin)):
    return await LedgerService.add_client(ctx, client_in.partner_id, client_in.name)


@router.get("/", response_model=List[Client])
async def list_clients(
    partner_id: Optional[str] = None,
    active_period_only: bool = False,
    ctx: LedgerContext = Depends(get_ledger_context)
):
    return await ClientService.list_clients(
        ctx,
        partner_id=partner_id,
        active_period_only=active_period_only
    )


@router.get("/{client_id}", response_model=Client)
async def get_client(client_id: str, ctx: LedgerContext = Depends(get_ledger_context)):
    return await ClientService.get_client(ctx, client_id)


@router.patch("/{client_id}", response_model=Client)
async def update_client(client_id: str, client_in: ClientUpdate, ctx: LedgerContext = Depends(require_admin)):
    return await ClientService.update_client(ctx, client_id, client_in.name)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: str, ctx: LedgerContext = Depends(require_admin)):
    await ClientService.delete_client(ctx, client_id)
