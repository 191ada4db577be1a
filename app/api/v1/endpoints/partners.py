from typing import List
from fastapi import APIRouter, Depends, status

from app.api.deps import get_ledger_context, require_admin
from app.core.context import LedgerContext
from app.models.partner import Partner
from app.models.period import PeriodHistory
from app.schemas.partner import PartnerCreate, PartnerUpdate
from app.services.ledger_service import LedgerService
from app.services.partner_service import PartnerService

router = APIRouter()


@router.post("/", response_model=Partner, status_code=status.HTTP_201_CREATED)
async def create_partner(partner_in: PartnerCreate, ctx: LedgerContext = Depends(require_admin)):
    return await PartnerService.add_partner(
        ctx,
        partner_in.name,
        partner_in.sponsored_employees_count,
        partner_in.total_shared_amount
    )


@router.get("/", response_model=List[Partner])
async def list_partners(active_period_only: bool = False, ctx: LedgerContext = Depends(get_ledger_context)):
    return await PartnerService.list_partners(ctx, active_period_only=active_period_only)


@router.get("/{partner_id}", response_model=Partner)
async def get_partner(partner_id: str, ctx: LedgerContext = Depends(get_ledger_context)):
    return await PartnerService.get_partner(ctx, partner_id)


@router.put("/{partner_id}", response_model=Partner)
async def update_partner(
    partner_id: str,
    partner_in: PartnerUpdate,
    ctx: LedgerContext = Depends(require_admin)
):
    """Change name and terms; every client's allowance follows"""
    return await LedgerService.update_partner_terms(
        ctx,
        partner_id,
        partner_in.name,
        partner_in.sponsored_employees_count,
        partner_in.total_shared_amount
    )


@router.delete("/{partner_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_partner(partner_id: str, ctx: LedgerContext = Depends(require_admin)):
    await PartnerService.delete_partner(ctx, partner_id)


@router.post("/{partner_id}/periods", response_model=PeriodHistory, status_code=status.HTTP_201_CREATED)
async def start_new_period(partner_id: str, ctx: LedgerContext = Depends(require_admin)):
    """Roll the partner over into a new billing period"""
    return await LedgerService.start_new_period(ctx, partner_id)


@router.get("/{partner_id}/periods", response_model=List[PeriodHistory])
async def get_period_history(partner_id: str, ctx: LedgerContext = Depends(get_ledger_context)):
    return await PartnerService.get_period_history(ctx, partner_id)
