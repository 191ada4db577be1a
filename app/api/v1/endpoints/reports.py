from typing import List
from fastapi import APIRouter, Depends

from app.api.deps import get_ledger_context, require_admin
from app.core.context import LedgerContext
from app.schemas.report import (
    AdminDashboard,
    DebtReport,
    MemberDashboard,
    PeriodStatus,
    SummaryRequest,
    SummaryResponse,
)
from app.services.report_service import ReportService
from app.services.summary_service import SummaryService

router = APIRouter()


@router.get("/debt/{partner_id}", response_model=DebtReport)
async def debt_report(partner_id: str, ctx: LedgerContext = Depends(require_admin)):
    return await ReportService.debt_report(ctx, partner_id)


@router.get("/periods", response_model=List[PeriodStatus])
async def period_report(ctx: LedgerContext = Depends(require_admin)):
    return await ReportService.period_report(ctx)


@router.get("/dashboard/admin", response_model=AdminDashboard)
async def admin_dashboard(ctx: LedgerContext = Depends(require_admin)):
    return await ReportService.admin_dashboard(ctx)


@router.get("/dashboard/member", response_model=MemberDashboard)
async def member_dashboard(ctx: LedgerContext = Depends(get_ledger_context)):
    return await ReportService.member_dashboard(ctx)


@router.post("/summary", response_model=SummaryResponse)
async def summarize_report(request: SummaryRequest, ctx: LedgerContext = Depends(require_admin)):
    """Ask the AI model to summarize a CSV transaction report"""
    return SummaryResponse(summary=await SummaryService.summarize_report(request.report))
