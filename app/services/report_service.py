import csv
import io
from decimal import Decimal
from typing import List

from app.core.context import LedgerContext
from app.db.collections import CLIENTS, PARTNERS
from app.models.base import _utcnow
from app.models.client import Client
from app.models.transaction import Transaction, TransactionStatus
from app.schemas.report import AdminDashboard, DebtReport, MemberDashboard, PeriodStatus
from app.services.client_service import ClientService
from app.services.ledger_service import LedgerService, load_partner, period_end
from app.services.partner_service import PartnerService
from app.utils.allowance import ZERO

RECENT_LIMIT = 5

CSV_HEADER = ["transaction_id", "client_name", "partner", "date", "amount", "status", "recorded_by"]


class ReportService:
    @staticmethod
    async def debt_report(ctx: LedgerContext, partner_id: str) -> DebtReport:
        """Clients of a partner with outstanding debt, for printing."""
        partner = await load_partner(ctx.store, ctx.hotel_id, partner_id)
        clients = await ClientService.list_clients(ctx, partner_id=partner.id, with_debt_only=True)
        return DebtReport(
            partner_id=partner.id,
            partner_name=partner.name,
            generated_at=_utcnow(),
            clients=clients,
            total_debt=sum((client.debt for client in clients), ZERO)
        )

    @staticmethod
    async def period_report(ctx: LedgerContext) -> List[PeriodStatus]:
        """Billing period status of every partner."""
        now = _utcnow()
        report = []
        for partner in await PartnerService.list_partners(ctx):
            started = partner.last_period_started_at
            if started is None:
                report.append(PeriodStatus(partner_id=partner.id, partner_name=partner.name, status="Not Started"))
                continue
            ends = period_end(started)
            report.append(PeriodStatus(
                partner_id=partner.id,
                partner_name=partner.name,
                status="Active" if ends > now else "Expired",
                start_date=started,
                end_date=ends
            ))
        return report

    @staticmethod
    async def admin_dashboard(ctx: LedgerContext) -> AdminDashboard:
        scope = {"hotel_id": ctx.hotel_id}
        transactions = await LedgerService.list_transactions(ctx)
        clients = [Client(**doc) for doc in await ctx.store.find(CLIENTS, scope)]
        return AdminDashboard(
            partner_count=await ctx.store.count(PARTNERS, scope),
            client_count=len(clients),
            transaction_count=len(transactions),
            flagged_count=sum(1 for t in transactions if t.status == TransactionStatus.FLAGGED),
            total_transaction_amount=sum((t.amount for t in transactions), ZERO),
            total_debt=sum((client.debt for client in clients), ZERO),
            recent_transactions=transactions[:RECENT_LIMIT]
        )

    @staticmethod
    async def member_dashboard(ctx: LedgerContext) -> MemberDashboard:
        """What a front-desk member needs: their own recent work and who can be served."""
        mine = await LedgerService.list_transactions(ctx, recorded_by=ctx.actor.user_id)
        eligible = await ClientService.list_clients(ctx, active_period_only=True)
        return MemberDashboard(
            transaction_count=len(mine),
            total_amount=sum((t.amount for t in mine), ZERO),
            recent_transactions=mine[:RECENT_LIMIT],
            eligible_clients=eligible
        )

    @staticmethod
    async def transactions_csv(ctx: LedgerContext) -> str:
        """Transactions as CSV, newest first. This is the input format of the AI summary."""
        transactions: List[Transaction] = await LedgerService.list_transactions(ctx)
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for t in transactions:
            writer.writerow([
                t.id,
                t.client_name,
                t.partner_name,
                t.created_at.date().isoformat(),
                f"{Decimal(t.amount):.2f}",
                str(t.status).capitalize(),
                t.recorded_by or ""
            ])
        return buffer.getvalue()
