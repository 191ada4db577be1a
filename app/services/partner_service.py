import logging
from typing import List

from app.core.context import LedgerContext
from app.db.collections import CLIENTS, PARTNERS, PERIOD_HISTORY, TRANSACTIONS
from app.db.store import ASCENDING, DESCENDING, DocumentSession
from app.models.partner import Partner
from app.models.period import PeriodHistory
from app.services.ledger_service import load_partner, validate_partner_terms
from app.utils.allowance import Number, to_money

logger = logging.getLogger(__name__)


class PartnerService:
    @staticmethod
    async def add_partner(
        ctx: LedgerContext,
        name: str,
        sponsored_employees_count: int,
        total_shared_amount: Number
    ) -> Partner:
        """Create an active partner. Its first period has to be started explicitly."""
        validate_partner_terms(name, sponsored_employees_count, total_shared_amount)
        partner = Partner(
            hotel_id=ctx.hotel_id,
            name=name.strip(),
            sponsored_employees_count=sponsored_employees_count,
            total_shared_amount=to_money(total_shared_amount),
            updated_by=ctx.actor.user_id
        )
        await ctx.store.insert(PARTNERS, partner.to_document())
        logger.info("Added partner %s (%s) to hotel %s", partner.id, partner.name, ctx.hotel_id)
        return partner

    @staticmethod
    async def get_partner(ctx: LedgerContext, partner_id: str) -> Partner:
        return await load_partner(ctx.store, ctx.hotel_id, partner_id)

    @staticmethod
    async def list_partners(ctx: LedgerContext, active_period_only: bool = False) -> List[Partner]:
        filters = {"hotel_id": ctx.hotel_id}
        if active_period_only:
            filters["last_period_started_at"] = {"$ne": None}
        docs = await ctx.store.find(PARTNERS, filters, sort=[("name", ASCENDING)])
        return [Partner(**doc) for doc in docs]

    @staticmethod
    async def delete_partner(ctx: LedgerContext, partner_id: str) -> None:
        """Delete a partner together with its clients, transactions and period history."""
        async def _delete(session: DocumentSession) -> dict:
            partner = await load_partner(session, ctx.hotel_id, partner_id)
            scope = {"hotel_id": ctx.hotel_id, "partner_id": partner.id}
            removed = {
                CLIENTS: await session.delete_many(CLIENTS, scope),
                TRANSACTIONS: await session.delete_many(TRANSACTIONS, scope),
                PERIOD_HISTORY: await session.delete_many(PERIOD_HISTORY, scope),
            }
            await session.delete(PARTNERS, partner.id)
            return removed

        removed = await ctx.store.run_transaction(_delete)
        logger.info("Deleted partner %s by %s: %s", partner_id, ctx.actor.user_id, removed)

    @staticmethod
    async def get_period_history(ctx: LedgerContext, partner_id: str) -> List[PeriodHistory]:
        """Ended periods of a partner, most recent first."""
        partner = await load_partner(ctx.store, ctx.hotel_id, partner_id)
        docs = await ctx.store.find(
            PERIOD_HISTORY,
            {"hotel_id": ctx.hotel_id, "partner_id": partner.id},
            sort=[("start_date", DESCENDING)]
        )
        return [PeriodHistory(**doc) for doc in docs]
