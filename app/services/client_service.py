import logging
from typing import List, Optional

from app.core.context import LedgerContext
from app.core.errors import ValidationError
from app.db.collections import CLIENTS, PARTNERS
from app.db.store import ASCENDING
from app.models.base import _utcnow
from app.models.client import Client
from app.services.ledger_service import load_client

logger = logging.getLogger(__name__)


class ClientService:
    @staticmethod
    async def get_client(ctx: LedgerContext, client_id: str) -> Client:
        return await load_client(ctx.store, ctx.hotel_id, client_id)

    @staticmethod
    async def list_clients(
        ctx: LedgerContext,
        partner_id: Optional[str] = None,
        active_period_only: bool = False,
        with_debt_only: bool = False
    ) -> List[Client]:
        """
        Clients of the hotel ordered by name.

        active_period_only keeps clients whose partner has started a period,
        i.e. the ones that can transact.
        """
        filters = {"hotel_id": ctx.hotel_id}
        if partner_id:
            filters["partner_id"] = partner_id
        if with_debt_only:
            filters["debt"] = {"$gt": 0}
        if active_period_only:
            partners = await ctx.store.find(
                PARTNERS,
                {"hotel_id": ctx.hotel_id, "last_period_started_at": {"$ne": None}}
            )
            active_ids = [doc["_id"] for doc in partners]
            if not active_ids:
                return []
            if partner_id and partner_id not in active_ids:
                return []
            if not partner_id:
                filters["partner_id"] = {"$in": active_ids}

        docs = await ctx.store.find(CLIENTS, filters, sort=[("name", ASCENDING)])
        return [Client(**doc) for doc in docs]

    @staticmethod
    async def update_client(ctx: LedgerContext, client_id: str, name: str) -> Client:
        """Rename a client. Past transactions keep the name they were recorded with."""
        name = (name or "").strip()
        if len(name) < 2:
            raise ValidationError("Client name must be at least 2 characters.")
        client = await load_client(ctx.store, ctx.hotel_id, client_id)
        now = _utcnow()
        await ctx.store.update(CLIENTS, client.id, {"name": name, "updated_at": now})
        logger.info("Renamed client %s by %s", client.id, ctx.actor.user_id)
        return client.model_copy(update={"name": name, "updated_at": now})

    @staticmethod
    async def delete_client(ctx: LedgerContext, client_id: str) -> None:
        """Delete a client. Its transactions are kept as they are."""
        client = await load_client(ctx.store, ctx.hotel_id, client_id)
        await ctx.store.delete(CLIENTS, client.id)
        logger.info("Deleted client %s by %s", client.id, ctx.actor.user_id)
