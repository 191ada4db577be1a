"""
Allowance ledger.

Owns every write that changes a client's balances:
- recording and deleting transactions
- changing a partner's terms (fans the new allowance out to its clients)
- rolling a partner over into a new billing period
- adding a client under a partner's capacity cap

Each operation runs as one store transaction: all reads first, then all
writes, committed together or not at all.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from app.core.config import settings
from app.core.context import LedgerContext
from app.core.errors import CapacityError, HotelHubError, NotFoundError, ValidationError
from app.db.collections import CLIENTS, PARTNERS, PERIOD_HISTORY, TRANSACTIONS
from app.db.store import DESCENDING, DocumentSession
from app.models.base import _utcnow
from app.models.client import Client
from app.models.partner import Partner
from app.models.period import PeriodHistory
from app.models.transaction import Transaction, TransactionStatus
from app.utils.allowance import (
    Number,
    apply_charge,
    charge_overage,
    per_client_allowance,
    reverse_charge,
    roll_over,
    to_money,
)

logger = logging.getLogger(__name__)


# ===== LOOKUPS =====

async def load_partner(session: DocumentSession, hotel_id: str, partner_id: str) -> Partner:
    doc = await session.get(PARTNERS, partner_id)
    if not doc or doc.get("hotel_id") != hotel_id:
        raise NotFoundError("Partner not found.")
    return Partner(**doc)


async def load_client(session: DocumentSession, hotel_id: str, client_id: str) -> Client:
    doc = await session.get(CLIENTS, client_id)
    if not doc or doc.get("hotel_id") != hotel_id:
        raise NotFoundError("Client not found. They may have been deleted.")
    return Client(**doc)


async def load_transaction(session: DocumentSession, hotel_id: str, transaction_id: str) -> Transaction:
    doc = await session.get(TRANSACTIONS, transaction_id)
    if not doc or doc.get("hotel_id") != hotel_id:
        raise NotFoundError("Transaction not found.")
    return Transaction(**doc)


def period_end(started_at: datetime) -> datetime:
    return started_at + timedelta(days=settings.PERIOD_LENGTH_DAYS)


def validate_partner_terms(name: str, sponsored_employees_count: int, total_shared_amount: Number) -> None:
    if not name or len(name.strip()) < 2:
        raise ValidationError("Partner name must be at least 2 characters.")
    if sponsored_employees_count < 1:
        raise ValidationError("Number of employees must be at least 1.")
    if to_money(total_shared_amount) < 0:
        raise ValidationError("Shared amount must be a positive number.")


def _resolve_status(overage: Decimal, shortfall: Decimal, allow_overage: bool) -> TransactionStatus:
    """
    Apply the configured overdraft policy to a charge.

    ``shortfall`` is amount minus available balance, uncapped, and is what the
    debt ceiling is checked against. ``overage`` is the debt the charge adds.
    """
    if settings.OVERDRAFT_POLICY == "flag":
        return TransactionStatus.FLAGGED if overage > 0 else TransactionStatus.COMPLETED

    limit = to_money(settings.MAX_OVERAGE)
    if shortfall > limit:
        raise ValidationError(
            f"The resulting debt of KES {shortfall:.2f} exceeds the KES {limit:.2f} limit."
        )
    if overage > 0 and not allow_overage:
        raise ValidationError(
            f"This transaction exceeds the available balance and will create a debt of "
            f"KES {shortfall:.2f}. Confirm the overage to record it."
        )
    return TransactionStatus.COMPLETED


class LedgerService:
    @staticmethod
    async def record_transaction(
        ctx: LedgerContext,
        client_id: str,
        amount: Number,
        receipt_no: str,
        allow_overage: bool = False
    ) -> Transaction:
        """
        Charge ``amount`` to a client and write the transaction.

        Rejected when the partner has no active period or the client already
        owes money. Whether an overage is accepted depends on OVERDRAFT_POLICY.
        """
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero.")
        receipt_no = (receipt_no or "").strip()
        if not receipt_no:
            raise ValidationError("Receipt number is required.")

        async def _record(session: DocumentSession) -> Transaction:
            client = await load_client(session, ctx.hotel_id, client_id)
            partner = await load_partner(session, ctx.hotel_id, client.partner_id)

            if partner.last_period_started_at is None:
                raise ValidationError("The client's partner does not have an active billing period.")
            if client.debt > 0:
                raise ValidationError("This client has an outstanding debt and cannot make new transactions.")

            overage = charge_overage(amount, client.available_balance)
            shortfall = amount - client.available_balance
            status = _resolve_status(overage, shortfall, allow_overage)
            balances = apply_charge(client.balances, amount)

            transaction = Transaction(
                hotel_id=ctx.hotel_id,
                client_id=client.id,
                client_name=client.name,
                partner_id=partner.id,
                partner_name=partner.name,
                amount=amount,
                receipt_no=receipt_no,
                status=status,
                recorded_by=ctx.actor.user_id
            )
            await session.update(CLIENTS, client.id, {
                "utilized_amount": balances.utilized_amount,
                "debt": balances.debt,
                "updated_at": _utcnow()
            })
            await session.insert(TRANSACTIONS, transaction.to_document())
            return transaction

        try:
            transaction = await ctx.store.run_transaction(_record)
        except HotelHubError as exc:
            logger.warning("Transaction for client %s rejected: %s", client_id, exc.message)
            raise

        logger.info(
            "Recorded transaction %s: client=%s amount=%s status=%s by=%s",
            transaction.id, client_id, amount, transaction.status, ctx.actor.user_id
        )
        return transaction

    @staticmethod
    async def delete_transaction(ctx: LedgerContext, transaction_id: str) -> Transaction:
        """
        Delete a transaction and take its amount back out of the client.

        If the client has been deleted in the meantime the transaction is
        still removed and nothing else is touched.
        """
        async def _delete(session: DocumentSession) -> Transaction:
            transaction = await load_transaction(session, ctx.hotel_id, transaction_id)
            client_doc = await session.get(CLIENTS, transaction.client_id)

            if client_doc and client_doc.get("hotel_id") == ctx.hotel_id:
                client = Client(**client_doc)
                balances = reverse_charge(client.balances, transaction.amount)
                await session.update(CLIENTS, client.id, {
                    "utilized_amount": balances.utilized_amount,
                    "debt": balances.debt,
                    "updated_at": _utcnow()
                })
            else:
                logger.info(
                    "Client %s of transaction %s no longer exists; deleting without adjustment",
                    transaction.client_id, transaction.id
                )

            await session.delete(TRANSACTIONS, transaction.id)
            return transaction

        transaction = await ctx.store.run_transaction(_delete)
        logger.info("Deleted transaction %s (amount=%s) by %s", transaction.id, transaction.amount, ctx.actor.user_id)
        return transaction

    @staticmethod
    async def flag_transaction(ctx: LedgerContext, transaction_id: str) -> Transaction:
        """Mark a transaction as flagged. No balances change."""
        transaction = await load_transaction(ctx.store, ctx.hotel_id, transaction_id)
        await ctx.store.update(TRANSACTIONS, transaction.id, {"status": TransactionStatus.FLAGGED.value})
        logger.info("Flagged transaction %s by %s", transaction.id, ctx.actor.user_id)
        return transaction.model_copy(update={"status": TransactionStatus.FLAGGED.value})

    @staticmethod
    async def update_partner_terms(
        ctx: LedgerContext,
        partner_id: str,
        name: str,
        sponsored_employees_count: int,
        total_shared_amount: Number
    ) -> Partner:
        """
        Change a partner's name and terms and push the new per-client
        allowance and name onto every one of its clients.

        Utilized amounts and debt are left alone: this is not a rollover.
        """
        validate_partner_terms(name, sponsored_employees_count, total_shared_amount)
        name = name.strip()
        total_shared_amount = to_money(total_shared_amount)

        async def _update(session: DocumentSession) -> Partner:
            partner = await load_partner(session, ctx.hotel_id, partner_id)
            clients = await session.find(CLIENTS, {"hotel_id": ctx.hotel_id, "partner_id": partner.id})

            if sponsored_employees_count < len(clients):
                raise CapacityError(
                    f"Cannot set employee count to {sponsored_employees_count}. "
                    f"There are already {len(clients)} clients for this partner."
                )

            now = _utcnow()
            allowance = per_client_allowance(total_shared_amount, sponsored_employees_count)
            fields = {
                "name": name,
                "sponsored_employees_count": sponsored_employees_count,
                "total_shared_amount": total_shared_amount,
                "updated_at": now,
                "updated_by": ctx.actor.user_id
            }
            await session.update(PARTNERS, partner.id, fields)
            for doc in clients:
                await session.update(CLIENTS, doc["_id"], {
                    "period_allowance": allowance,
                    "partner_name": name,
                    "updated_at": now
                })
            return partner.model_copy(update=fields)

        partner = await ctx.store.run_transaction(_update)
        logger.info(
            "Updated partner %s: employees=%s total=%s",
            partner.id, sponsored_employees_count, total_shared_amount
        )
        return partner

    @staticmethod
    async def start_new_period(ctx: LedgerContext, partner_id: str) -> PeriodHistory:
        """
        Close the partner's current period and open a new one.

        Records the ending period in the history, then for every client:
        the outstanding debt is taken out of the fresh allowance first and
        whatever the allowance cannot cover stays as debt; utilized resets.
        """
        async def _rollover(session: DocumentSession) -> PeriodHistory:
            partner = await load_partner(session, ctx.hotel_id, partner_id)
            if partner.sponsored_employees_count <= 0:
                raise ValidationError("Partner has no sponsored employees to start a new period for.")

            now = _utcnow()
            if partner.last_period_started_at is not None and settings.PERIOD_LENGTH_DAYS > 0:
                expires = period_end(partner.last_period_started_at)
                if now < expires:
                    raise ValidationError(
                        f"Cannot start a new period. The current period expires on {expires:%Y-%m-%d}."
                    )

            clients = await session.find(CLIENTS, {"hotel_id": ctx.hotel_id, "partner_id": partner.id})
            allowance = per_client_allowance(partner.total_shared_amount, partner.sponsored_employees_count)

            history = PeriodHistory(
                hotel_id=ctx.hotel_id,
                partner_id=partner.id,
                start_date=partner.last_period_started_at or partner.created_at,
                end_date=now,
                sponsored_employees_count=partner.sponsored_employees_count,
                total_shared_amount=partner.total_shared_amount
            )
            await session.insert(PERIOD_HISTORY, history.to_document())

            for doc in clients:
                client = Client(**doc)
                balances = roll_over(client.debt, allowance)
                await session.update(CLIENTS, client.id, {
                    "period_allowance": balances.period_allowance,
                    "utilized_amount": balances.utilized_amount,
                    "debt": balances.debt,
                    "updated_at": now
                })

            await session.update(PARTNERS, partner.id, {
                "last_period_started_at": now,
                "updated_at": now,
                "updated_by": ctx.actor.user_id
            })
            return history

        history = await ctx.store.run_transaction(_rollover)
        logger.info("Started new period for partner %s (history %s)", partner_id, history.id)
        return history

    @staticmethod
    async def add_client(ctx: LedgerContext, partner_id: str, name: str) -> Client:
        """Add a client under a partner that still has room for one."""
        name = (name or "").strip()
        if len(name) < 2:
            raise ValidationError("Client name must be at least 2 characters.")

        async def _add(session: DocumentSession) -> Client:
            partner = await load_partner(session, ctx.hotel_id, partner_id)
            existing = await session.count(CLIENTS, {"hotel_id": ctx.hotel_id, "partner_id": partner.id})

            if existing >= partner.sponsored_employees_count:
                raise CapacityError(
                    f"Cannot add new client. The employee limit "
                    f"({partner.sponsored_employees_count}) for {partner.name} has been reached."
                )

            client = Client(
                hotel_id=ctx.hotel_id,
                name=name,
                partner_id=partner.id,
                partner_name=partner.name,
                period_allowance=per_client_allowance(
                    partner.total_shared_amount, partner.sponsored_employees_count
                )
            )
            await session.insert(CLIENTS, client.to_document())
            # Writing the partner makes concurrent adds under it conflict
            await session.update(PARTNERS, partner.id, {"updated_at": _utcnow()})
            return client

        client = await ctx.store.run_transaction(_add)
        logger.info("Added client %s under partner %s", client.id, partner_id)
        return client

    # ===== READS =====

    @staticmethod
    async def get_transaction(ctx: LedgerContext, transaction_id: str) -> Transaction:
        return await load_transaction(ctx.store, ctx.hotel_id, transaction_id)

    @staticmethod
    async def list_transactions(
        ctx: LedgerContext,
        client_id: Optional[str] = None,
        recorded_by: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Transaction]:
        """Transactions of the hotel, newest first."""
        filters = {"hotel_id": ctx.hotel_id}
        if client_id:
            filters["client_id"] = client_id
        if recorded_by:
            filters["recorded_by"] = recorded_by
        docs = await ctx.store.find(TRANSACTIONS, filters, sort=[("created_at", DESCENDING)], limit=limit)
        return [Transaction(**doc) for doc in docs]
