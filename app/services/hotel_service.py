"""
Hotels (tenants) and their members.

A user creates a hotel and becomes its active admin. Other users ask to join
with the hotel id and wait as pending members until an admin approves or
denies them.
"""

import logging
from typing import List, Literal, Optional

from app.core.context import Actor, LedgerContext
from app.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.db.collections import HOTELS, MEMBERS
from app.db.store import ASCENDING, DocumentSession, DocumentStore
from app.models.base import _utcnow
from app.models.hotel import Hotel, HotelMember, MemberRole, MemberStatus

logger = logging.getLogger(__name__)


async def _find_member(session: DocumentSession, hotel_id: str, user_id: str) -> Optional[HotelMember]:
    docs = await session.find(MEMBERS, {"hotel_id": hotel_id, "user_id": user_id}, limit=1)
    return HotelMember(**docs[0]) if docs else None


class HotelService:
    @staticmethod
    async def create_hotel(store: DocumentStore, actor: Actor, name: str) -> Hotel:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter a hotel name.")

        hotel = Hotel(name=name, admin_id=actor.user_id)
        admin = HotelMember(
            hotel_id=hotel.id,
            user_id=actor.user_id,
            email=actor.email,
            name=actor.name,
            role=MemberRole.ADMIN,
            status=MemberStatus.ACTIVE,
            joined_at=hotel.created_at
        )

        async def _create(session: DocumentSession) -> Hotel:
            await session.insert(HOTELS, hotel.to_document())
            await session.insert(MEMBERS, admin.to_document())
            return hotel

        await store.run_transaction(_create)
        logger.info("Hotel %s (%s) created by %s", hotel.id, hotel.name, actor.user_id)
        return hotel

    @staticmethod
    async def get_hotel(store: DocumentStore, hotel_id: str) -> Hotel:
        doc = await store.get(HOTELS, hotel_id)
        if not doc:
            raise NotFoundError("No hotel found with that ID. Please check and try again.")
        return Hotel(**doc)

    @staticmethod
    async def request_to_join(store: DocumentStore, actor: Actor, hotel_id: str) -> HotelMember:
        """Create a pending membership for the actor."""
        async def _join(session: DocumentSession) -> HotelMember:
            if not await session.get(HOTELS, hotel_id):
                raise NotFoundError("No hotel found with that ID. Please check and try again.")
            if await _find_member(session, hotel_id, actor.user_id):
                raise ConflictError("You have already joined or requested to join this hotel.")
            member = HotelMember(
                hotel_id=hotel_id,
                user_id=actor.user_id,
                email=actor.email,
                name=actor.name
            )
            await session.insert(MEMBERS, member.to_document())
            return member

        member = await store.run_transaction(_join)
        logger.info("User %s requested to join hotel %s", actor.user_id, hotel_id)
        return member

    @staticmethod
    async def get_membership(store: DocumentStore, hotel_id: str, user_id: str) -> Optional[HotelMember]:
        return await _find_member(store, hotel_id, user_id)

    @staticmethod
    async def list_my_hotels(store: DocumentStore, actor: Actor) -> List[dict]:
        """Hotels the actor belongs to (including pending requests) with their role and status."""
        memberships = await store.find(MEMBERS, {"user_id": actor.user_id}, sort=[("requested_at", ASCENDING)])
        hotels = []
        for doc in memberships:
            member = HotelMember(**doc)
            hotel_doc = await store.get(HOTELS, member.hotel_id)
            if not hotel_doc:
                continue
            hotels.append({
                "hotel": Hotel(**hotel_doc),
                "role": member.role,
                "status": member.status
            })
        return hotels

    @staticmethod
    async def list_members(ctx: LedgerContext) -> List[HotelMember]:
        docs = await ctx.store.find(MEMBERS, {"hotel_id": ctx.hotel_id}, sort=[("requested_at", ASCENDING)])
        return [HotelMember(**doc) for doc in docs]

    @staticmethod
    async def manage_member(
        ctx: LedgerContext,
        user_id: str,
        action: Literal["approve", "deny"]
    ) -> Optional[HotelMember]:
        """Approve (activate) or deny (remove) a member. Returns the approved member."""
        if user_id == ctx.actor.user_id:
            raise PermissionDeniedError("You cannot change your own membership.")

        member = await _find_member(ctx.store, ctx.hotel_id, user_id)
        if member is None:
            raise NotFoundError("Member not found.")

        if action == "approve":
            joined_at = _utcnow()
            await ctx.store.update(MEMBERS, member.id, {
                "status": MemberStatus.ACTIVE.value,
                "joined_at": joined_at
            })
            logger.info("User %s approved in hotel %s by %s", user_id, ctx.hotel_id, ctx.actor.user_id)
            return member.model_copy(update={"status": MemberStatus.ACTIVE.value, "joined_at": joined_at})

        if action == "deny":
            await ctx.store.delete(MEMBERS, member.id)
            logger.info("User %s removed from hotel %s by %s", user_id, ctx.hotel_id, ctx.actor.user_id)
            return None

        raise ValidationError(f"Unknown action: {action}")
