from fastapi import Depends, HTTPException, Path, status

from app.core.auth import get_current_user
from app.core.context import Actor, LedgerContext
from app.db.session import get_store
from app.db.store import DocumentStore
from app.models.hotel import MemberRole, MemberStatus
from app.models.user import UserInDB
from app.services.hotel_service import HotelService


def get_actor(current_user: UserInDB = Depends(get_current_user)) -> Actor:
    return Actor(user_id=current_user.id, email=current_user.email, name=current_user.name)


async def get_ledger_context(
    hotel_id: str = Path(..., min_length=1),
    actor: Actor = Depends(get_actor),
    store: DocumentStore = Depends(get_store)
) -> LedgerContext:
    """Resolve the caller's active membership of the hotel in the path."""
    member = await HotelService.get_membership(store, hotel_id, actor.user_id)
    if member is None or member.status != MemberStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this hotel"
        )
    return LedgerContext(store=store, hotel_id=hotel_id, actor=actor, role=MemberRole(member.role))


def require_admin(ctx: LedgerContext = Depends(get_ledger_context)) -> LedgerContext:
    if not ctx.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only hotel admins can perform this action"
        )
    return ctx
