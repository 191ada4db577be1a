from typing import List
from fastapi import APIRouter, Depends, status

from app.api.deps import get_actor, get_ledger_context, require_admin
from app.core.context import Actor, LedgerContext
from app.db.session import get_store
from app.db.store import DocumentStore
from app.models.hotel import Hotel
from app.schemas.hotel import HotelCreate, HotelJoin, MemberAction, MemberResponse, MyHotel
from app.services.hotel_service import HotelService

router = APIRouter()


@router.post("/", response_model=Hotel, status_code=status.HTTP_201_CREATED)
async def create_hotel(
    hotel_in: HotelCreate,
    actor: Actor = Depends(get_actor),
    store: DocumentStore = Depends(get_store)
):
    """Create a hotel; the caller becomes its admin"""
    return await HotelService.create_hotel(store, actor, hotel_in.name)


@router.get("/", response_model=List[MyHotel])
async def list_my_hotels(
    actor: Actor = Depends(get_actor),
    store: DocumentStore = Depends(get_store)
):
    """Hotels the current user belongs to or has asked to join"""
    return await HotelService.list_my_hotels(store, actor)


@router.post("/join", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def join_hotel(
    join_in: HotelJoin,
    actor: Actor = Depends(get_actor),
    store: DocumentStore = Depends(get_store)
):
    """Ask to join a hotel by id; an admin has to approve the request"""
    return await HotelService.request_to_join(store, actor, join_in.hotel_id)


@router.get("/{hotel_id}", response_model=Hotel)
async def get_hotel(ctx: LedgerContext = Depends(get_ledger_context)):
    return await HotelService.get_hotel(ctx.store, ctx.hotel_id)


@router.get("/{hotel_id}/members", response_model=List[MemberResponse])
async def list_members(ctx: LedgerContext = Depends(require_admin)):
    return await HotelService.list_members(ctx)


@router.post("/{hotel_id}/members/{user_id}")
async def manage_member(
    user_id: str,
    action_in: MemberAction,
    ctx: LedgerContext = Depends(require_admin)
):
    """Approve or deny a membership request"""
    member = await HotelService.manage_member(ctx, user_id, action_in.action)
    if member is None:
        return {"message": "User removed"}
    return {"message": "User approved", "member": MemberResponse.model_validate(member)}
