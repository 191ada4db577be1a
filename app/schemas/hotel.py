from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from app.models.hotel import Hotel, MemberRole, MemberStatus


class HotelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class HotelJoin(BaseModel):
    hotel_id: str = Field(..., min_length=1)


class MyHotel(BaseModel):
    """A hotel the current user belongs to, with their standing in it."""
    hotel: Hotel
    role: MemberRole
    status: MemberStatus


class MemberAction(BaseModel):
    action: Literal["approve", "deny"]


class MemberResponse(BaseModel):
    """Member of a hotel."""
    user_id: str
    email: str
    name: str
    role: MemberRole
    status: MemberStatus
    requested_at: datetime
    joined_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
