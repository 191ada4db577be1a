from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from app.models.base import MongoModel, _utcnow


class MemberRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"


class Hotel(MongoModel):
    """Tenant. Every partner, client and transaction belongs to one hotel."""
    name: str
    admin_id: str


class HotelMember(MongoModel):
    """A user's role and approval status within one hotel."""
    hotel_id: str
    user_id: str
    email: str
    name: str = ""
    role: MemberRole = MemberRole.MEMBER
    status: MemberStatus = MemberStatus.PENDING
    requested_at: datetime = Field(default_factory=_utcnow)
    joined_at: Optional[datetime] = None
