from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from app.models.base import MongoModel, _utcnow


class PartnerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Partner(MongoModel):
    """
    Sponsoring company.

    Invariants:
    - number of clients with partner_id == id <= sponsored_employees_count
    - last_period_started_at is None until the first period is started;
      clients of such a partner cannot transact
    """
    hotel_id: str
    name: str
    sponsored_employees_count: int
    total_shared_amount: Decimal
    last_period_started_at: Optional[datetime] = None
    status: PartnerStatus = PartnerStatus.ACTIVE
    updated_at: datetime = Field(default_factory=_utcnow)
    updated_by: Optional[str] = None
