from datetime import datetime
from decimal import Decimal

from app.models.base import MongoModel


class PeriodHistory(MongoModel):
    """Snapshot of a partner's terms for a period that has ended. Append-only."""
    hotel_id: str
    partner_id: str
    start_date: datetime
    end_date: datetime
    sponsored_employees_count: int
    total_shared_amount: Decimal
