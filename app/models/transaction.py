from decimal import Decimal
from enum import Enum
from typing import Optional

from app.models.base import MongoModel


class TransactionStatus(str, Enum):
    COMPLETED = "completed"
    FLAGGED = "flagged"


class Transaction(MongoModel):
    """
    A meal/service charge against a client's allowance.

    Immutable once written, except that status may be flipped to flagged.
    client_name and partner_name are copies taken at recording time.
    """
    hotel_id: str
    client_id: str
    client_name: str
    partner_id: str
    partner_name: str
    amount: Decimal
    receipt_no: str
    status: TransactionStatus = TransactionStatus.COMPLETED
    recorded_by: Optional[str] = None
