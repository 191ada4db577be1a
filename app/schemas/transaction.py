from decimal import Decimal
from pydantic import BaseModel, Field


class TransactionCreate(BaseModel):
    """Record a charge against a client."""
    client_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    receipt_no: str = Field(..., min_length=1, max_length=100)
    allow_overage: bool = False
