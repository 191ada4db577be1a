from decimal import Decimal
from pydantic import BaseModel, Field


class PartnerCreate(BaseModel):
    """Partner creation schema."""
    name: str = Field(..., min_length=2, max_length=100)
    sponsored_employees_count: int = Field(..., ge=1)
    total_shared_amount: Decimal = Field(..., ge=0)


class PartnerUpdate(PartnerCreate):
    """New name and terms for a partner. All fields required."""
    pass
