from pydantic import BaseModel, Field


class ClientCreate(BaseModel):
    """Client creation schema."""
    name: str = Field(..., min_length=2, max_length=100)
    partner_id: str = Field(..., min_length=1)


class ClientUpdate(BaseModel):
    """Client rename schema."""
    name: str = Field(..., min_length=2, max_length=100)
