from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from typing import Optional

from app.models.base import MongoModel, _utcnow


class UserBase(BaseModel):
    """Base user schema."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    """User creation schema."""
    password: str = Field(..., min_length=8)


class UserResponse(UserBase):
    """User response schema."""
    id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserInDB(MongoModel):
    """User database schema."""
    name: str
    email: str
    password_hash: str
    updated_at: datetime = Field(default_factory=_utcnow)

    def to_response(self) -> UserResponse:
        return UserResponse(
            id=self.id,
            name=self.name,
            email=self.email,
            created_at=self.created_at
        )
