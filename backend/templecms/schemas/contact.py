"""Contact form and subscription schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class ContactMessageCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: str | None = Field(None, max_length=32)
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=5000)


class ContactMessageResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    subject: str
    message: str
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ContactMessageMark(BaseModel):
    is_read: bool


class SubscriptionCreate(BaseModel):
    email: EmailStr


class SubscriptionResponse(BaseModel):
    id: int
    email: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
