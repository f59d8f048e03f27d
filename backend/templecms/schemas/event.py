"""Event and event donation card schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    date: datetime
    image_url: str = ""
    image_alt: str | None = Field(None, max_length=255)
    read_more_url: str | None = None
    is_active: bool = True
    suggested_amounts: list[int] | None = None
    custom_donation_enabled: bool = True
    custom_donation_title: str = Field("Any Donation of Your Choice", max_length=255)


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    date: datetime | None = None
    image_url: str | None = None
    image_alt: str | None = Field(None, max_length=255)
    read_more_url: str | None = None
    is_active: bool | None = None
    suggested_amounts: list[int] | None = None
    custom_donation_enabled: bool | None = None
    custom_donation_title: str | None = Field(None, max_length=255)


class EventResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    date: datetime
    image_url: str
    image_alt: str | None = None
    read_more_url: str | None = None
    is_active: bool
    suggested_amounts: list[int] | None = None
    custom_donation_enabled: bool
    custom_donation_title: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class EventDonationCardCreate(BaseModel):
    event_id: int
    title: str = Field(..., min_length=1, max_length=255)
    amount: int = Field(..., gt=0)
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    sort_order: int = 0


class EventDonationCardUpdate(BaseModel):
    event_id: int | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    amount: int | None = Field(None, gt=0)
    description: str | None = None
    image_url: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class EventDonationCardResponse(BaseModel):
    id: int
    event_id: int
    title: str
    amount: int
    description: str | None = None
    image_url: str | None = None
    is_active: bool
    sort_order: int

    model_config = {"from_attributes": True}
