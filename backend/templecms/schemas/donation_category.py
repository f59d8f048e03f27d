"""Donation category and donation card schemas."""

from pydantic import BaseModel, Field


class DonationCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    image_url: str = ""
    image_alt: str | None = Field(None, max_length=255)
    heading: str | None = Field(None, max_length=255)
    is_active: bool = True
    sort_order: int = 0
    suggested_amounts: list[int] | None = None


class DonationCategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    image_url: str | None = None
    image_alt: str | None = Field(None, max_length=255)
    heading: str | None = Field(None, max_length=255)
    is_active: bool | None = None
    sort_order: int | None = None
    suggested_amounts: list[int] | None = None


class DonationCategoryResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    image_url: str
    image_alt: str | None = None
    heading: str | None = None
    is_active: bool
    sort_order: int
    suggested_amounts: list[int] | None = None

    model_config = {"from_attributes": True}


class DonationCardCreate(BaseModel):
    category_id: int
    title: str = Field(..., min_length=1, max_length=255)
    amount: int = Field(..., gt=0)
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    sort_order: int = 0


class DonationCardUpdate(BaseModel):
    category_id: int | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    amount: int | None = Field(None, gt=0)
    description: str | None = None
    image_url: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class DonationCardResponse(BaseModel):
    id: int
    category_id: int
    title: str
    amount: int
    description: str | None = None
    image_url: str | None = None
    is_active: bool
    sort_order: int

    model_config = {"from_attributes": True}
