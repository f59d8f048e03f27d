"""Request/response schemas for the simple content tables.

Each type has a Create (required fields), an Update (everything optional,
applied as a partial update) and a Response shape.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class _Listed(BaseModel):
    is_active: bool = True
    sort_order: int = 0


class _ListedUpdate(BaseModel):
    is_active: bool | None = None
    sort_order: int | None = None


class _Out(BaseModel):
    id: int
    is_active: bool
    sort_order: int

    model_config = {"from_attributes": True}


# Banners


class BannerCreate(_Listed):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    image_url: str = Field(..., min_length=1)
    image_alt: str | None = Field(None, max_length=255)
    button_text: str | None = Field(None, max_length=100)
    button_link: str | None = None


class BannerUpdate(_ListedUpdate):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    image_url: str | None = Field(None, min_length=1)
    image_alt: str | None = Field(None, max_length=255)
    button_text: str | None = Field(None, max_length=100)
    button_link: str | None = None


class BannerResponse(_Out):
    title: str
    description: str | None = None
    image_url: str
    image_alt: str | None = None
    button_text: str | None = None
    button_link: str | None = None


# Quotes


class QuoteCreate(_Listed):
    text: str = Field(..., min_length=1)
    source: str | None = Field(None, max_length=255)


class QuoteUpdate(_ListedUpdate):
    text: str | None = Field(None, min_length=1)
    source: str | None = Field(None, max_length=255)


class QuoteResponse(_Out):
    text: str
    source: str | None = None


# Gallery


class GalleryItemCreate(_Listed):
    title: str = Field(..., min_length=1, max_length=255)
    image_url: str = Field(..., min_length=1)
    image_alt: str | None = Field(None, max_length=255)


class GalleryItemUpdate(_ListedUpdate):
    title: str | None = Field(None, min_length=1, max_length=255)
    image_url: str | None = Field(None, min_length=1)
    image_alt: str | None = Field(None, max_length=255)


class GalleryItemResponse(_Out):
    title: str
    image_url: str
    image_alt: str | None = None


# Videos


class VideoCreate(_Listed):
    title: str = Field(..., min_length=1, max_length=255)
    thumbnail_url: str = Field(..., min_length=1)
    thumbnail_alt: str | None = Field(None, max_length=255)
    youtube_url: str = Field(..., min_length=1)


class VideoUpdate(_ListedUpdate):
    title: str | None = Field(None, min_length=1, max_length=255)
    thumbnail_url: str | None = Field(None, min_length=1)
    thumbnail_alt: str | None = Field(None, max_length=255)
    youtube_url: str | None = Field(None, min_length=1)


class VideoResponse(_Out):
    title: str
    thumbnail_url: str
    thumbnail_alt: str | None = None
    youtube_url: str


class LiveVideoCreate(_Listed):
    title: str = Field(..., min_length=1, max_length=255)
    youtube_url: str = Field(..., min_length=1)


class LiveVideoUpdate(_ListedUpdate):
    title: str | None = Field(None, min_length=1, max_length=255)
    youtube_url: str | None = Field(None, min_length=1)


class LiveVideoResponse(_Out):
    title: str
    youtube_url: str
    created_at: datetime
    updated_at: datetime | None = None


# Testimonials


class TestimonialCreate(_Listed):
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    image_url: str | None = None


class TestimonialUpdate(_ListedUpdate):
    name: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, min_length=1, max_length=255)
    message: str | None = Field(None, min_length=1)
    image_url: str | None = None


class TestimonialResponse(_Out):
    name: str
    location: str
    message: str
    image_url: str | None = None


# Social links


class SocialLinkCreate(_Listed):
    platform: str = Field(..., min_length=1, max_length=64)
    url: str = Field(..., min_length=1)
    icon: str | None = Field(None, max_length=64)


class SocialLinkUpdate(_ListedUpdate):
    platform: str | None = Field(None, min_length=1, max_length=64)
    url: str | None = Field(None, min_length=1)
    icon: str | None = Field(None, max_length=64)


class SocialLinkResponse(_Out):
    platform: str
    url: str
    icon: str | None = None


# Stats


class StatCreate(_Listed):
    value: int = Field(..., ge=1)
    suffix: str = Field(..., min_length=1, max_length=20)
    label: str = Field(..., min_length=1, max_length=255)


class StatUpdate(_ListedUpdate):
    value: int | None = Field(None, ge=1)
    suffix: str | None = Field(None, min_length=1, max_length=20)
    label: str | None = Field(None, min_length=1, max_length=255)


class StatResponse(_Out):
    value: int
    suffix: str
    label: str


# Schedules


class ScheduleCreate(_Listed):
    time: str = Field(..., min_length=1, max_length=10)
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class ScheduleUpdate(_ListedUpdate):
    time: str | None = Field(None, min_length=1, max_length=10)
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None


class ScheduleResponse(_Out):
    time: str
    title: str
    description: str | None = None
