"""Blog post schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    excerpt: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)
    image_alt: str | None = Field(None, min_length=1, max_length=125)
    author: str = Field(..., min_length=1, max_length=100)
    read_time: int = Field(..., ge=1)
    is_published: bool = False
    published_at: datetime | None = None
    seo_title: str | None = Field(None, min_length=1, max_length=60)
    seo_description: str | None = Field(None, min_length=1, max_length=160)
    seo_keywords: str | None = None


class BlogPostUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(
        None, min_length=1, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
    )
    excerpt: str | None = Field(None, min_length=1)
    content: str | None = Field(None, min_length=1)
    image_url: str | None = Field(None, min_length=1)
    image_alt: str | None = Field(None, min_length=1, max_length=125)
    author: str | None = Field(None, min_length=1, max_length=100)
    read_time: int | None = Field(None, ge=1)
    is_published: bool | None = None
    published_at: datetime | None = None
    seo_title: str | None = Field(None, min_length=1, max_length=60)
    seo_description: str | None = Field(None, min_length=1, max_length=160)
    seo_keywords: str | None = None


class BlogPostResponse(BaseModel):
    id: int
    title: str
    slug: str
    excerpt: str
    content: str
    image_url: str
    image_alt: str | None = None
    author: str
    read_time: int
    is_published: bool
    published_at: datetime | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    seo_keywords: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
