"""Upload response schemas."""

from datetime import datetime

from pydantic import BaseModel


class UploadResponse(BaseModel):
    id: int
    url: str
    s3_key: str


class MediaAssetResponse(BaseModel):
    id: int
    s3_key: str
    url: str
    file_name: str | None = None
    content_type: str | None = None
    size_bytes: int
    created_at: datetime

    model_config = {"from_attributes": True}
