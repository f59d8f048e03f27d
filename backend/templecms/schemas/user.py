"""Account schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=150, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=2, max_length=255)
    phone: str | None = Field(None, max_length=32)
    address: str | None = None


class LoginRequest(BaseModel):
    # Accepts either the username or the email address
    username: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: "UserResponse"


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    name: str
    phone: str | None = None
    address: str | None = None
    role: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=255)
    phone: str | None = Field(None, max_length=32)
    address: str | None = None


class UserAdminUpdate(BaseModel):
    role: Literal["user", "admin"] | None = None
    is_active: bool | None = None


TokenResponse.model_rebuild()
