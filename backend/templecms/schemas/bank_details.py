"""Bank transfer details: temple-wide, per category and per event."""

from pydantic import BaseModel, Field


class BankDetailsCreate(BaseModel):
    account_name: str = Field(..., min_length=1, max_length=255)
    bank_name: str = Field(..., min_length=1, max_length=255)
    account_number: str = Field(..., min_length=1, max_length=64)
    ifsc_code: str = Field(..., min_length=1, max_length=16)
    swift_code: str | None = Field(None, max_length=16)
    qr_code_url: str | None = None
    is_active: bool = True


class BankDetailsUpdate(BaseModel):
    account_name: str | None = Field(None, min_length=1, max_length=255)
    bank_name: str | None = Field(None, min_length=1, max_length=255)
    account_number: str | None = Field(None, min_length=1, max_length=64)
    ifsc_code: str | None = Field(None, min_length=1, max_length=16)
    swift_code: str | None = Field(None, max_length=16)
    qr_code_url: str | None = None
    is_active: bool | None = None


class BankDetailsResponse(BaseModel):
    id: int
    account_name: str
    bank_name: str
    account_number: str
    ifsc_code: str
    swift_code: str | None = None
    qr_code_url: str | None = None
    is_active: bool
    category_id: int | None = None
    event_id: int | None = None

    model_config = {"from_attributes": True}
