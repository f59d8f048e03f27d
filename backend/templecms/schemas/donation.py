"""Donation intake, gateway and receipt schemas."""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from templecms.core.config import settings
from templecms.schemas.donation_category import DonationCardResponse, DonationCategoryResponse
from templecms.schemas.event import EventDonationCardResponse, EventResponse

PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")


class DonationIntake(BaseModel):
    """Donor details plus exactly one donation target."""

    amount: int = Field(..., ge=1)
    name: str = Field(..., max_length=255)
    email: EmailStr
    phone: str = Field(..., max_length=32)
    address: str | None = Field(None, max_length=1000)
    pan_card: str | None = None
    message: str | None = Field(None, max_length=2000)
    category_id: int | None = None
    event_id: int | None = None
    card_id: int | None = None
    event_card_id: int | None = None

    @field_validator("amount")
    @classmethod
    def _amount_within_limits(cls, v: int) -> int:
        if v < settings.PAYMENT_MIN_AMOUNT:
            raise ValueError(f"amount must be at least {settings.PAYMENT_MIN_AMOUNT}")
        if v > settings.PAYMENT_MAX_AMOUNT:
            raise ValueError(f"amount must not exceed {settings.PAYMENT_MAX_AMOUNT}")
        return v

    @field_validator("name")
    @classmethod
    def _name_length(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("name must be at least 2 characters")
        return v

    @field_validator("phone")
    @classmethod
    def _phone_digits(cls, v: str) -> str:
        v = v.strip()
        if len(re.sub(r"\D", "", v)) < 10:
            raise ValueError("phone must contain at least 10 digits")
        return v

    @field_validator("pan_card")
    @classmethod
    def _pan_format(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip().upper()
        if not PAN_PATTERN.match(v):
            raise ValueError("pan_card must look like ABCDE1234F")
        return v

    @model_validator(mode="after")
    def _one_target(self) -> "DonationIntake":
        targets = (self.category_id, self.event_id, self.card_id, self.event_card_id)
        if all(t is None for t in targets):
            raise ValueError(
                "one of category_id, event_id, card_id or event_card_id is required"
            )
        category_side = self.category_id is not None or self.card_id is not None
        event_side = self.event_id is not None or self.event_card_id is not None
        if category_side and event_side:
            raise ValueError("a donation targets either a category or an event, not both")
        return self


class GatewayParams(BaseModel):
    """Form fields the browser posts to the gateway's hosted page."""

    key: str
    txnid: str
    amount: str
    productinfo: str
    firstname: str
    email: str
    phone: str
    udf1: str
    surl: str
    furl: str
    hash: str


class InitiateResponse(BaseModel):
    txnid: str
    payment_url: str
    params: GatewayParams


class GatewayCallback(BaseModel):
    """Form post the gateway sends to surl/furl/webhook.

    Unknown fields are kept so the full payload can be stored on the donation.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    txnid: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    hash: str = Field(..., min_length=1)
    key: str = ""
    amount: str = ""
    productinfo: str = ""
    firstname: str = ""
    email: str = ""
    udf1: str = ""
    udf2: str = ""
    udf3: str = ""
    udf4: str = ""
    udf5: str = ""
    additional_charges: str | None = Field(None, alias="additionalCharges")
    mihpayid: str | None = None
    error_message: str | None = Field(None, alias="error_Message")


class ReconcileResult(BaseModel):
    txnid: str
    status: str
    gateway_status: str
    transitioned: bool


class DonationResponse(BaseModel):
    id: int
    user_id: int | None = None
    category_id: int | None = None
    event_id: int | None = None
    card_id: int | None = None
    event_card_id: int | None = None
    amount: int
    name: str
    email: str
    phone: str
    address: str | None = None
    pan_card: str | None = None
    message: str | None = None
    payment_id: str
    status: str
    invoice_number: str | None = None
    receipt_sent: bool
    notification_sent: bool
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class DonationAdminResponse(DonationResponse):
    payment_gateway_response: str | None = None


class DonorSummary(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class DonationDetails(BaseModel):
    donation: DonationResponse
    user: DonorSummary | None = None
    type: Literal["event", "category"] | None = None
    event: EventResponse | None = None
    category: DonationCategoryResponse | None = None
    card: DonationCardResponse | EventDonationCardResponse | None = None


class SendReceiptRequest(BaseModel):
    txnid: str = Field(..., min_length=1, max_length=64)


class SendReceiptResponse(BaseModel):
    txnid: str
    sent: bool


class CategoryTotal(BaseModel):
    category_id: int | None
    name: str
    total: int
    count: int


class DashboardStats(BaseModel):
    total_users: int
    completed_donations: int
    completed_amount: int
    pending_donations: int
    pending_amount: int
    failed_donations: int
    unread_messages: int
    by_category: list[CategoryTotal]
