"""Public contact form and newsletter subscription."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.dependencies import get_db
from templecms.models.contact_message import ContactMessage
from templecms.models.subscription import Subscription
from templecms.schemas.contact import (
    ContactMessageCreate,
    ContactMessageResponse,
    SubscriptionCreate,
    SubscriptionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/contact", response_model=ContactMessageResponse, status_code=201)
async def submit_contact(
    body: ContactMessageCreate,
    db: AsyncSession = Depends(get_db),
) -> ContactMessageResponse:
    message = ContactMessage(
        name=body.name.strip(),
        email=str(body.email),
        phone=body.phone,
        subject=body.subject.strip(),
        message=body.message,
    )
    db.add(message)
    await db.flush()
    await db.refresh(message)
    logger.info("Stored contact message %s from %s", message.id, message.email)
    return ContactMessageResponse.model_validate(message)


@router.post("/subscribe", response_model=SubscriptionResponse, status_code=201)
async def subscribe(
    body: SubscriptionCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> SubscriptionResponse:
    """Idempotent on email: re-subscribing returns the existing row (200)."""
    email = str(body.email).lower()
    subscription = await _find_subscription(db, email)
    if subscription is None:
        subscription = Subscription(email=email)
        db.add(subscription)
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent request inserted the same address first
            await db.rollback()
            subscription = await _find_subscription(db, email)
            if subscription is None:
                raise
        else:
            await db.refresh(subscription)
            return SubscriptionResponse.model_validate(subscription)

    if not subscription.is_active:
        subscription.is_active = True
        await db.flush()
    response.status_code = 200
    return SubscriptionResponse.model_validate(subscription)


async def _find_subscription(db: AsyncSession, email: str) -> Subscription | None:
    result = await db.execute(select(Subscription).where(func.lower(Subscription.email) == email))
    return result.scalar_one_or_none()
