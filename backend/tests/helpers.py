"""Shared helpers for API tests: users, tokens, seeded content and signed callbacks."""

import uuid
from datetime import datetime

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.security import create_access_token, hash_password
from templecms.models.donation_category import DonationCard, DonationCategory
from templecms.models.event import Event, EventDonationCard
from templecms.models.user import User
from templecms.services import payu

DONOR = {
    "name": "Ramesh Kumar",
    "email": "ramesh@example.com",
    "phone": "9876543210",
}


def _uid() -> str:
    return uuid.uuid4().hex[:8]


async def create_user(
    db: AsyncSession, *, role: str = "user", password: str = "password123"
) -> User:
    uid = _uid()
    user = User(
        username=f"{role}-{uid}",
        email=f"{role}-{uid}@example.com",
        password_hash=hash_password(password),
        name=f"Test {role.title()}",
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


async def admin_headers(db: AsyncSession) -> dict:
    return auth_headers(await create_user(db, role="admin"))


async def seed_category(
    db: AsyncSession, *, name: str = "Annadanam", is_active: bool = True
) -> DonationCategory:
    category = DonationCategory(name=name, is_active=is_active, sort_order=1)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def seed_card(
    db: AsyncSession, category: DonationCategory, amount: int = 1100
) -> DonationCard:
    card = DonationCard(category_id=category.id, title=f"Seva {amount}", amount=amount)
    db.add(card)
    await db.commit()
    await db.refresh(card)
    return card


async def seed_event(db: AsyncSession, *, title: str = "Janmashtami Utsav") -> Event:
    event = Event(title=title, date=datetime(2026, 9, 4, 18, 0))
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


async def seed_event_card(
    db: AsyncSession, event: Event, amount: int = 2100
) -> EventDonationCard:
    card = EventDonationCard(event_id=event.id, title=f"Utsav Seva {amount}", amount=amount)
    db.add(card)
    await db.commit()
    await db.refresh(card)
    return card


async def initiate(client: AsyncClient, headers: dict | None = None, **overrides) -> dict:
    """POST /payments/initiate and return the response body."""
    body = {**DONOR, "amount": 501, **overrides}
    resp = await client.post("/api/v1/payments/initiate", json=body, headers=headers or {})
    assert resp.status_code == 201, resp.text
    return resp.json()


def signed_callback(params: dict, status: str = "success", **extra: str) -> dict:
    """Gateway post-back for an initiated donation, hashed with the merchant salt."""
    fields = {
        "mihpayid": "403993715531077182",
        "key": params["key"],
        "txnid": params["txnid"],
        "amount": f"{params['amount']}.00",
        "productinfo": params["productinfo"],
        "firstname": params["firstname"],
        "email": params["email"],
        "udf1": params["udf1"],
        "status": status,
        **extra,
    }
    fields["hash"] = payu.response_hash(fields)
    return fields
