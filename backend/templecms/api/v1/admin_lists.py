"""Admin record views: donations, contact messages, users, subscriptions.

GET    /admin/donations                 (status/category/event filters)
GET    /admin/donations/{id}
DELETE /admin/donations/{id}
POST   /admin/donations/{id}/verify
GET    /admin/contact-messages
PUT    /admin/contact-messages/{id}     (mark read/unread)
DELETE /admin/contact-messages/{id}
GET    /admin/users, PUT/DELETE /admin/users/{id}
GET    /admin/subscriptions
GET    /admin/dashboard-stats

Limit/offset pagination.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.dependencies import get_db, require_admin
from templecms.models.contact_message import ContactMessage
from templecms.models.donation import DONATION_STATUSES, Donation
from templecms.models.donation_category import DonationCategory
from templecms.models.subscription import Subscription
from templecms.models.user import User
from templecms.schemas.contact import (
    ContactMessageMark,
    ContactMessageResponse,
    SubscriptionResponse,
)
from templecms.schemas.donation import (
    CategoryTotal,
    DashboardStats,
    DonationAdminResponse,
    ReconcileResult,
)
from templecms.schemas.user import UserAdminUpdate, UserResponse
from templecms.services import donation_service

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_LIMIT = 50


@router.get("/donations", response_model=list[DonationAdminResponse])
async def list_donations(
    status: str | None = Query(None),
    category_id: int | None = Query(None),
    event_id: int | None = Query(None),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[DonationAdminResponse]:
    stmt = select(Donation).order_by(Donation.created_at.desc(), Donation.id.desc())
    if status:
        status = status.strip().lower()
        if status not in DONATION_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown donation status '{status}'")
        stmt = stmt.where(Donation.status == status)
    if category_id is not None:
        stmt = stmt.where(Donation.category_id == category_id)
    if event_id is not None:
        stmt = stmt.where(Donation.event_id == event_id)
    stmt = stmt.offset(offset).limit(limit)

    result = await db.execute(stmt)
    return [DonationAdminResponse.model_validate(r) for r in result.scalars().all()]


async def _donation_or_404(db: AsyncSession, donation_id: int) -> Donation:
    donation = await db.get(Donation, donation_id)
    if donation is None:
        raise HTTPException(status_code=404, detail="Donation not found")
    return donation


@router.get("/donations/{donation_id}", response_model=DonationAdminResponse)
async def get_donation(
    donation_id: int,
    db: AsyncSession = Depends(get_db),
) -> DonationAdminResponse:
    return DonationAdminResponse.model_validate(await _donation_or_404(db, donation_id))


@router.delete("/donations/{donation_id}", status_code=204)
async def delete_donation(
    donation_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    donation = await _donation_or_404(db, donation_id)
    logger.info(
        "Admin %s deleted donation %s (%s, %s)",
        admin.username,
        donation.payment_id,
        donation.status,
        donation.amount,
    )
    await db.delete(donation)
    await db.flush()


@router.post("/donations/{donation_id}/verify", response_model=ReconcileResult)
async def verify_donation(
    donation_id: int,
    db: AsyncSession = Depends(get_db),
) -> ReconcileResult:
    """Ask the gateway for the final status of a donation stuck in pending."""
    donation = await _donation_or_404(db, donation_id)
    return await donation_service.verify_with_gateway(db, donation.payment_id)


@router.get("/contact-messages", response_model=list[ContactMessageResponse])
async def list_contact_messages(
    is_read: bool | None = Query(None),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[ContactMessageResponse]:
    stmt = select(ContactMessage).order_by(
        ContactMessage.created_at.desc(), ContactMessage.id.desc()
    )
    if is_read is not None:
        stmt = stmt.where(ContactMessage.is_read == is_read)
    result = await db.execute(stmt.offset(offset).limit(limit))
    return [ContactMessageResponse.model_validate(r) for r in result.scalars().all()]


async def _message_or_404(db: AsyncSession, message_id: int) -> ContactMessage:
    message = await db.get(ContactMessage, message_id)
    if message is None:
        raise HTTPException(status_code=404, detail="Contact message not found")
    return message


@router.put("/contact-messages/{message_id}", response_model=ContactMessageResponse)
async def mark_contact_message(
    message_id: int,
    body: ContactMessageMark,
    db: AsyncSession = Depends(get_db),
) -> ContactMessageResponse:
    message = await _message_or_404(db, message_id)
    message.is_read = body.is_read
    await db.flush()
    await db.refresh(message)
    return ContactMessageResponse.model_validate(message)


@router.delete("/contact-messages/{message_id}", status_code=204)
async def delete_contact_message(
    message_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    message = await _message_or_404(db, message_id)
    await db.delete(message)
    await db.flush()


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    role: str | None = Query(None),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[UserResponse]:
    stmt = select(User).order_by(User.id.asc())
    if role:
        stmt = stmt.where(User.role == role.strip().lower())
    result = await db.execute(stmt.offset(offset).limit(limit))
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


async def _user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserAdminUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await _user_or_404(db, user_id)
    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    if user.id == admin.id and (
        update_data.get("role", "admin") != "admin" or update_data.get("is_active") is False
    ):
        raise HTTPException(status_code=409, detail="Admins cannot demote or deactivate themselves")
    for field, value in update_data.items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    user = await _user_or_404(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=409, detail="Admins cannot delete their own account")
    await db.delete(user)
    await db.flush()


@router.get("/subscriptions", response_model=list[SubscriptionResponse])
async def list_subscriptions(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[SubscriptionResponse]:
    stmt = select(Subscription).order_by(Subscription.created_at.desc(), Subscription.id.desc())
    result = await db.execute(stmt.offset(offset).limit(limit))
    return [SubscriptionResponse.model_validate(s) for s in result.scalars().all()]


@router.get("/dashboard-stats", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)) -> DashboardStats:
    total_users = (await db.execute(select(func.count(User.id)))).scalar_one()

    per_status = await db.execute(
        select(
            Donation.status,
            func.count(Donation.id),
            func.coalesce(func.sum(Donation.amount), 0),
        ).group_by(Donation.status)
    )
    counts = {status: (count, int(total)) for status, count, total in per_status.all()}

    unread = (
        await db.execute(
            select(func.count(ContactMessage.id)).where(ContactMessage.is_read.is_(False))
        )
    ).scalar_one()

    completed = case((Donation.status == "completed", 1), else_=0)
    completed_amount = case((Donation.status == "completed", Donation.amount), else_=0)
    by_category = await db.execute(
        select(
            DonationCategory.id,
            DonationCategory.name,
            func.coalesce(func.sum(completed_amount), 0),
            func.coalesce(func.sum(completed), 0),
        )
        .outerjoin(Donation, Donation.category_id == DonationCategory.id)
        .group_by(DonationCategory.id, DonationCategory.name)
        .order_by(DonationCategory.sort_order.asc(), DonationCategory.id.asc())
    )

    return DashboardStats(
        total_users=total_users,
        completed_donations=counts.get("completed", (0, 0))[0],
        completed_amount=counts.get("completed", (0, 0))[1],
        pending_donations=counts.get("pending", (0, 0))[0],
        pending_amount=counts.get("pending", (0, 0))[1],
        failed_donations=counts.get("failed", (0, 0))[0],
        unread_messages=unread,
        by_category=[
            CategoryTotal(category_id=cid, name=name, total=int(total), count=int(count))
            for cid, name, total, count in by_category.all()
        ],
    )
