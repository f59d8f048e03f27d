"""Endpoints for the signed-in donor's own profile and donation history."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.dependencies import get_current_user, get_db
from templecms.models.donation import Donation
from templecms.models.user import User
from templecms.schemas.donation import DonationResponse
from templecms.schemas.user import ProfileUpdate, UserResponse

router = APIRouter()

DEFAULT_LIMIT = 50


@router.get("/me", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)


@router.put("/me", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    update_data = body.model_dump(exclude_unset=True)
    if update_data.get("name", "") is None:
        update_data.pop("name")
    for field, value in update_data.items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.get("/me/donations", response_model=list[DonationResponse])
async def my_donations(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[DonationResponse]:
    stmt = (
        select(Donation)
        .where(Donation.user_id == user.id)
        .order_by(Donation.created_at.desc(), Donation.id.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return [DonationResponse.model_validate(d) for d in result.scalars().all()]
