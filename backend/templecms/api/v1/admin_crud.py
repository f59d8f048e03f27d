"""Uniform admin CRUD for content tables.

Every resource gets the same five endpoints:

GET    /admin/<resource>
POST   /admin/<resource>            (201)
GET    /admin/<resource>/{item_id}
PUT    /admin/<resource>/{item_id}  (partial update)
DELETE /admin/<resource>/{item_id}  (204)

Role checks live on the parent admin router, not here.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.dependencies import get_db
from templecms.db.base import Base
from templecms.models.bank_details import BankDetails, CategoryBankDetails, EventBankDetails
from templecms.models.blog_post import BlogPost
from templecms.models.content import (
    Banner,
    GalleryItem,
    LiveVideo,
    Quote,
    Schedule,
    SocialLink,
    Stat,
    Testimonial,
    Video,
)
from templecms.models.donation_category import DonationCard, DonationCategory
from templecms.models.event import Event, EventDonationCard
from templecms.schemas.bank_details import (
    BankDetailsCreate,
    BankDetailsResponse,
    BankDetailsUpdate,
)
from templecms.schemas.blog_post import BlogPostCreate, BlogPostResponse, BlogPostUpdate
from templecms.schemas.content import (
    BannerCreate,
    BannerResponse,
    BannerUpdate,
    GalleryItemCreate,
    GalleryItemResponse,
    GalleryItemUpdate,
    LiveVideoCreate,
    LiveVideoResponse,
    LiveVideoUpdate,
    QuoteCreate,
    QuoteResponse,
    QuoteUpdate,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
    SocialLinkCreate,
    SocialLinkResponse,
    SocialLinkUpdate,
    StatCreate,
    StatResponse,
    StatUpdate,
    TestimonialCreate,
    TestimonialResponse,
    TestimonialUpdate,
    VideoCreate,
    VideoResponse,
    VideoUpdate,
)
from templecms.schemas.donation_category import (
    DonationCardCreate,
    DonationCardResponse,
    DonationCardUpdate,
    DonationCategoryCreate,
    DonationCategoryResponse,
    DonationCategoryUpdate,
)
from templecms.schemas.event import (
    EventCreate,
    EventDonationCardCreate,
    EventDonationCardResponse,
    EventDonationCardUpdate,
    EventResponse,
    EventUpdate,
)

DEFAULT_LIMIT = 100


def _ordering(model: type[Base]) -> list:
    if hasattr(model, "sort_order"):
        return [model.sort_order.asc(), model.id.asc()]
    return [model.id.desc()]


def _reject_nulls(model: type[Base], data: dict[str, Any]) -> None:
    columns = model.__table__.columns
    for field, value in data.items():
        if value is None and field in columns and not columns[field].nullable:
            raise HTTPException(status_code=422, detail=f"{field} cannot be null")


async def _check_parents(
    db: AsyncSession, parents: dict[str, type[Base]], data: dict[str, Any]
) -> None:
    for field, parent in parents.items():
        if data.get(field) is not None and await db.get(parent, data[field]) is None:
            raise HTTPException(
                status_code=422,
                detail=f"{field} {data[field]} does not reference an existing {parent.__name__}",
            )


async def _flush_unique(db: AsyncSession, label: str) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        raise HTTPException(
            status_code=409, detail=f"{label} conflicts with an existing record"
        ) from exc


def crud_router(
    model: type[Base],
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
    *,
    label: str,
    parents: dict[str, type[Base]] | None = None,
    ordering: list | None = None,
) -> APIRouter:
    router = APIRouter()
    parents = parents or {}
    order_by = ordering if ordering is not None else _ordering(model)
    slug = model.__tablename__

    async def _get_or_404(db: AsyncSession, item_id: int):
        item = await db.get(model, item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return item

    @router.get("", response_model=list[response_schema], name=f"admin_list_{slug}")
    async def list_items(
        is_active: bool | None = Query(None),
        limit: int = Query(DEFAULT_LIMIT, ge=1, le=500),
        offset: int = Query(0, ge=0),
        db: AsyncSession = Depends(get_db),
    ):
        stmt = select(model).order_by(*order_by)
        if is_active is not None and hasattr(model, "is_active"):
            stmt = stmt.where(model.is_active == is_active)
        result = await db.execute(stmt.offset(offset).limit(limit))
        return [response_schema.model_validate(r) for r in result.scalars().all()]

    @router.post(
        "", response_model=response_schema, status_code=201, name=f"admin_create_{slug}"
    )
    async def create_item(body: create_schema, db: AsyncSession = Depends(get_db)):
        data = body.model_dump()
        await _check_parents(db, parents, data)
        item = model(**data)
        db.add(item)
        await _flush_unique(db, label)
        await db.refresh(item)
        return response_schema.model_validate(item)

    @router.get("/{item_id}", response_model=response_schema, name=f"admin_get_{slug}")
    async def get_item(item_id: int, db: AsyncSession = Depends(get_db)):
        return response_schema.model_validate(await _get_or_404(db, item_id))

    @router.put("/{item_id}", response_model=response_schema, name=f"admin_update_{slug}")
    async def update_item(
        item_id: int, body: update_schema, db: AsyncSession = Depends(get_db)
    ):
        item = await _get_or_404(db, item_id)
        update_data = body.model_dump(exclude_unset=True)
        _reject_nulls(model, update_data)
        await _check_parents(db, parents, update_data)
        for field, value in update_data.items():
            setattr(item, field, value)
        await _flush_unique(db, label)
        await db.refresh(item)
        return response_schema.model_validate(item)

    @router.delete("/{item_id}", status_code=204, name=f"admin_delete_{slug}")
    async def delete_item(item_id: int, db: AsyncSession = Depends(get_db)) -> None:
        item = await _get_or_404(db, item_id)
        await db.delete(item)
        await db.flush()

    return router


def scoped_bank_details_router(
    model: type[CategoryBankDetails] | type[EventBankDetails],
    parent: type[DonationCategory] | type[Event],
    parent_field: str,
    label: str,
) -> APIRouter:
    """Bank details nested under one category or event: ``/{parent_id}/bank-details``."""
    router = APIRouter()
    slug = model.__tablename__
    owner = getattr(model, parent_field)

    async def _parent_or_404(db: AsyncSession, parent_id: int) -> None:
        if await db.get(parent, parent_id) is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")

    async def _item_or_404(db: AsyncSession, parent_id: int, item_id: int):
        result = await db.execute(
            select(model).where(model.id == item_id, owner == parent_id)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise HTTPException(status_code=404, detail="Bank details not found")
        return item

    @router.get(
        "/{parent_id}/bank-details",
        response_model=list[BankDetailsResponse],
        name=f"admin_list_{slug}",
    )
    async def list_items(parent_id: int, db: AsyncSession = Depends(get_db)):
        await _parent_or_404(db, parent_id)
        result = await db.execute(select(model).where(owner == parent_id).order_by(model.id))
        return [BankDetailsResponse.model_validate(r) for r in result.scalars().all()]

    @router.post(
        "/{parent_id}/bank-details",
        response_model=BankDetailsResponse,
        status_code=201,
        name=f"admin_create_{slug}",
    )
    async def create_item(
        parent_id: int, body: BankDetailsCreate, db: AsyncSession = Depends(get_db)
    ):
        await _parent_or_404(db, parent_id)
        item = model(**body.model_dump(), **{parent_field: parent_id})
        db.add(item)
        await db.flush()
        await db.refresh(item)
        return BankDetailsResponse.model_validate(item)

    @router.get(
        "/{parent_id}/bank-details/{item_id}",
        response_model=BankDetailsResponse,
        name=f"admin_get_{slug}",
    )
    async def get_item(parent_id: int, item_id: int, db: AsyncSession = Depends(get_db)):
        return BankDetailsResponse.model_validate(await _item_or_404(db, parent_id, item_id))

    @router.put(
        "/{parent_id}/bank-details/{item_id}",
        response_model=BankDetailsResponse,
        name=f"admin_update_{slug}",
    )
    async def update_item(
        parent_id: int,
        item_id: int,
        body: BankDetailsUpdate,
        db: AsyncSession = Depends(get_db),
    ):
        item = await _item_or_404(db, parent_id, item_id)
        update_data = body.model_dump(exclude_unset=True)
        _reject_nulls(model, update_data)
        for field, value in update_data.items():
            setattr(item, field, value)
        await db.flush()
        await db.refresh(item)
        return BankDetailsResponse.model_validate(item)

    @router.delete(
        "/{parent_id}/bank-details/{item_id}", status_code=204, name=f"admin_delete_{slug}"
    )
    async def delete_item(parent_id: int, item_id: int, db: AsyncSession = Depends(get_db)):
        item = await _item_or_404(db, parent_id, item_id)
        await db.delete(item)
        await db.flush()

    return router


router = APIRouter()

_RESOURCES = [
    ("/banners", Banner, BannerCreate, BannerUpdate, BannerResponse, "Banner", {}),
    ("/quotes", Quote, QuoteCreate, QuoteUpdate, QuoteResponse, "Quote", {}),
    (
        "/gallery",
        GalleryItem,
        GalleryItemCreate,
        GalleryItemUpdate,
        GalleryItemResponse,
        "Gallery item",
        {},
    ),
    ("/videos", Video, VideoCreate, VideoUpdate, VideoResponse, "Video", {}),
    (
        "/live-videos",
        LiveVideo,
        LiveVideoCreate,
        LiveVideoUpdate,
        LiveVideoResponse,
        "Live video",
        {},
    ),
    (
        "/testimonials",
        Testimonial,
        TestimonialCreate,
        TestimonialUpdate,
        TestimonialResponse,
        "Testimonial",
        {},
    ),
    (
        "/social-links",
        SocialLink,
        SocialLinkCreate,
        SocialLinkUpdate,
        SocialLinkResponse,
        "Social link",
        {},
    ),
    ("/stats", Stat, StatCreate, StatUpdate, StatResponse, "Stat", {}),
    ("/schedules", Schedule, ScheduleCreate, ScheduleUpdate, ScheduleResponse, "Schedule", {}),
    (
        "/donation-categories",
        DonationCategory,
        DonationCategoryCreate,
        DonationCategoryUpdate,
        DonationCategoryResponse,
        "Donation category",
        {},
    ),
    (
        "/donation-cards",
        DonationCard,
        DonationCardCreate,
        DonationCardUpdate,
        DonationCardResponse,
        "Donation card",
        {"category_id": DonationCategory},
    ),
    (
        "/event-donation-cards",
        EventDonationCard,
        EventDonationCardCreate,
        EventDonationCardUpdate,
        EventDonationCardResponse,
        "Event donation card",
        {"event_id": Event},
    ),
    (
        "/bank-details",
        BankDetails,
        BankDetailsCreate,
        BankDetailsUpdate,
        BankDetailsResponse,
        "Bank details",
        {},
    ),
]

for _path, _model, _create, _update, _response, _label, _parents in _RESOURCES:
    router.include_router(
        crud_router(_model, _create, _update, _response, label=_label, parents=_parents),
        prefix=_path,
    )

router.include_router(
    crud_router(
        Event,
        EventCreate,
        EventUpdate,
        EventResponse,
        label="Event",
        ordering=[Event.date.desc(), Event.id.desc()],
    ),
    prefix="/events",
)
router.include_router(
    crud_router(
        BlogPost,
        BlogPostCreate,
        BlogPostUpdate,
        BlogPostResponse,
        label="Blog post",
        ordering=[BlogPost.created_at.desc(), BlogPost.id.desc()],
    ),
    prefix="/blog-posts",
)
router.include_router(
    scoped_bank_details_router(CategoryBankDetails, DonationCategory, "category_id", "Category"),
    prefix="/categories",
)
router.include_router(
    scoped_bank_details_router(EventBankDetails, Event, "event_id", "Event"),
    prefix="/events",
)
