"""Read-only endpoints for the public website.

Only active rows are returned, in display order.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.dependencies import get_db
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
from templecms.schemas.bank_details import BankDetailsResponse
from templecms.schemas.blog_post import BlogPostResponse
from templecms.schemas.content import (
    BannerResponse,
    GalleryItemResponse,
    LiveVideoResponse,
    QuoteResponse,
    ScheduleResponse,
    SocialLinkResponse,
    StatResponse,
    TestimonialResponse,
    VideoResponse,
)
from templecms.schemas.donation_category import DonationCardResponse, DonationCategoryResponse
from templecms.schemas.event import EventDonationCardResponse, EventResponse

router = APIRouter()

LISTINGS = [
    ("/banners", Banner, BannerResponse),
    ("/quotes", Quote, QuoteResponse),
    ("/gallery", GalleryItem, GalleryItemResponse),
    ("/videos", Video, VideoResponse),
    ("/live-videos", LiveVideo, LiveVideoResponse),
    ("/testimonials", Testimonial, TestimonialResponse),
    ("/social-links", SocialLink, SocialLinkResponse),
    ("/stats", Stat, StatResponse),
    ("/schedules", Schedule, ScheduleResponse),
]


def _add_listing(path: str, model, schema) -> None:
    async def list_active(db: AsyncSession = Depends(get_db)):
        stmt = (
            select(model)
            .where(model.is_active.is_(True))
            .order_by(model.sort_order.asc(), model.id.asc())
        )
        result = await db.execute(stmt)
        return [schema.model_validate(r) for r in result.scalars().all()]

    router.add_api_route(
        path,
        list_active,
        methods=["GET"],
        response_model=list[schema],
        name=f"list_public_{model.__tablename__}",
    )


for _path, _model, _schema in LISTINGS:
    _add_listing(_path, _model, _schema)


async def _active_category(db: AsyncSession, category_id: int) -> DonationCategory:
    category = await db.get(DonationCategory, category_id)
    if category is None or not category.is_active:
        raise HTTPException(status_code=404, detail="Donation category not found")
    return category


async def _active_event(db: AsyncSession, event_id: int) -> Event:
    event = await db.get(Event, event_id)
    if event is None or not event.is_active:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


async def _global_bank_details(db: AsyncSession) -> list[BankDetails]:
    result = await db.execute(
        select(BankDetails).where(BankDetails.is_active.is_(True)).order_by(BankDetails.id)
    )
    return list(result.scalars().all())


@router.get("/donation-categories", response_model=list[DonationCategoryResponse])
async def list_donation_categories(
    db: AsyncSession = Depends(get_db),
) -> list[DonationCategoryResponse]:
    result = await db.execute(
        select(DonationCategory)
        .where(DonationCategory.is_active.is_(True))
        .order_by(DonationCategory.sort_order.asc(), DonationCategory.id.asc())
    )
    return [DonationCategoryResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/donation-categories/{category_id}", response_model=DonationCategoryResponse)
async def get_donation_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> DonationCategoryResponse:
    return DonationCategoryResponse.model_validate(await _active_category(db, category_id))


@router.get("/donation-categories/{category_id}/cards", response_model=list[DonationCardResponse])
async def list_category_cards(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[DonationCardResponse]:
    await _active_category(db, category_id)
    result = await db.execute(
        select(DonationCard)
        .where(DonationCard.category_id == category_id, DonationCard.is_active.is_(True))
        .order_by(DonationCard.sort_order.asc(), DonationCard.amount.asc())
    )
    return [DonationCardResponse.model_validate(c) for c in result.scalars().all()]


@router.get(
    "/donation-categories/{category_id}/bank-details",
    response_model=list[BankDetailsResponse],
)
async def list_category_bank_details(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[BankDetailsResponse]:
    """Category-specific accounts, else the temple-wide ones."""
    await _active_category(db, category_id)
    result = await db.execute(
        select(CategoryBankDetails)
        .where(
            CategoryBankDetails.category_id == category_id,
            CategoryBankDetails.is_active.is_(True),
        )
        .order_by(CategoryBankDetails.id)
    )
    rows = list(result.scalars().all()) or await _global_bank_details(db)
    return [BankDetailsResponse.model_validate(r) for r in rows]


@router.get("/events", response_model=list[EventResponse])
async def list_events(db: AsyncSession = Depends(get_db)) -> list[EventResponse]:
    result = await db.execute(
        select(Event).where(Event.is_active.is_(True)).order_by(Event.date.asc(), Event.id.asc())
    )
    return [EventResponse.model_validate(e) for e in result.scalars().all()]


@router.get("/events/{event_id}", response_model=EventResponse)
async def get_event(event_id: int, db: AsyncSession = Depends(get_db)) -> EventResponse:
    return EventResponse.model_validate(await _active_event(db, event_id))


@router.get("/events/{event_id}/donation-cards", response_model=list[EventDonationCardResponse])
async def list_event_cards(
    event_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[EventDonationCardResponse]:
    await _active_event(db, event_id)
    result = await db.execute(
        select(EventDonationCard)
        .where(EventDonationCard.event_id == event_id, EventDonationCard.is_active.is_(True))
        .order_by(EventDonationCard.sort_order.asc(), EventDonationCard.amount.asc())
    )
    return [EventDonationCardResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/events/{event_id}/bank-details", response_model=list[BankDetailsResponse])
async def list_event_bank_details(
    event_id: int,
    db: AsyncSession = Depends(get_db),
) -> list[BankDetailsResponse]:
    await _active_event(db, event_id)
    result = await db.execute(
        select(EventBankDetails)
        .where(EventBankDetails.event_id == event_id, EventBankDetails.is_active.is_(True))
        .order_by(EventBankDetails.id)
    )
    return [BankDetailsResponse.model_validate(r) for r in result.scalars().all()]


@router.get("/bank-details", response_model=list[BankDetailsResponse])
async def list_bank_details(db: AsyncSession = Depends(get_db)) -> list[BankDetailsResponse]:
    return [BankDetailsResponse.model_validate(r) for r in await _global_bank_details(db)]


@router.get("/blog-posts", response_model=list[BlogPostResponse])
async def list_blog_posts(db: AsyncSession = Depends(get_db)) -> list[BlogPostResponse]:
    result = await db.execute(
        select(BlogPost)
        .where(BlogPost.is_published.is_(True))
        .order_by(BlogPost.published_at.desc(), BlogPost.id.desc())
    )
    return [BlogPostResponse.model_validate(p) for p in result.scalars().all()]


@router.get("/blog-posts/{slug}", response_model=BlogPostResponse)
async def get_blog_post(slug: str, db: AsyncSession = Depends(get_db)) -> BlogPostResponse:
    result = await db.execute(
        select(BlogPost).where(BlogPost.slug == slug, BlogPost.is_published.is_(True))
    )
    post = result.scalar_one_or_none()
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return BlogPostResponse.model_validate(post)
