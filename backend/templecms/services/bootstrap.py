"""Startup tasks run from the application lifespan."""

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.config import settings
from templecms.core.security import hash_password
from templecms.models.user import User

logger = logging.getLogger(__name__)


async def ensure_default_admin(db: AsyncSession) -> User | None:
    """Create the configured admin account when no admin exists yet.

    Does nothing unless DEFAULT_ADMIN_PASSWORD is set.
    """
    if not settings.DEFAULT_ADMIN_PASSWORD:
        return None

    existing = await db.execute(select(User.id).where(User.role == "admin").limit(1))
    if existing.scalar_one_or_none() is not None:
        return None

    taken = await db.execute(
        select(User).where(
            or_(
                User.username == settings.DEFAULT_ADMIN_USERNAME,
                User.email == settings.DEFAULT_ADMIN_EMAIL,
            )
        )
    )
    user = taken.scalars().first()
    if user is not None:
        user.role = "admin"
        user.is_active = True
        logger.info("Promoted existing user %s to admin", user.username)
    else:
        user = User(
            username=settings.DEFAULT_ADMIN_USERNAME,
            email=settings.DEFAULT_ADMIN_EMAIL,
            password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
            name="Administrator",
            role="admin",
        )
        db.add(user)
        logger.info("Created default admin user %s", user.username)
    await db.flush()
    return user
