"""Account registration and login."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from templecms.core.dependencies import get_current_user, get_db
from templecms.core.security import create_access_token, hash_password, verify_password
from templecms.models.user import User
from templecms.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_for(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id, user.role),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    email = str(body.email).lower()
    result = await db.execute(
        select(User).where(or_(User.username == body.username, func.lower(User.email) == email))
    )
    existing = result.scalars().first()
    if existing is not None:
        field = "username" if existing.username == body.username else "email"
        raise HTTPException(status_code=409, detail=f"An account with this {field} already exists")

    user = User(
        username=body.username,
        email=email,
        password_hash=hash_password(body.password),
        name=body.name,
        phone=body.phone,
        address=body.address,
        role="user",
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return _token_for(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    identifier = body.username.strip()
    result = await db.execute(
        select(User).where(
            or_(User.username == identifier, func.lower(User.email) == identifier.lower())
        )
    )
    user = result.scalars().first()
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=401,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is deactivated")
    return _token_for(user)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)
