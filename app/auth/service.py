"""User account persistence: registration, lookup, refresh-token bookkeeping."""

from __future__ import annotations

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, create_refresh_token, hash_password
from app.models.core import User
from app.schemas.auth import RegisterRequest

logger = structlog.get_logger()


async def find_by_email_or_username(
    db: AsyncSession,
    email: str | None,
    username: str | None,
) -> User | None:
    conditions = []
    if email:
        conditions.append(User.email == email.strip().lower())
    if username:
        conditions.append(User.username == username.strip().lower())
    if not conditions:
        return None
    result = await db.execute(select(User).where(or_(*conditions)).limit(1))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, data: RegisterRequest) -> User:
    user = User(
        username=data.username.lower(),
        email=data.email.lower(),
        full_name=data.full_name,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("user_registered", user_id=str(user.id))
    return user


async def issue_tokens(db: AsyncSession, user: User) -> tuple[str, str]:
    """Create an access/refresh pair and remember the refresh token on the user."""
    access_token = create_access_token(
        {"sub": str(user.id), "username": user.username, "email": user.email}
    )
    refresh_token = create_refresh_token({"sub": str(user.id)})
    user.refresh_token = refresh_token
    await db.flush()
    return access_token, refresh_token


async def clear_refresh_token(db: AsyncSession, user: User) -> None:
    user.refresh_token = None
    await db.flush()
