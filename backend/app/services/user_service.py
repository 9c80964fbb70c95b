"""User lookups and Google sign-in account provisioning."""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole
from app.services.mail_service import send_welcome_email

logger = logging.getLogger(__name__)


async def get_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession, skip: int = 0, limit: int = 20) -> tuple[list[User], int]:
    """Return one page of users (newest first) and the total count."""
    total = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    result = await db.execute(select(User).order_by(User.created_at.desc()).offset(skip).limit(limit))
    return list(result.scalars().all()), total


async def find_or_create_oauth_user(
    db: AsyncSession,
    email: str,
    name: str,
    avatar_url: str | None,
    provider: str,
    provider_id: str,
) -> tuple[User, bool]:
    """Look up a user by email, creating a verified RENTER if missing.

    Returns the user and whether it was newly created. New users get a
    welcome email.
    """
    user = await get_user_by_email(db, email)

    if user is not None:
        user.auth_provider = provider
        user.auth_provider_id = provider_id
        if avatar_url:
            user.avatar_url = avatar_url
        db.add(user)
        await db.flush()
        return user, False

    user = User(
        email=email,
        name=name,
        avatar_url=avatar_url,
        auth_provider=provider,
        auth_provider_id=provider_id,
        role=UserRole.RENTER,
        verified=True,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("Created %s user %s via %s sign-in", user.role.value, user.id, provider)
    await send_welcome_email(user.email, user.name)
    return user, True
