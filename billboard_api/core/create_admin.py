"""
Bootstrap administrator.
Create (or promote) the account configured by ADMIN_EMAIL / ADMIN_PASSWORD.
Safe to run repeatedly.
"""

import asyncio
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.core.config import settings
from billboard_api.core.database import AsyncSessionLocal
from billboard_api.core.logging import get_logger, setup_logging
from billboard_api.core.security import get_password_hash
from billboard_api.models.user import AdminFlag, Profile, User, UserRole
from billboard_api.services.queries import USER_OPTIONS

logger = get_logger(__name__)


async def ensure_admin_user(
    db: AsyncSession,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """Return the administrator for `email`, creating or promoting it as needed.

    An existing account keeps its password; only its role and admin flag
    are brought in line.
    """
    email = (email or settings.admin_email).strip().lower()
    password = password or settings.admin_password

    result = await db.execute(
        select(User).where(func.lower(User.email) == email).options(*USER_OPTIONS)
    )
    user = result.scalar_one_or_none()

    if user is None:
        if not password:
            raise ValueError("ADMIN_PASSWORD must be set to create the administrator")
        user = User(
            email=email,
            hashed_password=get_password_hash(password),
            is_active=True,
            is_verified=True,
        )
        user.profile = Profile(
            first_name=settings.admin_first_name,
            last_name=settings.admin_last_name,
            role=UserRole.ADMIN,
        )
        user.admin = AdminFlag()
        db.add(user)
        await db.commit()
        logger.info("admin_created", user_id=user.id, email=email)
    elif user.is_admin and user.role == UserRole.ADMIN:
        logger.info("admin_exists", user_id=user.id, email=email)
        return user
    else:
        if user.profile is None:
            user.profile = Profile(
                first_name=settings.admin_first_name,
                last_name=settings.admin_last_name,
                role=UserRole.ADMIN,
            )
        else:
            user.profile.role = UserRole.ADMIN
        if user.admin is None:
            user.admin = AdminFlag()
        await db.commit()
        logger.info("admin_promoted", user_id=user.id, email=email)

    result = await db.execute(
        select(User)
        .where(User.id == user.id)
        .options(*USER_OPTIONS)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_admin() -> None:
    async with AsyncSessionLocal() as session:
        await ensure_admin_user(session)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(create_admin())
