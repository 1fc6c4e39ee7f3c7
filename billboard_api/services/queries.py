"""
Eager-loading options and pagination shared by the services.

Responses are serialized after the session work is done, so every
relationship a schema touches is loaded up front.
"""

from typing import Any, List, Sequence, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from billboard_api.models.billboard import Billboard
from billboard_api.models.booking import BookingRequest
from billboard_api.models.complaint import Complaint
from billboard_api.models.user import User
from billboard_api.schemas.common import PageParams

USER_OPTIONS = (selectinload(User.profile), selectinload(User.admin))

BILLBOARD_OPTIONS = (selectinload(Billboard.owner).selectinload(User.profile),)

BOOKING_OPTIONS = (
    selectinload(BookingRequest.billboard)
    .selectinload(Billboard.owner)
    .selectinload(User.profile),
    selectinload(BookingRequest.advertiser).selectinload(User.profile),
)

COMPLAINT_OPTIONS = (selectinload(Complaint.advertiser).selectinload(User.profile),)


async def paginate(
    db: AsyncSession,
    stmt: Select,
    page: PageParams,
    options: Sequence[Any] = (),
) -> Tuple[List[Any], int]:
    """Run one page of an ORM select and count the full result."""
    total = await db.scalar(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    )
    result = await db.execute(
        stmt.options(*options).offset(page.offset).limit(page.limit)
    )
    return list(result.scalars().all()), total or 0
