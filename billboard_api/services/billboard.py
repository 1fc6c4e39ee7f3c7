"""
Listing management: owner-scoped CRUD and public browsing of billboards.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.core.access import Caller
from billboard_api.core.exceptions import Forbidden, NotFound
from billboard_api.core.logging import get_logger
from billboard_api.models.billboard import Billboard, BillboardStatus
from billboard_api.models.booking import BookingRequest, BookingStatus
from billboard_api.models.user import UserRole
from billboard_api.schemas.billboard import BillboardCreate, BillboardFilters, BillboardUpdate
from billboard_api.schemas.common import PageParams
from billboard_api.services.booking import billboard_locks, lock_billboard_row
from billboard_api.services.queries import BILLBOARD_OPTIONS, BOOKING_OPTIONS, paginate
from billboard_api.services.storage import ImageStorage

logger = get_logger(__name__)

FEATURED_LIMIT = 6
REMOVED_LISTING_MESSAGE = "The billboard was removed by its owner."


def bookable_clause():
    """SQL form of Billboard.is_bookable."""
    return and_(
        Billboard.is_active.is_(True),
        Billboard.is_available.is_(True),
        Billboard.is_approved.is_(True),
    )


class BillboardService:
    """Service for managing billboard listings."""

    def __init__(self, db: AsyncSession, storage: Optional[ImageStorage] = None):
        self.db = db
        self.storage = storage or ImageStorage()

    async def get_billboard(self, billboard_id: int) -> Optional[Billboard]:
        """Get a live (not soft-deleted) billboard with its owner loaded."""
        result = await self.db.execute(
            select(Billboard)
            .where(Billboard.id == billboard_id, Billboard.is_active.is_(True))
            .options(*BILLBOARD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _owned_billboard(self, billboard_id: int, caller: Caller) -> Billboard:
        billboard = await self.get_billboard(billboard_id)
        if billboard is None:
            raise NotFound("Billboard not found")
        if billboard.owner_id != caller.user_id:
            raise Forbidden("Access denied")
        return billboard

    async def list_billboards(
        self,
        page: PageParams,
        filters: BillboardFilters,
        caller: Optional[Caller] = None,
    ) -> Tuple[List[Billboard], int]:
        """Public listing; owners additionally see all of their own listings."""
        visible = bookable_clause()
        if caller is not None and caller.role == UserRole.OWNER:
            visible = or_(
                visible,
                and_(Billboard.is_active.is_(True), Billboard.owner_id == caller.user_id),
            )

        query = select(Billboard).where(visible)

        if filters.search:
            query = query.where(or_(
                Billboard.name.icontains(filters.search, autoescape=True),
                Billboard.location.icontains(filters.search, autoescape=True),
                Billboard.description.icontains(filters.search, autoescape=True),
            ))
        if filters.location:
            query = query.where(Billboard.location.icontains(filters.location, autoescape=True))
        if filters.size:
            query = query.where(Billboard.size.icontains(filters.size, autoescape=True))
        if filters.min_price is not None:
            query = query.where(Billboard.price_per_day >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Billboard.price_per_day <= filters.max_price)

        query = query.order_by(Billboard.created_at.desc(), Billboard.id.desc())
        return await paginate(self.db, query, page, BILLBOARD_OPTIONS)

    async def featured_billboards(self, limit: int = FEATURED_LIMIT) -> List[Billboard]:
        result = await self.db.execute(
            select(Billboard)
            .where(bookable_clause())
            .options(*BILLBOARD_OPTIONS)
            .order_by(Billboard.created_at.desc(), Billboard.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def view_billboard(self, billboard_id: int, caller: Optional[Caller] = None) -> Billboard:
        """Bookable listings are public; the rest only for the owner or an admin."""
        billboard = await self.get_billboard(billboard_id)
        if billboard is None:
            raise NotFound("Billboard not found")

        if not billboard.is_bookable:
            allowed = caller is not None and (
                caller.is_admin or caller.user_id == billboard.owner_id
            )
            if not allowed:
                raise Forbidden("Access denied")
        return billboard

    async def my_billboards(self, caller: Caller, page: PageParams) -> Tuple[List[Billboard], int]:
        query = (
            select(Billboard)
            .where(Billboard.owner_id == caller.user_id, Billboard.is_active.is_(True))
            .order_by(Billboard.created_at.desc(), Billboard.id.desc())
        )
        return await paginate(self.db, query, page, BILLBOARD_OPTIONS)

    async def owner_dashboard_stats(self, caller: Caller) -> Dict[str, Any]:
        """Aggregate counts and revenue over the caller's listings."""
        owned = and_(Billboard.owner_id == caller.user_id, Billboard.is_active.is_(True))
        owned_ids = select(Billboard.id).where(Billboard.owner_id == caller.user_id)

        total_billboards = await self.db.scalar(
            select(func.count(Billboard.id)).where(owned)
        ) or 0
        active_billboards = await self.db.scalar(
            select(func.count(Billboard.id)).where(
                owned,
                Billboard.is_available.is_(True),
                Billboard.is_approved.is_(True),
            )
        ) or 0
        pending_requests = await self.db.scalar(
            select(func.count(BookingRequest.id)).where(
                BookingRequest.billboard_id.in_(owned_ids),
                BookingRequest.status == BookingStatus.PENDING,
            )
        ) or 0
        total_bookings = await self.db.scalar(
            select(func.count(BookingRequest.id)).where(
                BookingRequest.billboard_id.in_(owned_ids),
                BookingRequest.status == BookingStatus.APPROVED,
            )
        ) or 0
        revenue = await self.db.scalar(
            select(func.coalesce(func.sum(BookingRequest.total_amount), 0)).where(
                BookingRequest.billboard_id.in_(owned_ids),
                BookingRequest.status == BookingStatus.APPROVED,
            )
        )
        recent = await self.db.execute(
            select(BookingRequest)
            .where(BookingRequest.billboard_id.in_(owned_ids))
            .options(*BOOKING_OPTIONS)
            .order_by(BookingRequest.created_at.desc(), BookingRequest.id.desc())
            .limit(5)
        )

        occupancy_rate = round(active_billboards / total_billboards * 100) if total_billboards else 0
        return {
            "stats": {
                "total_billboards": total_billboards,
                "active_billboards": active_billboards,
                "pending_requests": pending_requests,
                "total_bookings": total_bookings,
                "total_revenue": Decimal(str(revenue or 0)),
                "occupancy_rate": occupancy_rate,
            },
            "recent_bookings": list(recent.scalars().all()),
        }

    async def create_billboard(
        self,
        caller: Caller,
        data: BillboardCreate,
        image: Optional[UploadFile] = None,
    ) -> Billboard:
        """Create a listing; it waits for admin approval before going public."""
        values = data.model_dump()
        if image is not None:
            values["image_url"] = await self.storage.save(image)

        billboard = Billboard(
            owner_id=caller.user_id,
            status=BillboardStatus.PENDING,
            is_approved=False,
            **values,
        )
        self.db.add(billboard)
        await self.db.commit()

        logger.info("billboard_created", billboard_id=billboard.id, owner_id=caller.user_id)
        return await self.get_billboard(billboard.id)

    async def update_billboard(
        self,
        billboard_id: int,
        caller: Caller,
        data: BillboardUpdate,
        image: Optional[UploadFile] = None,
    ) -> Billboard:
        """Partial update by the owner; a rejected listing goes back to review."""
        billboard = await self._owned_billboard(billboard_id, caller)

        previous_image = billboard.image_url
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(billboard, field, value)

        if image is not None:
            billboard.image_url = await self.storage.save(image)

        if billboard.status == BillboardStatus.REJECTED:
            billboard.status = BillboardStatus.PENDING
            billboard.is_approved = False
            billboard.rejection_reason = None
            logger.info("billboard_resubmitted", billboard_id=billboard.id)

        await self.db.commit()

        if previous_image and previous_image != billboard.image_url:
            await self.storage.delete(previous_image)

        logger.info("billboard_updated", billboard_id=billboard.id)
        return await self.get_billboard(billboard.id)

    async def delete_billboard(self, billboard_id: int, caller: Caller) -> None:
        """Soft delete; existing bookings keep a valid reference.

        Runs in the reservation critical section so no request can slip in
        between rejecting the pending ones and hiding the listing.
        """
        await self._owned_billboard(billboard_id, caller)

        async with billboard_locks.get(billboard_id):
            billboard = await lock_billboard_row(self.db, billboard_id)
            if billboard is None or not billboard.is_active:
                raise NotFound("Billboard not found")

            image_url = billboard.image_url
            billboard.is_active = False
            billboard.is_available = False
            billboard.image_url = None

            result = await self.db.execute(
                update(BookingRequest)
                .where(
                    BookingRequest.billboard_id == billboard.id,
                    BookingRequest.status == BookingStatus.PENDING,
                )
                .values(status=BookingStatus.REJECTED, response_message=REMOVED_LISTING_MESSAGE)
            )
            await self.db.commit()

        await self.storage.delete(image_url)

        logger.info(
            "billboard_deleted",
            billboard_id=billboard.id,
            rejected_requests=result.rowcount,
        )
