"""
Reservation engine: the booking request lifecycle.

Booking windows are half-open intervals [start_date, end_date). Two
requests on the same billboard may not overlap while both are PENDING or
APPROVED. The check and the write that depends on it run inside a
per-billboard critical section: an in-process asyncio lock plus a row
lock on the billboard (SELECT ... FOR UPDATE where the database supports
it). Locks are process local; running several API processes relies on
the row lock alone.
"""

import asyncio
import weakref
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.core.access import Caller
from billboard_api.core.exceptions import Conflict, Forbidden, InvalidInput, InvalidState, NotFound
from billboard_api.core.logging import get_logger
from billboard_api.models.billboard import Billboard
from billboard_api.models.booking import (
    LIVE_BOOKING_STATUSES,
    BookingRequest,
    BookingStatus,
    DisputeStatus,
)
from billboard_api.schemas.booking import BookingCreate, BookingStatusUpdate
from billboard_api.schemas.common import PageParams
from billboard_api.services.notifications import NotificationService
from billboard_api.services.queries import BOOKING_OPTIONS, paginate

logger = get_logger(__name__)

CENTS = Decimal("0.01")


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Booking windows are stored as naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def billable_days(start: datetime, end: datetime) -> int:
    """Whole days in [start, end), any partial day counting as one."""
    delta = end - start
    return delta.days + (1 if delta.seconds or delta.microseconds else 0)


def compute_total_amount(start: datetime, end: datetime, price_per_day: Decimal) -> Decimal:
    return (Decimal(billable_days(start, end)) * Decimal(price_per_day)).quantize(CENTS)


def overlaps(start: datetime, end: datetime):
    """Requests whose window intersects [start, end); touching ends do not."""
    return and_(BookingRequest.start_date < end, BookingRequest.end_date > start)


class BillboardLocks:
    """One asyncio.Lock per billboard, dropped once nobody holds a reference."""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def get(self, billboard_id: int) -> asyncio.Lock:
        lock = self._locks.get(billboard_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[billboard_id] = lock
        return lock


billboard_locks = BillboardLocks()


async def lock_billboard_row(db: AsyncSession, billboard_id: int) -> Optional[Billboard]:
    """Row lock on the billboard; a no-op on SQLite, where billboard_locks serializes."""
    result = await db.execute(
        select(Billboard)
        .where(Billboard.id == billboard_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


class BookingService:
    """Service for booking requests and disputes."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: Optional[NotificationService] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.notifier = notifier
        self.now = now or utcnow_naive

    async def get_booking(self, booking_id: int) -> Optional[BookingRequest]:
        """Get a booking request joined with billboard, owner and advertiser."""
        result = await self.db.execute(
            select(BookingRequest)
            .where(BookingRequest.id == booking_id)
            .options(*BOOKING_OPTIONS)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _require_booking(self, booking_id: int) -> BookingRequest:
        booking = await self.get_booking(booking_id)
        if booking is None:
            raise NotFound("Booking request not found")
        return booking

    async def _lock_billboard_row(self, billboard_id: int) -> Optional[Billboard]:
        return await lock_billboard_row(self.db, billboard_id)

    async def _find_conflict(
        self,
        billboard_id: int,
        start: datetime,
        end: datetime,
        statuses: Sequence[BookingStatus],
        exclude_id: Optional[int] = None,
    ) -> Optional[int]:
        query = select(BookingRequest.id).where(
            BookingRequest.billboard_id == billboard_id,
            BookingRequest.status.in_(statuses),
            overlaps(start, end),
        )
        if exclude_id is not None:
            query = query.where(BookingRequest.id != exclude_id)
        return await self.db.scalar(query.limit(1))

    async def _notify(self, event: str, *args) -> None:
        """Notifications are best effort and never fail the request."""
        if self.notifier is None:
            return
        try:
            await getattr(self.notifier, event)(*args)
        except Exception as e:
            logger.error("notification_failed", notification=event, error=str(e))

    async def create_booking(self, caller: Caller, data: BookingCreate) -> BookingRequest:
        """Create a PENDING request after checking the listing and the calendar."""
        start = to_naive_utc(data.start_date)
        end = to_naive_utc(data.end_date)

        async with billboard_locks.get(data.billboard_id):
            billboard = await self._lock_billboard_row(data.billboard_id)
            if billboard is None or not billboard.is_active:
                raise NotFound("Billboard not found")
            if not (billboard.is_available and billboard.is_approved):
                raise InvalidState("Billboard is not available for booking")
            if billboard.owner_id == caller.user_id:
                raise InvalidState("Cannot book your own billboard")
            if start.date() < self.now().date():
                raise InvalidInput("Start date cannot be in the past")
            if end <= start:
                raise InvalidInput("End date must be after start date")

            conflict_id = await self._find_conflict(billboard.id, start, end, LIVE_BOOKING_STATUSES)
            if conflict_id is not None:
                logger.info(
                    "booking_conflict",
                    billboard_id=billboard.id,
                    conflicting_booking_id=conflict_id,
                )
                raise Conflict("This billboard is already booked for the selected dates")

            booking = BookingRequest(
                billboard_id=billboard.id,
                advertiser_id=caller.user_id,
                start_date=start,
                end_date=end,
                total_amount=compute_total_amount(start, end, billboard.price_per_day),
                status=BookingStatus.PENDING,
                message=data.message,
            )
            self.db.add(booking)
            await self.db.commit()

        logger.info(
            "booking_created",
            booking_id=booking.id,
            billboard_id=booking.billboard_id,
            advertiser_id=caller.user_id,
            total_amount=str(booking.total_amount),
        )
        booking = await self.get_booking(booking.id)
        await self._notify("booking_requested", booking)
        return booking

    async def update_status(
        self,
        booking_id: int,
        caller: Caller,
        data: BookingStatusUpdate,
    ) -> BookingRequest:
        """Owner approves or rejects a PENDING request."""
        booking = await self._require_booking(booking_id)
        if booking.billboard.owner_id != caller.user_id:
            raise Forbidden("Access denied")

        async with billboard_locks.get(booking.billboard_id):
            await self._lock_billboard_row(booking.billboard_id)
            booking = await self._require_booking(booking_id)
            if booking.status != BookingStatus.PENDING:
                raise InvalidState("Booking request has already been processed")

            if data.status == BookingStatus.APPROVED:
                conflict_id = await self._find_conflict(
                    booking.billboard_id,
                    booking.start_date,
                    booking.end_date,
                    (BookingStatus.APPROVED,),
                    exclude_id=booking.id,
                )
                if conflict_id is not None:
                    raise Conflict("This billboard is already booked for the selected dates")

            previous = booking.status
            booking.status = data.status
            booking.response_message = data.response_message
            await self.db.commit()

        logger.info(
            "booking_status_updated",
            booking_id=booking.id,
            from_status=previous.value,
            to_status=data.status.value,
        )
        booking = await self.get_booking(booking.id)
        await self._notify("booking_decided", booking)
        return booking

    async def cancel_booking(self, booking_id: int, caller: Caller) -> BookingRequest:
        """Advertiser withdraws a PENDING request; the window becomes free."""
        booking = await self._require_booking(booking_id)
        if booking.advertiser_id != caller.user_id:
            raise Forbidden("Access denied")

        async with billboard_locks.get(booking.billboard_id):
            booking = await self._require_booking(booking_id)
            if booking.status != BookingStatus.PENDING:
                raise InvalidState("Only pending booking requests can be cancelled")

            booking.status = BookingStatus.CANCELLED
            await self.db.commit()

        logger.info("booking_cancelled", booking_id=booking.id, advertiser_id=caller.user_id)
        return await self.get_booking(booking.id)

    async def create_dispute(self, booking_id: int, caller: Caller, reason: str) -> BookingRequest:
        """Open the single dispute an APPROVED booking may carry."""
        booking = await self._require_booking(booking_id)
        if caller.user_id not in (booking.advertiser_id, booking.billboard.owner_id):
            raise Forbidden("Access denied")

        async with billboard_locks.get(booking.billboard_id):
            booking = await self._require_booking(booking_id)
            if booking.status != BookingStatus.APPROVED:
                raise InvalidState("Disputes can only be created for approved bookings")
            if booking.has_dispute:
                raise InvalidState("Dispute already exists for this booking")

            booking.has_dispute = True
            booking.dispute_reason = reason
            booking.dispute_status = DisputeStatus.OPEN
            await self.db.commit()

        logger.info("dispute_opened", booking_id=booking.id, opened_by=caller.user_id)
        booking = await self.get_booking(booking.id)
        await self._notify("dispute_opened", booking, caller.user_id)
        return booking

    async def view_booking(self, booking_id: int, caller: Caller) -> BookingRequest:
        """Readable by the advertiser and the billboard owner."""
        booking = await self._require_booking(booking_id)
        if caller.user_id not in (booking.advertiser_id, booking.billboard.owner_id):
            raise Forbidden("Access denied")
        return booking

    async def my_booking(self, booking_id: int, caller: Caller) -> BookingRequest:
        booking = await self._require_booking(booking_id)
        if booking.advertiser_id != caller.user_id:
            raise Forbidden("Access denied")
        return booking

    async def my_booking_requests(
        self,
        caller: Caller,
        page: PageParams,
        status: Optional[BookingStatus] = None,
    ) -> Tuple[List[BookingRequest], int]:
        query = select(BookingRequest).where(BookingRequest.advertiser_id == caller.user_id)
        if status is not None:
            query = query.where(BookingRequest.status == status)
        query = query.order_by(BookingRequest.created_at.desc(), BookingRequest.id.desc())
        return await paginate(self.db, query, page, BOOKING_OPTIONS)

    async def billboard_booking_requests(
        self,
        caller: Caller,
        page: PageParams,
        status: Optional[BookingStatus] = None,
    ) -> Tuple[List[BookingRequest], int]:
        owned_ids = select(Billboard.id).where(Billboard.owner_id == caller.user_id)
        query = select(BookingRequest).where(BookingRequest.billboard_id.in_(owned_ids))
        if status is not None:
            query = query.where(BookingRequest.status == status)
        query = query.order_by(BookingRequest.created_at.desc(), BookingRequest.id.desc())
        return await paginate(self.db, query, page, BOOKING_OPTIONS)
