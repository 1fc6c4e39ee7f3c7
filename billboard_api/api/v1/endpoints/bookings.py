"""
Booking request endpoints.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.api.dependencies import (
    get_current_caller,
    get_notifier,
    get_page_params,
    require_roles,
)
from billboard_api.core.access import Caller
from billboard_api.core.database import get_db
from billboard_api.models.booking import BookingStatus
from billboard_api.models.user import UserRole
from billboard_api.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingMessageResponse,
    BookingStatusUpdate,
    DisputeCreate,
)
from billboard_api.schemas.common import PageParams, PaginationMeta
from billboard_api.services.booking import BookingService
from billboard_api.services.notifications import NotificationService

router = APIRouter()

require_advertiser = require_roles(UserRole.ADVERTISER)
require_owner = require_roles(UserRole.OWNER)


@router.post("", response_model=BookingMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_request(
    booking_in: BookingCreate,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    caller: Caller = Depends(require_advertiser),
) -> Any:
    """Request a billboard for a time window."""
    booking = await BookingService(db, notifier).create_booking(caller, booking_in)
    return {"message": "Booking request created successfully", "booking_request": booking}


@router.get("/my", response_model=BookingListResponse)
async def my_booking_requests(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_advertiser),
) -> Any:
    bookings, total = await BookingService(db).my_booking_requests(caller, page, status_filter)
    return {
        "booking_requests": bookings,
        "pagination": PaginationMeta.build(page.page, page.limit, total),
    }


@router.get("/my/{booking_id}", response_model=BookingDetailResponse)
async def my_booking_request(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_advertiser),
) -> Any:
    booking = await BookingService(db).my_booking(booking_id, caller)
    return {"booking_request": booking}


@router.put("/my/{booking_id}/cancel", response_model=BookingMessageResponse)
async def cancel_booking_request(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_advertiser),
) -> Any:
    """Withdraw a pending request."""
    booking = await BookingService(db).cancel_booking(booking_id, caller)
    return {"message": "Booking request cancelled successfully", "booking_request": booking}


@router.get("/billboard-requests", response_model=BookingListResponse)
async def billboard_booking_requests(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_owner),
) -> Any:
    """Requests received on the caller's billboards."""
    bookings, total = await BookingService(db).billboard_booking_requests(caller, page, status_filter)
    return {
        "booking_requests": bookings,
        "pagination": PaginationMeta.build(page.page, page.limit, total),
    }


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking_request(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
) -> Any:
    booking = await BookingService(db).view_booking(booking_id, caller)
    return {"booking_request": booking}


@router.put("/{booking_id}/status", response_model=BookingMessageResponse)
async def update_booking_status(
    booking_id: int,
    status_in: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    caller: Caller = Depends(require_owner),
) -> Any:
    """Approve or reject a pending request on one of the caller's billboards."""
    booking = await BookingService(db, notifier).update_status(booking_id, caller, status_in)
    return {
        "message": f"Booking request {status_in.status.value.lower()} successfully",
        "booking_request": booking,
    }


@router.post("/{booking_id}/dispute", response_model=BookingMessageResponse)
async def create_dispute(
    booking_id: int,
    dispute_in: DisputeCreate,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    caller: Caller = Depends(get_current_caller),
) -> Any:
    """Open a dispute on an approved booking."""
    booking = await BookingService(db, notifier).create_dispute(
        booking_id, caller, dispute_in.dispute_reason
    )
    return {"message": "Dispute created successfully", "booking_request": booking}
