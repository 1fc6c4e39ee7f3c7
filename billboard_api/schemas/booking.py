"""
Booking request and dispute schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from billboard_api.models.booking import BookingStatus, DisputeStatus
from billboard_api.schemas.billboard import BillboardSummary
from billboard_api.schemas.common import CamelModel, Money, PaginationMeta
from billboard_api.schemas.user import UserSummary


class BookingCreate(CamelModel):
    """Schema for creating a booking request."""

    billboard_id: int = Field(..., ge=1)
    start_date: datetime
    end_date: datetime
    message: Optional[str] = Field(None, max_length=1000)


class BookingStatusUpdate(CamelModel):
    """Owner decision on a pending request."""

    status: BookingStatus
    response_message: Optional[str] = Field(None, max_length=1000)

    @field_validator("status")
    @classmethod
    def validate_decision(cls, v: BookingStatus) -> BookingStatus:
        if v not in (BookingStatus.APPROVED, BookingStatus.REJECTED):
            raise ValueError("Status must be APPROVED or REJECTED")
        return v


class DisputeCreate(CamelModel):
    dispute_reason: str = Field(..., min_length=1, max_length=1000)


class DisputeStatusUpdate(CamelModel):
    dispute_status: DisputeStatus


class BookingResponse(CamelModel):
    """Booking request joined with billboard, owner and advertiser display data."""

    id: int
    billboard_id: int
    advertiser_id: int
    billboard: Optional[BillboardSummary] = None
    advertiser: Optional[UserSummary] = None
    start_date: datetime
    end_date: datetime
    total_amount: Money
    status: BookingStatus
    message: Optional[str] = None
    response_message: Optional[str] = None
    has_dispute: bool
    dispute_reason: Optional[str] = None
    dispute_status: Optional[DisputeStatus] = None
    created_at: datetime
    updated_at: datetime


class BookingDetailResponse(CamelModel):
    booking_request: BookingResponse


class BookingMessageResponse(CamelModel):
    message: str
    booking_request: BookingResponse


class BookingListResponse(CamelModel):
    booking_requests: List[BookingResponse]
    pagination: PaginationMeta


class DisputeDetailResponse(CamelModel):
    dispute: BookingResponse


class DisputeMessageResponse(CamelModel):
    message: str
    dispute: BookingResponse


class DisputeListResponse(CamelModel):
    disputes: List[BookingResponse]
    pagination: PaginationMeta
