"""
Booking request model.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billboard_api.models.base import BaseModel


class BookingStatus(str, PyEnum):
    """Booking request lifecycle status."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class DisputeStatus(str, PyEnum):
    """Dispute sub-record status on an approved booking."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


# Statuses that hold a window on the billboard calendar
LIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)


class BookingRequest(BaseModel):
    """An advertiser's request to rent a billboard for a time window."""

    __tablename__ = "booking_requests"
    __table_args__ = (
        Index("ix_booking_requests_billboard_window", "billboard_id", "start_date", "end_date"),
    )

    billboard_id: Mapped[int] = mapped_column(
        ForeignKey("billboards.id"),
        nullable=False,
        index=True,
    )
    advertiser_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Window, half-open [start_date, end_date)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    response_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Dispute sub-record
    has_dispute: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    dispute_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dispute_status: Mapped[Optional[DisputeStatus]] = mapped_column(
        Enum(DisputeStatus),
        nullable=True,
    )

    billboard = relationship("Billboard", back_populates="booking_requests")
    advertiser = relationship("User", back_populates="booking_requests")

    def __repr__(self) -> str:
        return (
            f"<BookingRequest(id={self.id}, billboard_id={self.billboard_id}, "
            f"status={self.status})>"
        )
