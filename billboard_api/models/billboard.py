"""
Billboard listing model.
"""

from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billboard_api.models.base import BaseModel


class BillboardStatus(str, PyEnum):
    """Moderation status of a listing."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Billboard(BaseModel):
    """Advertising space listed by an owner."""

    __tablename__ = "billboards"

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Listing details
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    size: Mapped[str] = mapped_column(String(50), nullable=False)
    price_per_day: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Owner axis
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Moderation axis
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[BillboardStatus] = mapped_column(
        Enum(BillboardStatus),
        nullable=False,
        default=BillboardStatus.PENDING,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Soft delete marker
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    owner = relationship("User", back_populates="billboards")
    booking_requests = relationship("BookingRequest", back_populates="billboard")

    @property
    def is_bookable(self) -> bool:
        return self.is_active and self.is_available and self.is_approved

    def __repr__(self) -> str:
        return f"<Billboard(id={self.id}, name={self.name}, status={self.status})>"
