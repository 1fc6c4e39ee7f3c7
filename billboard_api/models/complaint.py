"""
Complaint model.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billboard_api.models.base import BaseModel


class ComplaintStatus(str, PyEnum):
    """Complaint status enumeration."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class Complaint(BaseModel):
    """A user complaint answered by an administrator."""

    __tablename__ = "complaints"

    advertiser_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ComplaintStatus] = mapped_column(
        Enum(ComplaintStatus),
        nullable=False,
        default=ComplaintStatus.OPEN,
        index=True,
    )
    admin_response: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    advertiser = relationship("User", back_populates="complaints")

    def __repr__(self) -> str:
        return f"<Complaint(id={self.id}, status={self.status})>"
