"""
Password reset code model.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billboard_api.models.base import BaseModel


class ResetMethod(str, PyEnum):
    """Channel the reset code was sent through."""

    EMAIL = "email"
    PHONE = "phone"


class PasswordReset(BaseModel):
    """A one-time six digit code allowing a password change."""

    __tablename__ = "password_resets"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reset_code: Mapped[str] = mapped_column(String(6), nullable=False)
    method: Mapped[ResetMethod] = mapped_column(Enum(ResetMethod), nullable=False)
    contact_value: Mapped[str] = mapped_column(String(255), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    user = relationship("User")
