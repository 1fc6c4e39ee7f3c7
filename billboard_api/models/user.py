"""
User, profile and admin flag models.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billboard_api.models.base import BaseModel


class UserRole(str, PyEnum):
    """Marketplace role carried on the profile."""

    ADVERTISER = "ADVERTISER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"


class User(BaseModel):
    """Identity record. Role and display data live on the profile."""

    __tablename__ = "users"

    # Authentication fields
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), unique=True, nullable=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Status fields
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    profile = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    admin = relationship(
        "AdminFlag",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    billboards = relationship("Billboard", back_populates="owner")
    booking_requests = relationship("BookingRequest", back_populates="advertiser")
    complaints = relationship("Complaint", back_populates="advertiser")

    @property
    def is_admin(self) -> bool:
        """Admin status is the presence of an admin flag row."""
        return self.admin is not None

    @property
    def role(self) -> Optional[UserRole]:
        return self.profile.role if self.profile is not None else None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class Profile(BaseModel):
    """Display data and marketplace role, one per user."""

    __tablename__ = "profiles"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole),
        nullable=False,
        default=UserRole.ADVERTISER,
    )
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user = relationship("User", back_populates="profile")

    def __repr__(self) -> str:
        return f"<Profile(user_id={self.user_id}, role={self.role})>"


class AdminFlag(BaseModel):
    """Row presence marks the referenced user as an administrator."""

    __tablename__ = "admins"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    user = relationship("User", back_populates="admin")
