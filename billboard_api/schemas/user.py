"""
User and profile schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from billboard_api.models.user import UserRole
from billboard_api.schemas.common import CamelModel, PaginationMeta


class ProfileSummary(CamelModel):
    """Display name fragment joined into other resources."""

    first_name: str
    last_name: str


class ProfileResponse(ProfileSummary):
    role: UserRole
    avatar_url: Optional[str] = None
    bio: Optional[str] = None


class UserSummary(CamelModel):
    """User display data embedded in billboards, bookings and complaints."""

    id: int
    email: str
    profile: Optional[ProfileSummary] = None


class UserResponse(CamelModel):
    """User response schema. Never carries the password hash."""

    id: int
    email: str
    phone: Optional[str] = None
    is_verified: bool
    is_active: bool
    is_admin: bool
    profile: Optional[ProfileResponse] = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(CamelModel):
    """Self-service profile update; the role is changed by admins only."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=1000)
    avatar_url: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("first_name", "last_name")
    @classmethod
    def name_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Name cannot be empty")
        return v


class ProfileUpdateResponse(CamelModel):
    message: str
    user: UserResponse


class UserProfileResponse(CamelModel):
    user: UserResponse


class UserListResponse(CamelModel):
    users: List[UserResponse]
    pagination: PaginationMeta


class UserRoleUpdate(CamelModel):
    """Admin-only role change."""

    role: UserRole
