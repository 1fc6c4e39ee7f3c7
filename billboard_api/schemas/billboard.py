"""
Billboard schemas for API requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field

from billboard_api.models.billboard import BillboardStatus
from billboard_api.schemas.common import CamelModel, Money, PaginationMeta
from billboard_api.schemas.user import UserSummary


class BillboardBase(CamelModel):
    """Base billboard schema with common fields."""

    name: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)
    size: str = Field(..., min_length=1, max_length=50)
    price_per_day: Decimal = Field(..., ge=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    is_available: bool = True


class BillboardCreate(BillboardBase):
    """Schema for creating a new billboard."""

    pass


class BillboardUpdate(CamelModel):
    """Schema for updating an existing billboard."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    size: Optional[str] = Field(None, min_length=1, max_length=50)
    price_per_day: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    is_available: Optional[bool] = None


class BillboardFilters(CamelModel):
    """Search and filter parameters for the public listing."""

    search: Optional[str] = Field(None, max_length=200)
    location: Optional[str] = Field(None, max_length=200)
    size: Optional[str] = Field(None, max_length=50)
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)


class BillboardSummary(CamelModel):
    """Billboard fragment joined into booking requests."""

    id: int
    name: str
    location: str
    size: str
    price_per_day: Money
    image_url: Optional[str] = None
    owner_id: int
    owner: Optional[UserSummary] = None


class BillboardResponse(CamelModel):
    """Schema for billboard response."""

    id: int
    owner_id: int
    owner: Optional[UserSummary] = None
    name: str
    location: str
    size: str
    price_per_day: Money
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool
    is_approved: bool
    status: BillboardStatus
    rejection_reason: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class BillboardDetailResponse(CamelModel):
    billboard: BillboardResponse


class BillboardMessageResponse(CamelModel):
    message: str
    billboard: BillboardResponse


class BillboardListResponse(CamelModel):
    billboards: List[BillboardResponse]
    pagination: PaginationMeta


class FeaturedBillboardsResponse(CamelModel):
    billboards: List[BillboardResponse]


class BillboardApproval(CamelModel):
    """Admin moderation decision on a listing."""

    is_approved: bool
    rejection_reason: Optional[str] = Field(None, max_length=1000)
