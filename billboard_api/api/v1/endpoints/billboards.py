"""
Billboard listing endpoints.
"""

from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.api.dependencies import get_optional_caller, get_page_params, require_roles
from billboard_api.core.access import Caller
from billboard_api.core.database import get_db
from billboard_api.models.user import UserRole
from billboard_api.schemas.billboard import (
    BillboardCreate,
    BillboardDetailResponse,
    BillboardFilters,
    BillboardListResponse,
    BillboardMessageResponse,
    BillboardUpdate,
    FeaturedBillboardsResponse,
)
from billboard_api.schemas.common import MessageResponse, PageParams, PaginationMeta
from billboard_api.schemas.dashboard import OwnerDashboardResponse
from billboard_api.services.billboard import BillboardService

router = APIRouter()

require_owner = require_roles(UserRole.OWNER)


def _uploaded(image: Optional[UploadFile]) -> Optional[UploadFile]:
    """Browsers send an empty part when no file was chosen."""
    if image is None or not image.filename:
        return None
    return image


@router.get("", response_model=BillboardListResponse)
async def list_billboards(
    search: Optional[str] = Query(None, max_length=200),
    location: Optional[str] = Query(None, max_length=200),
    size: Optional[str] = Query(None, max_length=50),
    min_price: Optional[Decimal] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[Decimal] = Query(None, ge=0, alias="maxPrice"),
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
) -> Any:
    """Browse bookable billboards; owners also see their own listings."""
    filters = BillboardFilters(
        search=search,
        location=location,
        size=size,
        min_price=min_price,
        max_price=max_price,
    )
    billboards, total = await BillboardService(db).list_billboards(page, filters, caller)
    return {
        "billboards": billboards,
        "pagination": PaginationMeta.build(page.page, page.limit, total),
    }


@router.get("/featured", response_model=FeaturedBillboardsResponse)
async def featured_billboards(
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Newest bookable billboards for the landing page."""
    return {"billboards": await BillboardService(db).featured_billboards()}


@router.get("/my/list", response_model=BillboardListResponse)
async def my_billboards(
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_owner),
) -> Any:
    billboards, total = await BillboardService(db).my_billboards(caller, page)
    return {
        "billboards": billboards,
        "pagination": PaginationMeta.build(page.page, page.limit, total),
    }


@router.get("/my/dashboard-stats", response_model=OwnerDashboardResponse)
async def owner_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_owner),
) -> Any:
    """Counts, revenue and recent requests across the caller's listings."""
    return await BillboardService(db).owner_dashboard_stats(caller)


@router.get("/{billboard_id}", response_model=BillboardDetailResponse)
async def get_billboard(
    billboard_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
) -> Any:
    billboard = await BillboardService(db).view_billboard(billboard_id, caller)
    return {"billboard": billboard}


@router.post("", response_model=BillboardMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_billboard(
    name: str = Form(...),
    location: str = Form(...),
    size: str = Form(...),
    price_per_day: str = Form(..., alias="pricePerDay"),
    description: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    is_available: bool = Form(True, alias="isAvailable"),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_owner),
) -> Any:
    """Create a listing from a multipart form with an optional image."""
    values = {
        "name": name,
        "location": location,
        "size": size,
        "price_per_day": price_per_day,
        "description": description or None,
        "phone": phone or None,
        "email": email or None,
        "is_available": is_available,
    }
    billboard_in = BillboardCreate(**values)
    billboard = await BillboardService(db).create_billboard(caller, billboard_in, _uploaded(image))
    return {"message": "Billboard created successfully", "billboard": billboard}


@router.put("/{billboard_id}", response_model=BillboardMessageResponse)
async def update_billboard(
    billboard_id: int,
    name: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    size: Optional[str] = Form(None),
    price_per_day: Optional[str] = Form(None, alias="pricePerDay"),
    description: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    is_available: Optional[bool] = Form(None, alias="isAvailable"),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_owner),
) -> Any:
    """Partial update; only submitted fields change."""
    submitted = {
        "name": name,
        "location": location,
        "size": size,
        "price_per_day": price_per_day,
        "description": description,
        "phone": phone,
        "email": email,
        "is_available": is_available,
    }
    billboard_in = BillboardUpdate(**{k: v for k, v in submitted.items() if v is not None})
    billboard = await BillboardService(db).update_billboard(
        billboard_id, caller, billboard_in, _uploaded(image)
    )
    return {"message": "Billboard updated successfully", "billboard": billboard}


@router.delete("/{billboard_id}", response_model=MessageResponse)
async def delete_billboard(
    billboard_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_owner),
) -> Any:
    """Withdraw a listing. Pending requests on it are rejected."""
    await BillboardService(db).delete_billboard(billboard_id, caller)
    return {"message": "Billboard deleted successfully"}
