"""
Administration endpoints. Every route requires the admin flag.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.api.dependencies import get_page_params, require_admin
from billboard_api.core.access import Caller
from billboard_api.core.database import get_db
from billboard_api.models.booking import DisputeStatus
from billboard_api.models.complaint import ComplaintStatus
from billboard_api.schemas.billboard import (
    BillboardApproval,
    BillboardListResponse,
    BillboardMessageResponse,
)
from billboard_api.schemas.booking import (
    DisputeDetailResponse,
    DisputeListResponse,
    DisputeMessageResponse,
    DisputeStatusUpdate,
)
from billboard_api.schemas.common import PageParams, PaginationMeta
from billboard_api.schemas.complaint import (
    ComplaintDetailResponse,
    ComplaintListResponse,
    ComplaintMessageResponse,
    ComplaintStatusUpdate,
)
from billboard_api.schemas.dashboard import AdminDashboardResponse
from billboard_api.schemas.user import ProfileUpdateResponse, UserListResponse, UserRoleUpdate
from billboard_api.services.moderation import ModerationService

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/dashboard", response_model=AdminDashboardResponse)
async def dashboard(
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Marketplace totals and the latest bookings."""
    return await ModerationService(db).dashboard()


@router.get("/users", response_model=UserListResponse)
async def list_users(
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
) -> Any:
    users, total = await ModerationService(db).list_users(page)
    return {"users": users, "pagination": PaginationMeta.build(page.page, page.limit, total)}


@router.put("/users/{user_id}/role", response_model=ProfileUpdateResponse)
async def change_user_role(
    user_id: int,
    role_in: UserRoleUpdate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(require_admin),
) -> Any:
    """Change a user's marketplace role; ADMIN also grants the admin flag."""
    user = await ModerationService(db).change_user_role(user_id, role_in.role, caller)
    return {"message": "User role updated successfully", "user": user}


@router.get("/complaints", response_model=ComplaintListResponse)
async def list_complaints(
    status_filter: Optional[ComplaintStatus] = Query(None, alias="status"),
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
) -> Any:
    complaints, total = await ModerationService(db).list_complaints(page, status_filter)
    return {
        "complaints": complaints,
        "pagination": PaginationMeta.build(page.page, page.limit, total),
    }


@router.get("/complaints/{complaint_id}", response_model=ComplaintDetailResponse)
async def get_complaint(
    complaint_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    return {"complaint": await ModerationService(db).get_complaint(complaint_id)}


@router.put("/complaints/{complaint_id}", response_model=ComplaintMessageResponse)
async def update_complaint(
    complaint_id: int,
    complaint_in: ComplaintStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    complaint = await ModerationService(db).update_complaint(complaint_id, complaint_in)
    return {"message": "Complaint updated successfully", "complaint": complaint}


@router.get("/disputes", response_model=DisputeListResponse)
async def list_disputes(
    status_filter: Optional[DisputeStatus] = Query(None, alias="status"),
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
) -> Any:
    disputes, total = await ModerationService(db).list_disputes(page, status_filter)
    return {
        "disputes": disputes,
        "pagination": PaginationMeta.build(page.page, page.limit, total),
    }


@router.get("/disputes/{booking_id}", response_model=DisputeDetailResponse)
async def get_dispute(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    return {"dispute": await ModerationService(db).get_dispute(booking_id)}


@router.put("/disputes/{booking_id}", response_model=DisputeMessageResponse)
async def update_dispute(
    booking_id: int,
    dispute_in: DisputeStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    dispute = await ModerationService(db).update_dispute(booking_id, dispute_in.dispute_status)
    return {"message": "Dispute updated successfully", "dispute": dispute}


@router.get("/billboards/pending", response_model=BillboardListResponse)
async def pending_billboards(
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
) -> Any:
    billboards, total = await ModerationService(db).pending_billboards(page)
    return {
        "billboards": billboards,
        "pagination": PaginationMeta.build(page.page, page.limit, total),
    }


@router.put("/billboards/{billboard_id}/approval", response_model=BillboardMessageResponse)
async def set_billboard_approval(
    billboard_id: int,
    approval_in: BillboardApproval,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Approve or reject a listing."""
    billboard = await ModerationService(db).set_billboard_approval(billboard_id, approval_in)
    verb = "approved" if approval_in.is_approved else "rejected"
    return {"message": f"Billboard {verb} successfully", "billboard": billboard}
