"""
Complaint endpoints.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.api.dependencies import get_current_caller, get_page_params
from billboard_api.core.access import Caller
from billboard_api.core.database import get_db
from billboard_api.models.complaint import ComplaintStatus
from billboard_api.schemas.common import PageParams, PaginationMeta
from billboard_api.schemas.complaint import (
    ComplaintCreate,
    ComplaintDetailResponse,
    ComplaintListResponse,
    ComplaintMessageResponse,
)
from billboard_api.services.complaint import ComplaintService

router = APIRouter()


@router.post("", response_model=ComplaintMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    complaint_in: ComplaintCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
) -> Any:
    complaint = await ComplaintService(db).create_complaint(caller, complaint_in)
    return {"message": "Complaint submitted successfully", "complaint": complaint}


@router.get("/my", response_model=ComplaintListResponse)
async def my_complaints(
    status_filter: Optional[ComplaintStatus] = Query(None, alias="status"),
    page: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
) -> Any:
    complaints, total = await ComplaintService(db).my_complaints(caller, page, status_filter)
    return {
        "complaints": complaints,
        "pagination": PaginationMeta.build(page.page, page.limit, total),
    }


@router.get("/{complaint_id}", response_model=ComplaintDetailResponse)
async def get_complaint(
    complaint_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
) -> Any:
    complaint = await ComplaintService(db).view_complaint(complaint_id, caller)
    return {"complaint": complaint}
