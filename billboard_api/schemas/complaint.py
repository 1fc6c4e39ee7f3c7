"""
Complaint schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from billboard_api.models.complaint import ComplaintStatus
from billboard_api.schemas.common import CamelModel, PaginationMeta
from billboard_api.schemas.user import UserSummary


class ComplaintCreate(CamelModel):
    subject: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)


class ComplaintStatusUpdate(CamelModel):
    """Admin update; any status may follow any other."""

    status: ComplaintStatus
    admin_response: Optional[str] = Field(None, max_length=1000)


class ComplaintResponse(CamelModel):
    id: int
    advertiser_id: int
    advertiser: Optional[UserSummary] = None
    subject: str
    description: str
    status: ComplaintStatus
    admin_response: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ComplaintDetailResponse(CamelModel):
    complaint: ComplaintResponse


class ComplaintMessageResponse(CamelModel):
    message: str
    complaint: ComplaintResponse


class ComplaintListResponse(CamelModel):
    complaints: List[ComplaintResponse]
    pagination: PaginationMeta
