"""
Complaint service for users filing complaints.
"""

from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.core.access import Caller
from billboard_api.core.exceptions import Forbidden, NotFound
from billboard_api.core.logging import get_logger
from billboard_api.models.complaint import Complaint, ComplaintStatus
from billboard_api.schemas.common import PageParams
from billboard_api.schemas.complaint import ComplaintCreate
from billboard_api.services.queries import COMPLAINT_OPTIONS, paginate

logger = get_logger(__name__)


class ComplaintService:
    """Service for creating and reading complaints."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_complaint(self, complaint_id: int) -> Optional[Complaint]:
        result = await self.db.execute(
            select(Complaint)
            .where(Complaint.id == complaint_id)
            .options(*COMPLAINT_OPTIONS)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def require_complaint(self, complaint_id: int) -> Complaint:
        complaint = await self.get_complaint(complaint_id)
        if complaint is None:
            raise NotFound("Complaint not found")
        return complaint

    async def create_complaint(self, caller: Caller, data: ComplaintCreate) -> Complaint:
        """File a new complaint in the OPEN state."""
        complaint = Complaint(
            advertiser_id=caller.user_id,
            subject=data.subject.strip(),
            description=data.description.strip(),
            status=ComplaintStatus.OPEN,
        )
        self.db.add(complaint)
        await self.db.commit()

        logger.info("complaint_created", complaint_id=complaint.id, user_id=caller.user_id)
        return await self.get_complaint(complaint.id)

    async def my_complaints(
        self,
        caller: Caller,
        page: PageParams,
        status: Optional[ComplaintStatus] = None,
    ) -> Tuple[List[Complaint], int]:
        query = select(Complaint).where(Complaint.advertiser_id == caller.user_id)
        if status is not None:
            query = query.where(Complaint.status == status)
        query = query.order_by(Complaint.created_at.desc(), Complaint.id.desc())
        return await paginate(self.db, query, page, COMPLAINT_OPTIONS)

    async def view_complaint(self, complaint_id: int, caller: Caller) -> Complaint:
        """Readable by its author and by administrators."""
        complaint = await self.require_complaint(complaint_id)
        if complaint.advertiser_id != caller.user_id and not caller.is_admin:
            raise Forbidden("Access denied")
        return complaint
