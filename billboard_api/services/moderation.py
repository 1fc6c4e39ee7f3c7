"""
Moderation workflow: admin-only transitions over listings, complaints,
disputes and user roles, plus the admin dashboard.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from billboard_api.core.access import Caller
from billboard_api.core.exceptions import InvalidState, NotFound
from billboard_api.core.logging import get_logger
from billboard_api.models.billboard import Billboard, BillboardStatus
from billboard_api.models.booking import BookingRequest, DisputeStatus
from billboard_api.models.complaint import Complaint, ComplaintStatus
from billboard_api.models.user import AdminFlag, User, UserRole
from billboard_api.schemas.billboard import BillboardApproval
from billboard_api.schemas.common import PageParams
from billboard_api.schemas.complaint import ComplaintStatusUpdate
from billboard_api.services.auth import AuthService
from billboard_api.services.billboard import BillboardService
from billboard_api.services.booking import BookingService
from billboard_api.services.complaint import ComplaintService
from billboard_api.services.queries import (
    BILLBOARD_OPTIONS,
    BOOKING_OPTIONS,
    COMPLAINT_OPTIONS,
    USER_OPTIONS,
    paginate,
)

logger = get_logger(__name__)


class ModerationService:
    """Service backing the admin endpoints.

    Complaint and dispute statuses move freely between their four values;
    an administrator may reopen a closed item.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.billboards = BillboardService(db)
        self.bookings = BookingService(db)
        self.complaints = ComplaintService(db)
        self.users = AuthService(db)

    # Listings

    async def set_billboard_approval(self, billboard_id: int, data: BillboardApproval) -> Billboard:
        """Approve or reject a listing; the status follows the boolean."""
        billboard = await self.billboards.get_billboard(billboard_id)
        if billboard is None:
            raise NotFound("Billboard not found")

        billboard.is_approved = data.is_approved
        if data.is_approved:
            billboard.status = BillboardStatus.APPROVED
            billboard.rejection_reason = None
        else:
            billboard.status = BillboardStatus.REJECTED
            billboard.rejection_reason = data.rejection_reason
        await self.db.commit()

        logger.info(
            "billboard_moderated",
            billboard_id=billboard.id,
            status=billboard.status.value,
        )
        return await self.billboards.get_billboard(billboard.id)

    async def pending_billboards(self, page: PageParams) -> Tuple[List[Billboard], int]:
        query = (
            select(Billboard)
            .where(Billboard.status == BillboardStatus.PENDING, Billboard.is_active.is_(True))
            .order_by(Billboard.created_at.desc(), Billboard.id.desc())
        )
        return await paginate(self.db, query, page, BILLBOARD_OPTIONS)

    # Complaints

    async def list_complaints(
        self,
        page: PageParams,
        status: Optional[ComplaintStatus] = None,
    ) -> Tuple[List[Complaint], int]:
        query = select(Complaint)
        if status is not None:
            query = query.where(Complaint.status == status)
        query = query.order_by(Complaint.created_at.desc(), Complaint.id.desc())
        return await paginate(self.db, query, page, COMPLAINT_OPTIONS)

    async def get_complaint(self, complaint_id: int) -> Complaint:
        return await self.complaints.require_complaint(complaint_id)

    async def update_complaint(self, complaint_id: int, data: ComplaintStatusUpdate) -> Complaint:
        complaint = await self.complaints.require_complaint(complaint_id)
        previous = complaint.status
        complaint.status = data.status
        if data.admin_response is not None:
            complaint.admin_response = data.admin_response
        await self.db.commit()

        logger.info(
            "complaint_status_updated",
            complaint_id=complaint.id,
            from_status=previous.value,
            to_status=data.status.value,
        )
        return await self.complaints.require_complaint(complaint.id)

    # Disputes

    async def list_disputes(
        self,
        page: PageParams,
        status: Optional[DisputeStatus] = None,
    ) -> Tuple[List[BookingRequest], int]:
        query = select(BookingRequest).where(BookingRequest.has_dispute.is_(True))
        if status is not None:
            query = query.where(BookingRequest.dispute_status == status)
        query = query.order_by(BookingRequest.updated_at.desc(), BookingRequest.id.desc())
        return await paginate(self.db, query, page, BOOKING_OPTIONS)

    async def get_dispute(self, booking_id: int) -> BookingRequest:
        booking = await self.bookings.get_booking(booking_id)
        if booking is None or not booking.has_dispute:
            raise NotFound("Dispute not found")
        return booking

    async def update_dispute(self, booking_id: int, dispute_status: DisputeStatus) -> BookingRequest:
        booking = await self.get_dispute(booking_id)
        previous = booking.dispute_status
        booking.dispute_status = dispute_status
        await self.db.commit()

        logger.info(
            "dispute_status_updated",
            booking_id=booking.id,
            from_status=previous.value if previous else None,
            to_status=dispute_status.value,
        )
        return await self.bookings.get_booking(booking.id)

    # Users

    async def list_users(self, page: PageParams) -> Tuple[List[User], int]:
        query = select(User).order_by(User.created_at.desc(), User.id.desc())
        return await paginate(self.db, query, page, USER_OPTIONS)

    async def change_user_role(self, user_id: int, role: UserRole, caller: Caller) -> User:
        """Privileged role change; the admin flag follows the ADMIN role."""
        if user_id == caller.user_id:
            raise InvalidState("Administrators cannot change their own role")

        user = await self.users.require_user(user_id)
        previous = user.profile.role
        user.profile.role = role

        if role == UserRole.ADMIN and user.admin is None:
            user.admin = AdminFlag()
        elif role != UserRole.ADMIN and user.admin is not None:
            user.admin = None
        await self.db.commit()

        logger.info(
            "user_role_changed",
            user_id=user.id,
            from_role=previous.value,
            to_role=role.value,
            changed_by=caller.user_id,
        )
        return await self.users.require_user(user.id)

    # Reporting

    async def dashboard(self) -> Dict[str, Any]:
        """Read-only totals plus the five most recent bookings."""
        total_users = await self.db.scalar(select(func.count(User.id))) or 0
        total_billboards = await self.db.scalar(
            select(func.count(Billboard.id)).where(Billboard.is_active.is_(True))
        ) or 0
        total_bookings = await self.db.scalar(select(func.count(BookingRequest.id))) or 0
        pending_complaints = await self.db.scalar(
            select(func.count(Complaint.id)).where(Complaint.status == ComplaintStatus.OPEN)
        ) or 0
        pending_disputes = await self.db.scalar(
            select(func.count(BookingRequest.id)).where(
                BookingRequest.has_dispute.is_(True),
                BookingRequest.dispute_status == DisputeStatus.OPEN,
            )
        ) or 0
        pending_billboards = await self.db.scalar(
            select(func.count(Billboard.id)).where(
                Billboard.status == BillboardStatus.PENDING,
                Billboard.is_active.is_(True),
            )
        ) or 0
        recent = await self.db.execute(
            select(BookingRequest)
            .options(*BOOKING_OPTIONS)
            .order_by(BookingRequest.created_at.desc(), BookingRequest.id.desc())
            .limit(5)
        )

        return {
            "stats": {
                "total_users": total_users,
                "total_billboards": total_billboards,
                "total_bookings": total_bookings,
                "pending_complaints": pending_complaints,
                "pending_disputes": pending_disputes,
                "pending_billboards": pending_billboards,
            },
            "recent_bookings": list(recent.scalars().all()),
        }
