"""
Reporting schemas for the owner and admin dashboards.
"""

from typing import List

from billboard_api.schemas.booking import BookingResponse
from billboard_api.schemas.common import CamelModel, Money


class OwnerStats(CamelModel):
    total_billboards: int
    active_billboards: int
    pending_requests: int
    total_bookings: int
    total_revenue: Money
    occupancy_rate: int


class OwnerDashboardResponse(CamelModel):
    stats: OwnerStats
    recent_bookings: List[BookingResponse]


class AdminStats(CamelModel):
    total_users: int
    total_billboards: int
    total_bookings: int
    pending_complaints: int
    pending_disputes: int
    pending_billboards: int


class AdminDashboardResponse(CamelModel):
    stats: AdminStats
    recent_bookings: List[BookingResponse]
