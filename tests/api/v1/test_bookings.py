"""
Tests for booking request endpoints.
"""

import pytest
from httpx import AsyncClient


def booking_payload(billboard, start, end, message=None):
    payload = {
        "billboardId": billboard.id,
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
    }
    if message:
        payload["message"] = message
    return payload


@pytest.mark.booking
class TestBookingEndpoints:
    async def _create(self, client, headers, billboard, start, end):
        response = await client.post(
            "/api/v1/bookings",
            headers=headers,
            json=booking_payload(billboard, start, end),
        )
        assert response.status_code == 201, response.text
        return response.json()["bookingRequest"]

    async def test_create_booking(self, async_client: AsyncClient, billboard, advertiser_headers, days_ahead, notifier):
        response = await async_client.post(
            "/api/v1/bookings",
            headers=advertiser_headers,
            json=booking_payload(billboard, days_ahead(5), days_ahead(8), "Launch week"),
        )
        assert response.status_code == 201

        data = response.json()
        assert data["message"] == "Booking request created successfully"
        booking = data["bookingRequest"]
        assert booking["status"] == "PENDING"
        assert booking["totalAmount"] == 300.0
        assert booking["message"] == "Launch week"
        assert booking["billboard"]["name"] == billboard.name
        assert booking["advertiser"]["email"] == "advertiser@example.com"
        assert booking["hasDispute"] is False
        notifier.booking_requested.assert_awaited_once()

    async def test_overlap_is_rejected(
        self, async_client: AsyncClient, billboard, advertiser_headers, other_advertiser, auth_headers_for, days_ahead
    ):
        await self._create(async_client, advertiser_headers, billboard, days_ahead(5), days_ahead(8))

        response = await async_client.post(
            "/api/v1/bookings",
            headers=auth_headers_for(other_advertiser),
            json=booking_payload(billboard, days_ahead(7), days_ahead(10)),
        )
        assert response.status_code == 400
        assert response.json() == {"error": "This billboard is already booked for the selected dates"}

        response = await async_client.post(
            "/api/v1/bookings",
            headers=auth_headers_for(other_advertiser),
            json=booking_payload(billboard, days_ahead(8), days_ahead(10)),
        )
        assert response.status_code == 201

    async def test_past_start(self, async_client: AsyncClient, billboard, advertiser_headers, days_ahead):
        response = await async_client.post(
            "/api/v1/bookings",
            headers=advertiser_headers,
            json=booking_payload(billboard, days_ahead(-2), days_ahead(3)),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Start date cannot be in the past"

    async def test_owner_cannot_request(self, async_client: AsyncClient, billboard, owner_headers, days_ahead):
        response = await async_client.post(
            "/api/v1/bookings",
            headers=owner_headers,
            json=booking_payload(billboard, days_ahead(5), days_ahead(8)),
        )
        assert response.status_code == 403

    async def test_missing_billboard(self, async_client: AsyncClient, billboard, advertiser_headers, days_ahead):
        payload = booking_payload(billboard, days_ahead(5), days_ahead(8))
        payload["billboardId"] = 9999

        response = await async_client.post("/api/v1/bookings", headers=advertiser_headers, json=payload)
        assert response.status_code == 404

    async def test_owner_approves_then_advertiser_disputes(
        self, async_client: AsyncClient, billboard, owner_headers, advertiser_headers, days_ahead, notifier
    ):
        booking = await self._create(async_client, advertiser_headers, billboard, days_ahead(5), days_ahead(8))

        response = await async_client.put(
            f"/api/v1/bookings/{booking['id']}/status",
            headers=owner_headers,
            json={"status": "APPROVED", "responseMessage": "Confirmed"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Booking request approved successfully"
        assert data["bookingRequest"]["status"] == "APPROVED"
        notifier.booking_decided.assert_awaited_once()

        response = await async_client.put(
            f"/api/v1/bookings/{booking['id']}/status",
            headers=owner_headers,
            json={"status": "REJECTED"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Booking request has already been processed"

        response = await async_client.post(
            f"/api/v1/bookings/{booking['id']}/dispute",
            headers=advertiser_headers,
            json={"disputeReason": "Panel was dark for two nights"},
        )
        assert response.status_code == 200
        disputed = response.json()["bookingRequest"]
        assert disputed["hasDispute"] is True
        assert disputed["disputeStatus"] == "OPEN"

        response = await async_client.post(
            f"/api/v1/bookings/{booking['id']}/dispute",
            headers=owner_headers,
            json={"disputeReason": "Counter claim"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Dispute already exists for this booking"

    async def test_status_must_be_a_decision(
        self, async_client: AsyncClient, billboard, owner_headers, advertiser_headers, days_ahead
    ):
        booking = await self._create(async_client, advertiser_headers, billboard, days_ahead(5), days_ahead(8))

        response = await async_client.put(
            f"/api/v1/bookings/{booking['id']}/status",
            headers=owner_headers,
            json={"status": "CANCELLED"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    async def test_other_owner_cannot_decide(
        self, async_client: AsyncClient, billboard, advertiser_headers, other_owner, auth_headers_for, days_ahead
    ):
        booking = await self._create(async_client, advertiser_headers, billboard, days_ahead(5), days_ahead(8))

        response = await async_client.put(
            f"/api/v1/bookings/{booking['id']}/status",
            headers=auth_headers_for(other_owner),
            json={"status": "APPROVED"},
        )
        assert response.status_code == 403

    async def test_cancel(self, async_client: AsyncClient, billboard, advertiser_headers, days_ahead):
        booking = await self._create(async_client, advertiser_headers, billboard, days_ahead(5), days_ahead(8))

        response = await async_client.put(
            f"/api/v1/bookings/my/{booking['id']}/cancel",
            headers=advertiser_headers,
        )
        assert response.status_code == 200
        assert response.json()["bookingRequest"]["status"] == "CANCELLED"

        response = await async_client.put(
            f"/api/v1/bookings/my/{booking['id']}/cancel",
            headers=advertiser_headers,
        )
        assert response.status_code == 400

    async def test_lists_and_detail(
        self, async_client: AsyncClient, billboard, owner_headers, advertiser_headers, other_advertiser,
        auth_headers_for, days_ahead
    ):
        booking = await self._create(async_client, advertiser_headers, billboard, days_ahead(5), days_ahead(8))

        response = await async_client.get("/api/v1/bookings/my", headers=advertiser_headers)
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 1

        response = await async_client.get(
            "/api/v1/bookings/billboard-requests",
            headers=owner_headers,
            params={"status": "PENDING"},
        )
        assert response.status_code == 200
        assert [b["id"] for b in response.json()["bookingRequests"]] == [booking["id"]]

        response = await async_client.get(
            "/api/v1/bookings/billboard-requests",
            headers=owner_headers,
            params={"status": "APPROVED"},
        )
        assert response.json()["pagination"]["total"] == 0

        response = await async_client.get(f"/api/v1/bookings/my/{booking['id']}", headers=advertiser_headers)
        assert response.status_code == 200

        response = await async_client.get(f"/api/v1/bookings/{booking['id']}", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["bookingRequest"]["id"] == booking["id"]

        response = await async_client.get(
            f"/api/v1/bookings/{booking['id']}",
            headers=auth_headers_for(other_advertiser),
        )
        assert response.status_code == 403

    async def test_deleting_billboard_rejects_pending(
        self, async_client: AsyncClient, billboard, owner_headers, advertiser_headers, days_ahead
    ):
        booking = await self._create(async_client, advertiser_headers, billboard, days_ahead(5), days_ahead(8))

        response = await async_client.delete(f"/api/v1/billboards/{billboard.id}", headers=owner_headers)
        assert response.status_code == 200

        response = await async_client.get(f"/api/v1/bookings/my/{booking['id']}", headers=advertiser_headers)
        data = response.json()["bookingRequest"]
        assert data["status"] == "REJECTED"
        assert data["responseMessage"] == "The billboard was removed by its owner."
