"""
Tests for billboard listing endpoints.
"""

from pathlib import Path

import pytest
from httpx import AsyncClient

from billboard_api.core.config import settings

LISTING_FORM = {
    "name": "Harbor Bridge LED",
    "location": "San Diego, CA",
    "size": "10x40 ft",
    "pricePerDay": "250.00",
    "description": "Facing the morning commute",
    "isAvailable": "true",
}

# Smallest valid GIF
PIXEL_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00"
    b"\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)


@pytest.mark.billboard
class TestBillboardEndpoints:
    async def test_create_with_image(self, async_client: AsyncClient, owner_headers):
        response = await async_client.post(
            "/api/v1/billboards",
            headers=owner_headers,
            data=LISTING_FORM,
            files={"image": ("board.gif", PIXEL_GIF, "image/gif")},
        )
        assert response.status_code == 201

        data = response.json()
        assert data["message"] == "Billboard created successfully"
        billboard = data["billboard"]
        assert billboard["status"] == "PENDING"
        assert billboard["isApproved"] is False
        assert billboard["pricePerDay"] == 250.0
        assert billboard["imageUrl"].startswith(settings.upload_url_prefix + "/")

    async def test_create_rejects_non_image(self, async_client: AsyncClient, owner_headers):
        response = await async_client.post(
            "/api/v1/billboards",
            headers=owner_headers,
            data=LISTING_FORM,
            files={"image": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Only image files are allowed"

    async def test_stored_extension_follows_content_type(self, async_client: AsyncClient, owner_headers):
        response = await async_client.post(
            "/api/v1/billboards",
            headers=owner_headers,
            data=LISTING_FORM,
            files={"image": ("board.html", PIXEL_GIF, "image/png")},
        )
        assert response.status_code == 201

        image_url = response.json()["billboard"]["imageUrl"]
        assert image_url.endswith(".png")
        assert (Path(settings.upload_dir) / Path(image_url).name).is_file()

    async def test_image_url_cannot_be_supplied(
        self, async_client: AsyncClient, owner_headers, other_owner, auth_headers_for
    ):
        response = await async_client.post(
            "/api/v1/billboards",
            headers=auth_headers_for(other_owner),
            data={**LISTING_FORM, "name": "Rival Board"},
            files={"image": ("rival.gif", PIXEL_GIF, "image/gif")},
        )
        rival_image = response.json()["billboard"]["imageUrl"]
        rival_file = Path(settings.upload_dir) / Path(rival_image).name

        response = await async_client.post(
            "/api/v1/billboards",
            headers=owner_headers,
            data={**LISTING_FORM, "imageUrl": rival_image},
        )
        assert response.status_code == 201
        mine = response.json()["billboard"]
        assert mine["imageUrl"] is None

        response = await async_client.put(
            f"/api/v1/billboards/{mine['id']}",
            headers=owner_headers,
            data={"imageUrl": rival_image},
        )
        assert response.status_code == 200
        assert response.json()["billboard"]["imageUrl"] is None

        response = await async_client.delete(f"/api/v1/billboards/{mine['id']}", headers=owner_headers)
        assert response.status_code == 200
        assert rival_file.is_file()

    async def test_create_validates_price(self, async_client: AsyncClient, owner_headers):
        response = await async_client.post(
            "/api/v1/billboards",
            headers=owner_headers,
            data={**LISTING_FORM, "pricePerDay": "-5"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    async def test_advertiser_cannot_create(self, async_client: AsyncClient, advertiser_headers):
        response = await async_client.post(
            "/api/v1/billboards",
            headers=advertiser_headers,
            data=LISTING_FORM,
        )
        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions"}

    async def test_anonymous_browse(self, async_client: AsyncClient, billboard, make_billboard, owner):
        await make_billboard(owner, name="Awaiting Review", approved=False)

        response = await async_client.get("/api/v1/billboards")
        assert response.status_code == 200

        data = response.json()
        assert [b["name"] for b in data["billboards"]] == [billboard.name]
        assert data["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    async def test_price_filter_uses_camel_case(self, async_client: AsyncClient, billboard):
        response = await async_client.get("/api/v1/billboards", params={"maxPrice": "50"})
        assert response.json()["pagination"]["total"] == 0

        response = await async_client.get("/api/v1/billboards", params={"minPrice": "50"})
        assert response.json()["pagination"]["total"] == 1

    async def test_owner_sees_own_drafts(self, async_client: AsyncClient, make_billboard, owner, owner_headers):
        await make_billboard(owner, name="Awaiting Review", approved=False)

        response = await async_client.get("/api/v1/billboards", headers=owner_headers)
        assert response.json()["pagination"]["total"] == 1

    async def test_detail_visibility(
        self, async_client: AsyncClient, make_billboard, owner, owner_headers, advertiser_headers
    ):
        draft = await make_billboard(owner, name="Awaiting Review", approved=False)

        response = await async_client.get(f"/api/v1/billboards/{draft.id}", headers=advertiser_headers)
        assert response.status_code == 403

        response = await async_client.get(f"/api/v1/billboards/{draft.id}", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["billboard"]["owner"]["email"] == owner.email

        response = await async_client.get("/api/v1/billboards/9999")
        assert response.status_code == 404
        assert response.json() == {"error": "Billboard not found"}

    async def test_featured(self, async_client: AsyncClient, billboard):
        response = await async_client.get("/api/v1/billboards/featured")
        assert response.status_code == 200
        assert len(response.json()["billboards"]) == 1

    async def test_update_and_delete(self, async_client: AsyncClient, billboard, owner_headers):
        response = await async_client.put(
            f"/api/v1/billboards/{billboard.id}",
            headers=owner_headers,
            data={"pricePerDay": "125.50", "isAvailable": "false"},
        )
        assert response.status_code == 200
        updated = response.json()["billboard"]
        assert updated["pricePerDay"] == 125.5
        assert updated["isAvailable"] is False
        assert updated["name"] == billboard.name

        response = await async_client.delete(f"/api/v1/billboards/{billboard.id}", headers=owner_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Billboard deleted successfully"}

        response = await async_client.get(f"/api/v1/billboards/{billboard.id}", headers=owner_headers)
        assert response.status_code == 404

    async def test_other_owner_cannot_modify(self, async_client: AsyncClient, billboard, other_owner, auth_headers_for):
        response = await async_client.delete(
            f"/api/v1/billboards/{billboard.id}",
            headers=auth_headers_for(other_owner),
        )
        assert response.status_code == 403

    async def test_my_list_and_dashboard(self, async_client: AsyncClient, billboard, owner_headers):
        response = await async_client.get("/api/v1/billboards/my/list", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 1

        response = await async_client.get("/api/v1/billboards/my/dashboard-stats", headers=owner_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["stats"]["totalBillboards"] == 1
        assert data["stats"]["occupancyRate"] == 100
        assert data["stats"]["totalRevenue"] == 0
        assert data["recentBookings"] == []
