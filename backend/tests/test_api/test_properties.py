"""Tests for property CRUD endpoints."""

import uuid

import pytest
from httpx import AsyncClient

from app.models.user import User, UserRole

pytestmark = pytest.mark.asyncio

_VALID = {
    "title": "Lakeside Cabin",
    "description": "A quiet cabin right on the lake shore.",
    "price": 95.50,
    "location": "Gisenyi, Rwanda",
    "images": ["https://images.example.com/cabin-1.jpg", "https://images.example.com/cabin-2.jpg"],
}


# ---------------------------------------------------------------------------
# POST /api/v1/properties
# ---------------------------------------------------------------------------


class TestCreateProperty:
    """Tests for creating properties."""

    async def test_create_success(self, client: AsyncClient, host_headers: dict, host: User) -> None:
        response = await client.post("/api/v1/properties", json=_VALID, headers=host_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Lakeside Cabin"
        assert data["location"] == "Gisenyi, Rwanda"
        assert float(data["price"]) == 95.50
        assert data["images"] == _VALID["images"]
        assert data["host_id"] == str(host.id)
        assert "id" in data
        assert "created_at" in data

    async def test_create_without_images(self, client: AsyncClient, host_headers: dict) -> None:
        payload = {k: v for k, v in _VALID.items() if k != "images"}
        response = await client.post("/api/v1/properties", json=payload, headers=host_headers)
        assert response.status_code == 201
        assert response.json()["images"] == []

    async def test_admin_can_create(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post("/api/v1/properties", json=_VALID, headers=admin_headers)
        assert response.status_code == 201

    async def test_renter_forbidden(self, client: AsyncClient, renter_headers: dict) -> None:
        response = await client.post("/api/v1/properties", json=_VALID, headers=renter_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "You don't have right to this resources"

    async def test_create_unauthenticated(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/properties", json=_VALID)
        assert response.status_code in (401, 403)

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("title", "ab"),
            ("description", "too short"),
            ("price", 0),
            ("price", -10),
            ("location", "xy"),
            ("images", ["not-a-url"]),
        ],
    )
    async def test_create_invalid(self, client: AsyncClient, host_headers: dict, field: str, value) -> None:
        response = await client.post("/api/v1/properties", json={**_VALID, field: value}, headers=host_headers)
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# GET /api/v1/properties
# ---------------------------------------------------------------------------


class TestReadProperties:
    async def test_list_is_public(self, client: AsyncClient, test_property: dict) -> None:
        response = await client.get("/api/v1/properties")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] >= 1
        assert any(item["id"] == test_property["id"] for item in data["items"])

    async def test_filter_by_host(
        self, client: AsyncClient, test_property: dict, host: User, make_user, headers_factory
    ) -> None:
        other_host = await make_user(UserRole.HOST)
        await client.post("/api/v1/properties", json=_VALID, headers=headers_factory(other_host))

        response = await client.get("/api/v1/properties", params={"host_id": str(host.id)})
        items = response.json()["items"]
        assert [item["id"] for item in items] == [test_property["id"]]

    async def test_get_single(self, client: AsyncClient, test_property: dict) -> None:
        response = await client.get(f"/api/v1/properties/{test_property['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == "Test Villa"

    async def test_get_nonexistent(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/v1/properties/{uuid.uuid4()}")
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# PUT / DELETE
# ---------------------------------------------------------------------------


class TestUpdateProperty:
    async def test_partial_update(self, client: AsyncClient, host_headers: dict, test_property: dict) -> None:
        response = await client.put(
            f"/api/v1/properties/{test_property['id']}",
            json={"price": 175, "images": ["https://images.example.com/new.jpg"]},
            headers=host_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert float(data["price"]) == 175
        assert data["images"] == ["https://images.example.com/new.jpg"]
        assert data["title"] == test_property["title"]

    async def test_explicit_nulls_leave_fields_unchanged(
        self, client: AsyncClient, host_headers: dict, test_property: dict
    ) -> None:
        response = await client.put(
            f"/api/v1/properties/{test_property['id']}",
            json={"title": None, "price": None, "location": "Musanze, Rwanda"},
            headers=host_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == test_property["title"]
        assert data["price"] == test_property["price"]
        assert data["location"] == "Musanze, Rwanda"

    async def test_other_host_gets_404(
        self, client: AsyncClient, test_property: dict, make_user, headers_factory
    ) -> None:
        other_host = await make_user(UserRole.HOST)
        response = await client.put(
            f"/api/v1/properties/{test_property['id']}",
            json={"price": 1},
            headers=headers_factory(other_host),
        )
        assert response.status_code == 404

    async def test_admin_can_update(self, client: AsyncClient, admin_headers: dict, test_property: dict) -> None:
        response = await client.put(
            f"/api/v1/properties/{test_property['id']}",
            json={"title": "Renamed Villa"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Renamed Villa"


class TestDeleteProperty:
    async def test_delete_cascades_bookings(
        self,
        client: AsyncClient,
        host_headers: dict,
        renter_headers: dict,
        test_property: dict,
    ) -> None:
        from datetime import date, timedelta

        ci = date.today() + timedelta(days=10)
        booking = await client.post(
            "/api/v1/bookings",
            json={
                "property_id": test_property["id"],
                "check_in": ci.isoformat(),
                "check_out": (ci + timedelta(days=2)).isoformat(),
            },
            headers=renter_headers,
        )
        assert booking.status_code == 201

        response = await client.delete(f"/api/v1/properties/{test_property['id']}", headers=host_headers)
        assert response.status_code == 200

        assert (await client.get(f"/api/v1/properties/{test_property['id']}")).status_code == 404
        mine = await client.get("/api/v1/bookings/user", headers=renter_headers)
        assert mine.json()["total"] == 0

    async def test_renter_cannot_delete(self, client: AsyncClient, renter_headers: dict, test_property: dict) -> None:
        response = await client.delete(f"/api/v1/properties/{test_property['id']}", headers=renter_headers)
        assert response.status_code == 403
