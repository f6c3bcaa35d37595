"""
Tests for the admin API endpoint functions
"""
import pytest

from society_admin.domain.models import Resident
from society_admin.services import resource_service as api
from tests.helpers import json_response, request_json


class TestEnvelope:
    def test_unwrap(self):
        assert api.unwrap({"success": True, "data": [1]}) == [1]
        assert api.unwrap([1]) == [1]
        assert api.unwrap({"token": "x"}) == {"token": "x"}

    @pytest.mark.asyncio
    async def test_non_list_data_yields_empty(self, make_client, routes):
        client = make_client(routes({"GET /api/admin/users": json_response(200, {"data": None})}))

        assert await api.list_residents(client) == []

    @pytest.mark.asyncio
    async def test_list_passes_params(self, make_client, recorded, routes):
        client = make_client(
            routes({"GET /api/admin/complaints": json_response(200, {"data": [{"_id": "c1", "status": "pending"}]})})
        )

        complaints = await api.list_complaints(client, {"status": "pending", "search": "leak"})

        assert complaints[0].id == "c1"
        assert dict(recorded[0].url.params) == {"status": "pending", "search": "leak"}


class TestDetails:
    @pytest.mark.asyncio
    async def test_resident_detail_merges_vehicles(self, make_client, routes):
        client = make_client(
            routes(
                {
                    "GET /api/admin/users/u1": json_response(
                        200,
                        {
                            "success": True,
                            "data": {
                                "user": {"_id": "u1", "fullName": "Ali"},
                                "vehicles": [{"_id": "v1", "plateNumber": "LEA-1"}],
                            },
                        },
                    )
                }
            )
        )

        resident = await api.get_resident(client, "u1")

        assert isinstance(resident, Resident)
        assert resident.full_name == "Ali"
        assert resident.vehicles[0].plate_number == "LEA-1"

    @pytest.mark.asyncio
    async def test_vehicles_ignore_filters(self, make_client, recorded, routes):
        client = make_client(routes({"GET /api/admin/vehicles/all": json_response(200, {"data": []})}))

        await api.list_vehicles(client, {"status": "pending"})

        assert dict(recorded[0].url.params) == {}


class TestBodies:
    """Field names the server expects"""

    @pytest.mark.asyncio
    async def test_payment_rejection(self, make_client, recorded, routes):
        client = make_client(routes({"PUT /api/admin/payments/p1/reject": json_response()}))

        await api.reject_payment(client, "p1", "Blurry receipt")

        assert request_json(recorded[0]) == {"rejectionReason": "Blurry receipt"}

    @pytest.mark.asyncio
    async def test_guest_rejection(self, make_client, recorded, routes):
        client = make_client(routes({"PUT /api/admin/guest-requests/g1/reject": json_response()}))

        await api.reject_guest_request(client, "g1", "Unknown guest")

        assert request_json(recorded[0]) == {"adminResponse": "Unknown guest"}

    @pytest.mark.asyncio
    async def test_complaint_status(self, make_client, recorded, routes):
        client = make_client(routes({"PUT /api/admin/complaints/c1/status": json_response()}))

        await api.update_complaint_status(client, "c1", "resolved", "Fixed the pipe")

        assert request_json(recorded[0]) == {"status": "resolved", "adminResponse": "Fixed the pipe"}

    @pytest.mark.asyncio
    async def test_create_deal_multipart(self, make_client, recorded, routes):
        client = make_client(routes({"POST /api/admin/deals": json_response(201)}))

        await api.create_deal(
            client,
            {"name": " Pizza ", "category": "cat1", "description": "2 for 1", "is_featured": True, "phone": ""},
            ("deal.png", b"\x89PNG", "image/png"),
        )

        body = recorded[0].content
        assert recorded[0].headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="isFeatured"\r\n\r\ntrue' in body
        assert b'name="phone"' not in body
        assert b"Pizza" in body

    @pytest.mark.asyncio
    async def test_update_deal_without_image_is_json(self, make_client, recorded, routes):
        client = make_client(routes({"PUT /api/admin/deals/d1": json_response()}))

        await api.update_deal(client, "d1", {"name": "Pizza", "category": "cat1", "description": "x"})

        assert request_json(recorded[0]) == {
            "name": "Pizza",
            "category": "cat1",
            "description": "x",
            "isFeatured": False,
        }

    @pytest.mark.asyncio
    async def test_update_deal_featured_is_boolean(self, make_client, recorded, routes):
        client = make_client(routes({"PUT /api/admin/deals/d1": json_response()}))

        await api.update_deal(client, "d1", {"name": "Pizza", "category": "cat1", "description": "x", "is_featured": True})

        assert request_json(recorded[0])["isFeatured"] is True

    @pytest.mark.asyncio
    async def test_coupon_body(self, make_client, recorded, routes):
        client = make_client(routes({"POST /api/admin/deals/d1/coupons": json_response(201)}))

        await api.create_coupon(
            client,
            "d1",
            {
                "code": "save10",
                "discount": "10%",
                "valid_from": "2024-05-01",
                "valid_till": "2024-05-31",
                "total_usage_limit": "100",
                "min_purchase": "",
            },
        )

        assert request_json(recorded[0]) == {
            "code": "SAVE10",
            "description": "",
            "discount": "10%",
            "validFrom": "2024-05-01",
            "validTill": "2024-05-31",
            "usageType": "one-time",
            "maxUsagePerUser": 1,
            "totalUsageLimit": 100,
        }

    @pytest.mark.asyncio
    async def test_toggle_uses_patch(self, make_client, recorded, routes):
        client = make_client(routes({"PATCH /api/admin/deals/coupons/k1/toggle-active": json_response()}))

        await api.toggle_coupon_active(client, "k1")

        assert recorded[0].method == "PATCH"
