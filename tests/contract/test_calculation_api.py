"""Contract tests for /api/v1/calculation."""

from __future__ import annotations

import uuid

import pytest

CALC = "/api/v1/calculation"


@pytest.mark.contract
class TestCalculateBill:

    def test_breakdown_shape_and_amounts(self, client):
        resp = client.post(
            CALC,
            json={
                "consumerType": "residential",
                "unitsConsumed": 100,
                "consumerName": "Jane Doe",
                "consumerId": "C-1001",
                "calculationMonth": "2026-10",
            },
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()

        assert data["consumerType"] == "residential"
        assert data["unitsConsumed"] == 100
        assert data["calculationMonth"] == "2026-10"
        assert data["baseAmount"] == 12.0
        assert data["totalTax"] == 1.8
        assert data["totalSurcharge"] == 5.0
        assert data["totalAmount"] == 18.8
        assert data["tierBreakdown"] == [
            {"tierName": "Standard Rate", "unitsInTier": 100.0, "ratePerUnit": 0.12, "amount": 12.0}
        ]
        assert data["taxes"][0]["name"] == "VAT"
        assert data["surcharges"][0]["name"] == "Service Charge"
        assert data["appliedRates"] == []
        assert "calculationDate" in data

    def test_snake_case_body_accepted(self, client):
        resp = client.post(CALC, json={"consumer_type": "industrial", "units_consumed": 0})
        assert resp.status_code == 200
        assert resp.json()["totalAmount"] == 5.0

    @pytest.mark.parametrize(
        "body",
        [
            {"consumerType": "residential", "unitsConsumed": -1},
            {"consumerType": "spaceship", "unitsConsumed": 10},
            {"consumerType": "residential"},
            {"consumerType": "residential", "unitsConsumed": 10, "calculationMonth": "2026-13"},
            {"consumerType": "residential", "unitsConsumed": 1000001},
            {"consumerType": "residential", "unitsConsumed": 10.005},
        ],
    )
    def test_invalid_requests(self, client, body):
        resp = client.post(CALC, json=body)
        assert resp.status_code == 422
        assert resp.json()["title"] == "Validation Error"

    def test_fractional_units_are_billed_as_stored(self, client, admin_headers):
        resp = client.post(CALC, json={"consumerType": "residential", "unitsConsumed": 12.5})
        assert resp.status_code == 200
        assert resp.json()["baseAmount"] == 1.5

        record = client.get(f"{CALC}/history", headers=admin_headers).json()["data"][0]
        assert record["unitsConsumed"] == 12.5
        assert record["baseAmount"] == 1.5

    def test_uses_replaced_flat_rate(self, client, admin_headers):
        resp = client.post(
            "/api/v1/config/flat-rate",
            json={"ratePerUnit": 0.2, "vatPercentage": 10, "fixedServiceCharge": 2},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text

        data = client.post(CALC, json={"consumerType": "commercial", "unitsConsumed": 50}).json()
        assert data["totalAmount"] == 13.0


@pytest.mark.contract
class TestCalculateBillPdf:

    def test_returns_pdf_attachment(self, client):
        resp = client.post(
            f"{CALC}/pdf",
            json={"consumerType": "residential", "unitsConsumed": 100, "calculationMonth": "2026-09"},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == "attachment; filename=bill-2026-09.pdf"
        assert resp.content.startswith(b"%PDF-")

    def test_pdf_calculation_is_recorded(self, client, admin_headers):
        client.post(f"{CALC}/pdf", json={"consumerType": "residential", "unitsConsumed": 1})
        assert client.get(f"{CALC}/history", headers=admin_headers).json()["total"] == 1


@pytest.mark.contract
class TestHistory:

    def test_requires_authentication(self, client):
        resp = client.get(f"{CALC}/history")
        assert resp.status_code == 401
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_rejects_invalid_token(self, client):
        resp = client.get(f"{CALC}/history", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_pagination(self, client, admin_headers):
        for units in range(12):
            client.post(CALC, json={"consumerType": "residential", "unitsConsumed": units})

        resp = client.get(f"{CALC}/history", params={"page": 2, "limit": 5}, headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 12
        assert data["page"] == 2
        assert data["limit"] == 5
        assert [r["unitsConsumed"] for r in data["data"]] == [6, 5, 4, 3, 2]

    def test_limit_clamped(self, client, admin_headers):
        resp = client.get(f"{CALC}/history", params={"limit": 1000}, headers=admin_headers)
        assert resp.json()["limit"] == 100

    def test_default_page_size(self, client, admin_headers):
        data = client.get(f"{CALC}/history", headers=admin_headers).json()
        assert (data["page"], data["limit"], data["total"]) == (1, 10, 0)

    def test_get_by_id(self, client, admin_headers):
        client.post(CALC, json={"consumerType": "commercial", "unitsConsumed": 10})
        record = client.get(f"{CALC}/history", headers=admin_headers).json()["data"][0]

        resp = client.get(f"{CALC}/history/{record['id']}", headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json()
        assert data["consumerType"] == "commercial"
        assert data["rateBreakdown"]["taxes"][0]["name"] == "VAT"

    def test_get_unknown_id(self, client, admin_headers):
        record_id = uuid.uuid4()
        resp = client.get(f"{CALC}/history/{record_id}", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json()["detail"] == f"Calculation history with ID {record_id} not found"

    def test_consumer_history_is_public(self, client):
        for consumer_id in ("C-1", "C-2", "C-1"):
            client.post(
                CALC,
                json={"consumerType": "residential", "unitsConsumed": 10, "consumerId": consumer_id},
            )

        resp = client.get(f"{CALC}/history/consumer/C-1")

        assert resp.status_code == 200
        assert len(resp.json()) == 2
        assert {r["consumerId"] for r in resp.json()} == {"C-1"}


@pytest.mark.contract
class TestMonthlyStats:

    def test_aggregates(self, client, admin_headers):
        for consumer_type, units in (("residential", 100), ("residential", 50), ("industrial", 10)):
            client.post(
                CALC,
                json={"consumerType": consumer_type, "unitsConsumed": units, "calculationMonth": "2026-07"},
            )

        resp = client.get(f"{CALC}/stats/2026-07", headers=admin_headers)

        assert resp.status_code == 200
        stats = {s["consumerType"]: s for s in resp.json()}
        assert stats["residential"]["count"] == 2
        assert stats["residential"]["totalUnits"] == 150
        assert stats["residential"]["totalRevenue"] == 30.7
        assert stats["industrial"]["count"] == 1

    def test_invalid_month(self, client, admin_headers):
        resp = client.get(f"{CALC}/stats/July", headers=admin_headers)
        assert resp.status_code == 422
        assert resp.json()["title"] == "Invalid Billing Month"

    def test_requires_admin(self, client):
        assert client.get(f"{CALC}/stats/2026-07").status_code == 401
