"""Contract tests for /api/v1/config."""

from __future__ import annotations

import uuid

import pytest

CONFIG = "/api/v1/config"

TIER_BODY = {
    "rateName": "Residential Tier 1",
    "rateType": "tier_rate",
    "rateValue": 0.1,
    "unitType": "per_kwh",
    "consumerType": "residential",
    "tierMinUnits": 0,
    "tierMaxUnits": 100,
    "vatPercentage": 15,
    "fixedServiceCharge": 5,
}


@pytest.mark.contract
class TestEffectiveRate:

    def test_default_rate(self, client):
        resp = client.get(f"{CONFIG}/effective")
        assert resp.status_code == 200
        assert resp.json() == {"ratePerUnit": 0.12, "vatPercentage": 15.0, "fixedServiceCharge": 5.0}

    def test_flat_rate_requires_admin(self, client):
        resp = client.post(
            f"{CONFIG}/flat-rate",
            json={"ratePerUnit": 0.2, "vatPercentage": 10, "fixedServiceCharge": 2},
        )
        assert resp.status_code == 401

    def test_flat_rate_replacement(self, client, admin_headers):
        client.post(CONFIG, json=TIER_BODY, headers=admin_headers)

        resp = client.post(
            f"{CONFIG}/flat-rate",
            json={"ratePerUnit": 0.2, "vatPercentage": 10, "fixedServiceCharge": 2},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["rateName"] == "Flat Rate"
        assert client.get(f"{CONFIG}/effective").json()["ratePerUnit"] == 0.2
        active = [e for e in client.get(CONFIG).json() if e["isActive"]]
        assert [e["rateName"] for e in active] == ["Flat Rate"]


@pytest.mark.contract
class TestRateEntryCrud:

    def test_create_requires_admin(self, client):
        assert client.post(CONFIG, json=TIER_BODY).status_code == 401

    def test_create_and_get(self, client, admin_headers):
        resp = client.post(CONFIG, json=TIER_BODY, headers=admin_headers)

        assert resp.status_code == 201, resp.text
        created = resp.json()
        assert created["rateName"] == "Residential Tier 1"
        assert created["rateType"] == "tier_rate"
        assert created["consumerType"] == "residential"
        assert created["createdBy"] is not None

        fetched = client.get(f"{CONFIG}/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == created["id"]

    def test_create_is_the_effective_rate(self, client, admin_headers):
        client.get(f"{CONFIG}/effective")
        client.post(CONFIG, json=TIER_BODY, headers=admin_headers)
        assert client.get(f"{CONFIG}/effective").json()["ratePerUnit"] == 0.1

    def test_create_rejects_inverted_tier(self, client, admin_headers):
        body = {**TIER_BODY, "tierMinUnits": 200, "tierMaxUnits": 100}
        assert client.post(CONFIG, json=body, headers=admin_headers).status_code == 422

    def test_update(self, client, admin_headers):
        rate_id = client.post(CONFIG, json=TIER_BODY, headers=admin_headers).json()["id"]

        resp = client.patch(
            f"{CONFIG}/{rate_id}", json={"rateValue": 0.11, "description": "Revised"}, headers=admin_headers
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["rateValue"] == 0.11
        assert data["description"] == "Revised"
        assert data["rateName"] == "Residential Tier 1"

    @pytest.mark.parametrize(
        "field", ["rateName", "rateType", "rateValue", "consumerType", "tierMinUnits", "isActive"]
    )
    def test_update_rejects_null_for_required_field(self, client, admin_headers, field):
        rate_id = client.post(CONFIG, json=TIER_BODY, headers=admin_headers).json()["id"]

        resp = client.patch(f"{CONFIG}/{rate_id}", json={field: None}, headers=admin_headers)

        assert resp.status_code == 422
        assert resp.json()["title"] == "Validation Error"
        assert client.get(f"{CONFIG}/{rate_id}").json()["rateValue"] == 0.1
        calc = client.post(
            "/api/v1/calculation", json={"consumerType": "residential", "unitsConsumed": 10}
        )
        assert calc.status_code == 200
        assert calc.json()["baseAmount"] == 1.0

    def test_update_allows_clearing_optional_field(self, client, admin_headers):
        rate_id = client.post(CONFIG, json=TIER_BODY, headers=admin_headers).json()["id"]
        resp = client.patch(f"{CONFIG}/{rate_id}", json={"tierMaxUnits": None}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["tierMaxUnits"] is None

    def test_update_rejects_inverted_tier_after_merge(self, client, admin_headers):
        rate_id = client.post(CONFIG, json=TIER_BODY, headers=admin_headers).json()["id"]

        resp = client.patch(f"{CONFIG}/{rate_id}", json={"tierMinUnits": 150}, headers=admin_headers)

        assert resp.status_code == 422
        assert resp.json()["title"] == "Invalid Rate Entry"
        assert client.get(f"{CONFIG}/{rate_id}").json()["tierMinUnits"] == 0

    def test_update_rejects_inverted_window_after_merge(self, client, admin_headers):
        body = {**TIER_BODY, "effectiveFrom": "2026-01-01"}
        rate_id = client.post(CONFIG, json=body, headers=admin_headers).json()["id"]

        resp = client.patch(
            f"{CONFIG}/{rate_id}", json={"effectiveTo": "2025-12-31"}, headers=admin_headers
        )

        assert resp.status_code == 422
        assert resp.json()["type"].endswith("/invalid-rate")

    def test_toggle(self, client, admin_headers):
        rate_id = client.post(CONFIG, json=TIER_BODY, headers=admin_headers).json()["id"]
        resp = client.patch(f"{CONFIG}/{rate_id}/toggle", headers=admin_headers)
        assert resp.json()["isActive"] is False
        assert client.get(f"{CONFIG}/effective").json()["ratePerUnit"] == 0.12

    def test_delete(self, client, admin_headers):
        rate_id = client.post(CONFIG, json=TIER_BODY, headers=admin_headers).json()["id"]

        resp = client.delete(f"{CONFIG}/{rate_id}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json() == {"message": f"Config {rate_id} deleted"}
        assert client.get(f"{CONFIG}/{rate_id}").status_code == 404

    def test_unknown_id_is_problem_json(self, client, admin_headers):
        rate_id = uuid.uuid4()
        resp = client.patch(f"{CONFIG}/{rate_id}/toggle", headers=admin_headers)
        assert resp.status_code == 404
        data = resp.json()
        assert data["detail"] == f"Config with ID {rate_id} not found"
        assert data["type"].endswith("/rate-not-found")

    def test_malformed_id(self, client):
        assert client.get(f"{CONFIG}/not-a-uuid").status_code == 422


@pytest.mark.contract
class TestRateQueries:

    def _seed(self, client, headers):
        client.post(CONFIG, json=TIER_BODY, headers=headers)
        client.post(
            CONFIG,
            json={"rateName": "VAT", "rateType": "tax", "rateValue": 15, "unitType": "percentage"},
            headers=headers,
        )
        client.post(
            CONFIG,
            json={
                "rateName": "Meter Rent",
                "rateType": "surcharge",
                "rateValue": 25,
                "unitType": "fixed",
                "consumerType": "commercial",
            },
            headers=headers,
        )

    def test_consumer_type_includes_shared_entries(self, client, admin_headers):
        self._seed(client, admin_headers)
        names = {e["rateName"] for e in client.get(f"{CONFIG}/consumer-type/residential").json()}
        assert names == {"Residential Tier 1", "VAT"}

    def test_tier_rates(self, client, admin_headers):
        self._seed(client, admin_headers)
        tiers = client.get(f"{CONFIG}/tier-rates/residential").json()
        assert [t["rateName"] for t in tiers] == ["Residential Tier 1"]

    def test_taxes_and_surcharges(self, client, admin_headers):
        self._seed(client, admin_headers)
        data = client.get(f"{CONFIG}/taxes-surcharges/commercial").json()
        assert [t["rateName"] for t in data["taxes"]] == ["VAT"]
        assert [s["rateName"] for s in data["surcharges"]] == ["Meter Rent"]

    def test_unknown_consumer_type(self, client):
        assert client.get(f"{CONFIG}/tier-rates/spaceship").status_code == 422

    def test_active_filter(self, client, admin_headers):
        self._seed(client, admin_headers)
        rate_id = client.get(CONFIG).json()[0]["id"]
        client.patch(f"{CONFIG}/{rate_id}/toggle", headers=admin_headers)

        assert len(client.get(CONFIG).json()) == 3
        assert len(client.get(CONFIG, params={"active": "true"}).json()) == 2
