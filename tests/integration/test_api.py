from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from assetforge.api.dependencies import get_db, get_session_factory_dep
from assetforge.api.main import app
from assetforge.models.orm import AssetTemplate


@pytest.fixture
def client(file_engine, file_factory):
    def _override_get_db():
        session = file_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_session_factory_dep] = lambda: file_factory
    with patch("assetforge.api.main.get_engine", return_value=file_engine):
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()


@pytest.fixture
def template_id(file_factory):
    with file_factory() as session:
        session.add_all(
            [
                AssetTemplate(
                    name="Fleet Van",
                    asset_type="Vehicle",
                    default_manufacturer="Ford",
                    default_cost=Decimal("42000.00"),
                    maintenance_interval_days=90,
                    is_active=True,
                ),
                AssetTemplate(
                    name="Legacy Terminal",
                    asset_type="Terminal",
                    maintenance_interval_days=365,
                    is_active=False,
                ),
            ]
        )
        session.commit()
        return session.query(AssetTemplate.id).filter_by(name="Fleet Van").scalar()


def _generate(client, template_id, quantity=3, prefix="HQ", start=1):
    return client.post(
        "/api/v1/assets/generate",
        json={
            "template_id": template_id,
            "quantity": quantity,
            "site_prefix": prefix,
            "start_number": start,
        },
    )


class TestTemplateRoutes:
    def test_list_active_templates(self, client, template_id):
        resp = client.get("/api/v1/templates/")
        assert resp.status_code == 200
        assert resp.json() == [
            {"id": template_id, "name": "Fleet Van", "asset_type": "Vehicle"}
        ]

    def test_preview(self, client, template_id):
        resp = client.post(
            f"/api/v1/templates/{template_id}/preview",
            json={"quantity": 8, "site_prefix": "PLANT-A", "start_number": 41},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["names"][0] == "PLANT-A-VEHICLE-0041"
        assert len(data["names"]) == 5
        assert data["remaining_count"] == 3

    def test_preview_unknown_template(self, client, template_id):
        resp = client.post(
            "/api/v1/templates/9999/preview",
            json={"quantity": 1, "site_prefix": "HQ"},
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["kind"] == "template_not_found"


class TestGenerationRoutes:
    def test_generate(self, client, template_id):
        resp = _generate(client, template_id)
        assert resp.status_code == 201
        data = resp.json()
        assert data["names"] == [
            "HQ-VEHICLE-0001",
            "HQ-VEHICLE-0002",
            "HQ-VEHICLE-0003",
        ]
        assert len(data["asset_ids"]) == 3

        detail = client.get(f"/api/v1/assets/{data['asset_ids'][0]}").json()
        assert detail["version_status"] == "Live"
        assert detail["purchase_cost"] == 42000.0

    def test_collision_rejects_whole_batch(self, client, template_id):
        assert _generate(client, template_id).status_code == 201

        resp = _generate(client, template_id, quantity=3, start=3)

        assert resp.status_code == 409
        error = resp.json()["error"]
        assert error["kind"] == "persistence_error"
        assert error["details"]["conflicting_names"] == ["HQ-VEHICLE-0003"]
        metrics = client.get("/api/v1/dashboard/metrics").json()
        assert metrics["total_assets"] == 3

    def test_quantity_out_of_range(self, client, template_id):
        resp = _generate(client, template_id, quantity=0)
        assert resp.status_code == 422
        assert resp.json()["error"]["kind"] == "validation_error"

    def test_inactive_template_rejected(self, client, template_id):
        resp = _generate(client, template_id + 1)
        assert resp.status_code == 404


class TestLifecycleRoutes:
    def test_unknown_asset(self, client):
        resp = client.get("/api/v1/assets/9999")
        assert resp.status_code == 404
        assert resp.json()["error"]["kind"] == "not_found"

    def test_plan_and_activate(self, client, template_id):
        live_id = _generate(client, template_id, quantity=1).json()["asset_ids"][0]

        planned = client.post(
            f"/api/v1/assets/{live_id}/planned-versions",
            json={"new_version": "2.0", "version_notes": "Racking upgrade"},
        )
        assert planned.status_code == 201
        planned_id = planned.json()["asset_id"]
        assert planned.json()["affected_asset_ids"] == [planned_id, live_id]

        detail = client.get(f"/api/v1/assets/{planned_id}").json()
        assert detail["available_transitions"] == ["ActivatePlanned"]

        activated = client.post(f"/api/v1/assets/{planned_id}/activate")
        assert activated.status_code == 200

        assert client.get(f"/api/v1/assets/{live_id}").json()["version_status"] == (
            "Superseded"
        )
        live = client.get("/api/v1/assets/live", params={"name": "HQ-VEHICLE-0001"})
        assert live.json()["asset_id"] == planned_id

        chain = client.get(f"/api/v1/assets/{planned_id}/chain").json()
        assert [m["id"] for m in chain] == [live_id, planned_id]

    def test_activate_with_explicit_live_asset(self, client, template_id):
        live_id = _generate(client, template_id, quantity=1).json()["asset_ids"][0]
        planned_id = client.post(
            f"/api/v1/assets/{live_id}/planned-versions", json={"new_version": "2.0"}
        ).json()["asset_id"]

        resp = client.post(
            f"/api/v1/assets/{planned_id}/activate",
            json={"related_live_asset_id": live_id},
        )
        assert resp.status_code == 200

    def test_missing_version_label(self, client, template_id):
        live_id = _generate(client, template_id, quantity=1).json()["asset_ids"][0]
        resp = client.post(
            f"/api/v1/assets/{live_id}/planned-versions", json={"new_version": " "}
        )
        assert resp.status_code == 422

    def test_supersede_twice_conflicts(self, client, template_id):
        live_id = _generate(client, template_id, quantity=1).json()["asset_ids"][0]

        assert client.post(f"/api/v1/assets/{live_id}/supersede").status_code == 200
        resp = client.post(f"/api/v1/assets/{live_id}/supersede")

        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "invalid_state"

    def test_live_lookup_not_found(self, client):
        resp = client.get("/api/v1/assets/live", params={"name": "NOPE-0001"})
        assert resp.status_code == 404

    def test_record_maintenance(self, client, template_id):
        asset_id = _generate(client, template_id, quantity=1).json()["asset_ids"][0]
        today = date.today()

        resp = client.post(
            f"/api/v1/assets/{asset_id}/maintenance",
            json={"last_maintenance_date": today.isoformat()},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["next_maintenance_due"] == (today + timedelta(days=90)).isoformat()
        assert data["maintenance_status"] == "Current"

    def test_record_maintenance_bad_interval(self, client, template_id):
        asset_id = _generate(client, template_id, quantity=1).json()["asset_ids"][0]
        resp = client.post(
            f"/api/v1/assets/{asset_id}/maintenance",
            json={"maintenance_interval_days": 0},
        )
        assert resp.status_code == 422


class TestDashboardRoutes:
    def test_dashboard(self, client, seeded_factory):
        resp = client.get("/api/v1/dashboard/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["errors"] == []
        assert data["aggregations"]["metrics"]["data"]["total_assets"] == 6
        assert data["aggregations"]["by_site"]["data"]["Not Assigned"] == 1

    def test_metrics(self, client, seeded_factory):
        resp = client.get("/api/v1/dashboard/metrics")
        assert resp.status_code == 200
        assert resp.json()["critical_assets"] == 2

    def test_charts(self, client, seeded_factory):
        resp = client.get("/api/v1/dashboard/charts")
        assert resp.status_code == 200
        charts = resp.json()["charts"]
        assert charts["status"]["type"] == "donut"
        assert charts["version"]["type"] == "gauge"
        assert charts["maintenance_by_site"]["type"] == "horizontalBar"
        assert charts["condition"]["type"] == "funnel"

    def test_single_aggregation(self, client, seeded_factory):
        resp = client.get("/api/v1/dashboard/by_version_status")
        assert resp.status_code == 200
        assert resp.json()["data"]["Planned"] == 1

    def test_unknown_aggregation(self, client):
        assert client.get("/api/v1/dashboard/by_colour").status_code == 404


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["service"] == "assetforge"
