"""
Service catalog and site settings tests.
"""

from decimal import Decimal

from shopsite.domain.catalog.service import DEFAULT_SERVICES
from shopsite.models import Service

from .conftest import auth_headers


class TestCatalog:
    def test_public_listing_hides_inactive_and_keeps_order(self, client, db):
        db.add_all(
            [
                Service(name="Second", price=Decimal("200"), display_order=2),
                Service(name="Hidden", price=Decimal("50"), display_order=0, is_active=False),
                Service(name="First", price=Decimal("100"), display_order=1),
            ]
        )
        db.commit()

        names = [s["name"] for s in client.get("/services").json()]
        assert names == ["First", "Second"]

    def test_create_appends_to_display_order(self, client, db, staff):
        db.add(Service(name="Existing", price=Decimal("100"), display_order=4))
        db.commit()

        response = client.post(
            "/services",
            json={"name": "Network Setup", "description": "WiFi", "price": "699"},
            headers=auth_headers(staff.user_id),
        )

        assert response.status_code == 201
        assert response.json()["display_order"] == 5

    def test_negative_price_rejected(self, client, staff):
        response = client.post(
            "/services", json={"name": "Free money", "price": "-1"}, headers=auth_headers(staff.user_id)
        )
        assert response.status_code == 422

    def test_import_defaults_skips_existing(self, client, db, staff):
        db.add(Service(name="data recovery", price=Decimal("1"), display_order=1))
        db.commit()
        headers = auth_headers(staff.user_id)

        first = client.post("/services/import-defaults", headers=headers).json()
        second = client.post("/services/import-defaults", headers=headers).json()

        assert first["count"] == len(DEFAULT_SERVICES) - 1
        assert "Data Recovery" not in first["imported"]
        assert second["count"] == 0

    def test_toggle_hides_from_public(self, client, db, staff):
        service = Service(name="Virus Removal", price=Decimal("599"), display_order=1)
        db.add(service)
        db.commit()

        client.post(f"/services/{service.id}/toggle", headers=auth_headers(staff.user_id))

        assert client.get("/services").json() == []
        assert len(client.get("/services/all", headers=auth_headers(staff.user_id)).json()) == 1

    def test_management_requires_dashboard_access(self, client):
        assert client.post("/services", json={"name": "X", "price": "1"}).status_code == 401


class TestSettings:
    def test_maintenance_flag_seeded_on_startup(self, client):
        response = client.get("/settings/maintenance_mode")
        assert response.status_code == 200
        assert response.json()["value"] == "false"

    def test_staff_can_update_setting(self, client, staff):
        response = client.put(
            "/settings/maintenance_mode", json={"value": "true"}, headers=auth_headers(staff.user_id)
        )
        assert response.status_code == 200
        assert client.get("/settings/maintenance_mode").json()["value"] == "true"

    def test_anonymous_cannot_update_setting(self, client):
        assert client.put("/settings/maintenance_mode", json={"value": "true"}).status_code == 401

    def test_unknown_setting(self, client):
        assert client.get("/settings/does_not_exist").status_code == 404
