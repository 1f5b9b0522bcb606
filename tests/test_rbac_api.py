"""Access gate behaviour: 401 without a session, 403 with a logged denial."""

import pytest

from koperasi.constants import ActivityAction, Role
from koperasi.extensions import db
from koperasi.models import ActivityLog


class TestUnauthenticated:
    @pytest.mark.parametrize("path", [
        "/api/financial/summary",
        "/api/pos/orders",
        "/api/dashboard",
        "/api/activity-logs",
    ])
    def test_redirects_to_login(self, client, users, path):
        resp = client.get(path)
        assert resp.status_code == 401
        assert resp.get_json()["redirect"] == f"/login?callbackUrl={path}"

    def test_health_is_public(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["checks"]["database"]["status"] == "healthy"


class TestDenied:
    def test_kasir_cannot_open_suppliers(self, client, login, users):
        login(Role.KASIR)
        resp = client.get("/api/suppliers")
        assert resp.status_code == 403
        body = resp.get_json()
        assert body["redirect"] == "/dashboard?error=unauthorized"
        assert body["module"] == "suppliers"

        denial = db.session.query(ActivityLog).filter_by(
            user_id=users[Role.KASIR].id, action=ActivityAction.ACCESS_DENIED
        ).one()
        assert "/api/suppliers" in denial.description

    def test_staff_cannot_use_pos(self, client, login):
        login(Role.STAFF)
        assert client.get("/api/pos/products").status_code == 403
        assert client.post("/api/pos/orders", json={}).status_code == 403

    def test_supplier_role_sees_only_suppliers(self, client, login):
        login(Role.SUPPLIER)
        assert client.get("/api/suppliers").status_code == 200
        assert client.post("/api/suppliers", json={"business_name": "PT Baru"}).status_code == 403
        assert client.get("/api/inventory/products").status_code == 403

    def test_kasir_reads_but_cannot_change_inventory(self, client, login):
        login(Role.KASIR)
        assert client.get("/api/inventory/products").status_code == 200
        resp = client.post("/api/inventory/products", json={"sku": "X1", "name": "X", "selling_price": 1000})
        assert resp.status_code == 403


class TestAllowed:
    @pytest.mark.parametrize("role", [Role.DEVELOPER, Role.SUPER_ADMIN, Role.ADMIN])
    def test_financial_roles(self, client, login, role):
        login(role)
        assert client.get("/api/financial/summary").status_code == 200

    @pytest.mark.parametrize("role", list(Role.ALL))
    def test_dashboard_open_to_every_role(self, client, login, role):
        login(role)
        resp = client.get("/api/dashboard")
        assert resp.status_code == 200
        assert resp.get_json()["user"]["role"] == role

    def test_reports_for_staff(self, client, login):
        login(Role.STAFF)
        assert client.get("/api/reports/dashboard").status_code == 200
