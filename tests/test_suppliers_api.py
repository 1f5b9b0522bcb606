"""Supplier master data and its referential integrity with products."""

import pytest

from koperasi.constants import Role
from koperasi.extensions import db
from koperasi.models import Supplier


@pytest.fixture
def admin_client(client, login):
    login(Role.ADMIN)
    return client


def test_create_and_get(admin_client):
    resp = admin_client.post("/api/suppliers", json={
        "business_name": "CV Jaya Abadi",
        "contact_person": "Siti Rahayu",
        "email": "jayaabadi@email.com",
    })
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["product_count"] == 0

    fetched = admin_client.get(f"/api/suppliers/{created['id']}").get_json()
    assert fetched["business_name"] == "CV Jaya Abadi"


def test_business_name_is_unique_ignoring_case(admin_client, supplier):
    resp = admin_client.post("/api/suppliers", json={"business_name": "pt sumber rezeki"})
    assert resp.status_code == 409
    assert resp.get_json()["field"] == "business_name"


def test_invalid_email(admin_client):
    resp = admin_client.post("/api/suppliers", json={"business_name": "X", "email": "not-an-email"})
    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == "email"


def test_rename_onto_existing_name(admin_client, supplier):
    other = admin_client.post("/api/suppliers", json={"business_name": "CV Jaya Abadi"}).get_json()
    resp = admin_client.patch(f"/api/suppliers/{other['id']}", json={"business_name": "PT Sumber Rezeki"})
    assert resp.status_code == 409


def test_delete_refused_while_products_reference_it(admin_client, supplier, make_product):
    make_product(supplier_id=supplier.id)
    make_product("Biskuit Roma", supplier_id=supplier.id)

    resp = admin_client.delete(f"/api/suppliers/{supplier.id}")
    assert resp.status_code == 409
    assert resp.get_json()["product_count"] == 2
    assert db.session.get(Supplier, supplier.id).deleted_at is None


def test_delete_unreferenced_supplier(admin_client, supplier):
    assert admin_client.delete(f"/api/suppliers/{supplier.id}").status_code == 200
    assert admin_client.get(f"/api/suppliers/{supplier.id}").status_code == 404
    # The name is free again once the old row is soft deleted
    resp = admin_client.post("/api/suppliers", json={"business_name": "PT Sumber Rezeki"})
    assert resp.status_code == 201


def test_list_with_counts_and_stats(admin_client, supplier, make_product):
    make_product(supplier_id=supplier.id)
    admin_client.post("/api/suppliers", json={"business_name": "CV Jaya Abadi", "is_active": False})

    listing = admin_client.get("/api/suppliers?search=rezeki").get_json()
    assert listing["total"] == 1
    assert listing["items"][0]["product_count"] == 1

    stats = admin_client.get("/api/suppliers/stats").get_json()
    assert stats["total_suppliers"] == 2
    assert stats["active_suppliers"] == 1
    assert stats["total_products"] == 1
    assert [s["business_name"] for s in stats["top_suppliers"]] == ["PT Sumber Rezeki"]


def test_supplier_role_is_read_only(client, login, supplier):
    login(Role.SUPPLIER)
    assert client.get("/api/suppliers").status_code == 200
    assert client.post("/api/suppliers", json={"business_name": "Baru"}).status_code == 403
    assert client.delete(f"/api/suppliers/{supplier.id}").status_code == 403


@pytest.mark.parametrize("field", ["business_name", "is_active"])
def test_update_rejects_null_for_required_fields(admin_client, supplier, field):
    resp = admin_client.patch(f"/api/suppliers/{supplier.id}", json={field: None})
    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == field
    assert db.session.get(Supplier, supplier.id).business_name == "PT Sumber Rezeki"


def test_update_can_clear_contact_details(admin_client, supplier):
    resp = admin_client.patch(f"/api/suppliers/{supplier.id}", json={"contact_person": None})
    assert resp.status_code == 200
    assert resp.get_json()["contact_person"] is None
