"""
Pytest fixtures for koperasi backend tests.

Provides the app on an in-memory database, a clean database per test, one
account per role and helpers to log the test client in.
"""

import pytest

from koperasi import create_app
from koperasi.config import TestConfig
from koperasi.constants import Role
from koperasi.extensions import db
from koperasi.models import Category, Product, Supplier
from koperasi.services.auth_service import create_user

PASSWORD = "password123"

USERNAMES = {
    Role.DEVELOPER: "developer",
    Role.SUPER_ADMIN: "superadmin",
    Role.ADMIN: "admin",
    Role.KASIR: "kasir",
    Role.STAFF: "staff",
    Role.SUPPLIER: "supplier",
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        db.session.rollback()
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def users(db_session):
    """One active account per role, keyed by role."""
    return {
        role: create_user(
            username=username,
            password=PASSWORD,
            full_name=f"{username.title()} User",
            email=f"{username}@umbandung.com",
            role=role,
        )
        for role, username in USERNAMES.items()
    }


@pytest.fixture(scope='function')
def login(client, users):
    """Log the test client in as the account for `role`."""
    def _login(role, password=PASSWORD):
        resp = client.post("/api/auth/login", json={"username": USERNAMES[role], "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp

    return _login


@pytest.fixture(scope='function')
def make_product(db_session):
    """Create a product directly (no movements), returns the model."""
    counter = {"n": 0}

    def _make(name="Indomie Goreng", selling_price=3500, stock=10, min_stock=0, **kwargs):
        counter["n"] += 1
        product = Product(
            sku=kwargs.pop("sku", f"SKU{counter['n']:03d}"),
            name=name,
            purchase_price=kwargs.pop("purchase_price", 0),
            selling_price=selling_price,
            stock=stock,
            min_stock=min_stock,
            **kwargs,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture(scope='function')
def supplier(db_session):
    supplier = Supplier(business_name="PT Sumber Rezeki", contact_person="Budi Santoso")
    db_session.add(supplier)
    db_session.commit()
    return supplier


@pytest.fixture(scope='function')
def category(db_session):
    category = Category(name="Makanan", description="Produk makanan")
    db_session.add(category)
    db_session.commit()
    return category
