"""Order completion: totals, stock, ledger entry, cancellation and the checkout flow."""

from datetime import datetime, timezone

import pytest

from koperasi.constants import OrderStatus, Role, StockMovementType, TransactionCategory
from koperasi.errors import (
    InsufficientPayment,
    InsufficientStock,
    InvalidStateError,
    NotFound,
    OrderCreationFailed,
    ValidationError,
)
from koperasi.extensions import db
from koperasi.models import Order, OrderItem, Product, StockMovement, Transaction
from koperasi.services import pos_service
from koperasi.services.pos_service import Checkout, CheckoutState


def _counts():
    return (
        db.session.query(Order).count(),
        db.session.query(OrderItem).count(),
        db.session.query(StockMovement).count(),
        db.session.query(Transaction).count(),
    )


class TestCreateOrder:
    def test_completes_order(self, users, make_product):
        mie = make_product("Indomie Goreng", selling_price=10000, stock=10)
        teh = make_product("Teh Botol", selling_price=15000, stock=10)

        order = pos_service.create_order(
            items=[{"product_id": mie.id, "quantity": 2}, {"product_id": teh.id, "quantity": 3}],
            payment_amount=70000,
            actor=users[Role.KASIR],
            customer_name="Bu Siti",
        )

        assert order.status == OrderStatus.COMPLETED
        assert (order.subtotal, order.total, order.change_amount) == (65000, 65000, 5000)
        assert sorted((i.product_id, i.quantity, i.price) for i in order.items) == [(mie.id, 2, 10000), (teh.id, 3, 15000)]
        assert db.session.get(Product, mie.id).stock == 8
        assert db.session.get(Product, teh.id).stock == 7

        movements = db.session.query(StockMovement).filter_by(reference_id=order.id).all()
        assert {m.type for m in movements} == {StockMovementType.OUT}
        assert sorted(m.quantity for m in movements) == [-3, -2]
        assert all(f"Order {order.order_number}" in m.notes for m in movements)

        sale = db.session.query(Transaction).filter_by(reference_id=order.id).one()
        assert (sale.type, sale.category, sale.amount) == ("CASH_IN", TransactionCategory.SALES, 65000)
        assert sale.notes == "Customer: Bu Siti"

    def test_duplicate_lines_are_merged(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        order = pos_service.create_order(
            items=[{"product_id": aqua.id, "quantity": 2}, {"product_id": aqua.id, "quantity": 3}],
            payment_amount=15000,
            actor=users[Role.KASIR],
        )
        assert len(order.items) == 1
        assert order.items[0].quantity == 5

    def test_selling_out_then_rejecting(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        pos_service.create_order(
            items=[{"product_id": aqua.id, "quantity": 5}], payment_amount=15000, actor=users[Role.KASIR]
        )
        assert db.session.get(Product, aqua.id).stock == 0
        before = _counts()

        with pytest.raises(InsufficientStock):
            pos_service.create_order(
                items=[{"product_id": aqua.id, "quantity": 1}], payment_amount=3000, actor=users[Role.KASIR]
            )

        assert _counts() == before
        assert db.session.get(Product, aqua.id).stock == 0

    def test_short_payment_writes_nothing(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        before = _counts()
        with pytest.raises(InsufficientPayment):
            pos_service.create_order(
                items=[{"product_id": aqua.id, "quantity": 2}], payment_amount=5000, actor=users[Role.KASIR]
            )
        assert _counts() == before
        assert db.session.get(Product, aqua.id).stock == 5

    def test_failure_on_second_line_rolls_back_first(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        teh = make_product("Teh", selling_price=5000, stock=1)
        with pytest.raises(InsufficientStock):
            pos_service.create_order(
                items=[{"product_id": aqua.id, "quantity": 2}, {"product_id": teh.id, "quantity": 2}],
                payment_amount=100000,
                actor=users[Role.KASIR],
            )
        assert db.session.get(Product, aqua.id).stock == 5

    def test_inactive_and_missing_products(self, users, make_product):
        hidden = make_product("Lama", stock=5, is_active=False)
        with pytest.raises(ValidationError):
            pos_service.create_order(
                items=[{"product_id": hidden.id, "quantity": 1}], payment_amount=10000, actor=users[Role.KASIR]
            )
        with pytest.raises(NotFound):
            pos_service.create_order(
                items=[{"product_id": 9999, "quantity": 1}], payment_amount=10000, actor=users[Role.KASIR]
            )

    def test_empty_cart(self, users):
        with pytest.raises(ValidationError):
            pos_service.create_order(items=[], payment_amount=0, actor=users[Role.KASIR])

    def test_fully_discounted_order_has_no_ledger_entry(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        order = pos_service.create_order(
            items=[{"product_id": aqua.id, "quantity": 1}],
            payment_amount=0,
            discount=3000,
            actor=users[Role.KASIR],
        )
        assert order.total == 0
        assert db.session.query(Transaction).filter_by(reference_id=order.id).count() == 0

    def test_order_numbers_are_daily_sequence(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=10)
        now = datetime(2025, 10, 22, 3, 0)
        numbers = [
            pos_service.create_order(
                items=[{"product_id": aqua.id, "quantity": 1}],
                payment_amount=3000,
                actor=users[Role.KASIR],
                now=now,
                tz=timezone.utc,
            ).order_number
            for _ in range(2)
        ]
        assert numbers == ["ORD-20251022-0001", "ORD-20251022-0002"]

    def test_order_numbers_continue_past_four_digits(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=10)
        now = datetime(2025, 10, 22, 3, 0)

        def sell():
            return pos_service.create_order(
                items=[{"product_id": aqua.id, "quantity": 1}],
                payment_amount=3000,
                actor=users[Role.KASIR],
                now=now,
                tz=timezone.utc,
            )

        first = sell()
        first.order_number = "ORD-20251022-9999"
        db.session.commit()
        assert sell().order_number == "ORD-20251022-10000"
        assert sell().order_number == "ORD-20251022-10001"

    def test_lost_stock_race_writes_nothing(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        loaded_version = aqua.version_id
        # Another writer bumps the row after this session loaded it
        db.session.execute(
            Product.__table__.update().where(Product.id == aqua.id).values(version_id=loaded_version + 1)
        )

        with pytest.raises(OrderCreationFailed):
            pos_service.create_order(
                items=[{"product_id": aqua.id, "quantity": 2}],
                payment_amount=6000,
                actor=users[Role.KASIR],
            )

        assert _counts() == (0, 0, 0, 0)
        assert db.session.get(Product, aqua.id).stock == 5

    def test_staff_cannot_sell(self, users, make_product):
        from koperasi.services.permission_service import PermissionDeniedError

        aqua = make_product("Aqua", selling_price=3000, stock=10)
        with pytest.raises(PermissionDeniedError):
            pos_service.create_order(
                items=[{"product_id": aqua.id, "quantity": 1}], payment_amount=3000, actor=users[Role.STAFF]
            )


class TestCancelOrder:
    def test_restores_stock_and_voids_sale(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        order = pos_service.create_order(
            items=[{"product_id": aqua.id, "quantity": 2}], payment_amount=6000, actor=users[Role.KASIR]
        )

        cancelled = pos_service.cancel_order(order.id, actor=users[Role.ADMIN], reason="Salah input")
        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.cancel_reason == "Salah input"
        assert db.session.get(Product, aqua.id).stock == 5

        sale = db.session.query(Transaction).filter_by(reference_id=order.id).one()
        assert sale.deleted_at is not None

        with pytest.raises(InvalidStateError):
            pos_service.cancel_order(order.id, actor=users[Role.ADMIN])


class TestCheckout:
    def test_happy_path(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        checkout = Checkout(users[Role.KASIR])
        checkout.add_item(aqua.id, 2)
        checkout.add_item(aqua.id)
        totals = checkout.begin_payment(discount=1000)
        assert checkout.state == CheckoutState.PENDING_PAYMENT
        assert totals.total == 8000

        order = checkout.complete(10000)
        assert checkout.state == CheckoutState.COMPLETED
        assert order.change_amount == 2000

    def test_cart_is_frozen_while_paying(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        checkout = Checkout(users[Role.KASIR])
        checkout.add_item(aqua.id)
        checkout.begin_payment()
        with pytest.raises(InvalidStateError):
            checkout.add_item(aqua.id)
        checkout.back_to_cart()
        checkout.add_item(aqua.id)
        assert checkout.cart.quantity_of(aqua.id) == 2

    def test_failed_payment_stays_pending(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        checkout = Checkout(users[Role.KASIR])
        checkout.add_item(aqua.id, 2)
        checkout.begin_payment()
        with pytest.raises(InsufficientPayment):
            checkout.complete(1000)
        assert checkout.state == CheckoutState.PENDING_PAYMENT
        assert checkout.cart.quantity_of(aqua.id) == 2
        checkout.complete(6000)
        assert checkout.state == CheckoutState.COMPLETED

    def test_editing_the_cart(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        mie = make_product("Indomie", selling_price=3500, stock=5)
        checkout = Checkout(users[Role.KASIR])
        checkout.add_item(aqua.id)
        checkout.add_item(mie.id)
        checkout.set_quantity(aqua.id, 4)
        with pytest.raises(InsufficientStock):
            checkout.set_quantity(aqua.id, 6)
        checkout.remove_item(mie.id)
        assert checkout.begin_payment().total == 12000

    def test_quantity_change_sees_current_stock(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=10)
        checkout = Checkout(users[Role.KASIR])
        checkout.add_item(aqua.id)

        db.session.get(Product, aqua.id).stock = 2
        db.session.commit()

        with pytest.raises(InsufficientStock):
            checkout.set_quantity(aqua.id, 5)
        checkout.set_quantity(aqua.id, 2)
        assert checkout.cart.quantity_of(aqua.id) == 2

    def test_failed_write_keeps_payment_pending(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        checkout = Checkout(users[Role.KASIR])
        checkout.add_item(aqua.id, 2)
        checkout.begin_payment()
        db.session.execute(
            Product.__table__.update().where(Product.id == aqua.id).values(version_id=aqua.version_id + 1)
        )

        with pytest.raises(OrderCreationFailed):
            checkout.complete(6000)

        assert checkout.state == CheckoutState.PENDING_PAYMENT
        assert checkout.cart.quantity_of(aqua.id) == 2
        assert _counts() == (0, 0, 0, 0)
        assert db.session.get(Product, aqua.id).stock == 5

        # A retry once the row is current goes through
        assert checkout.complete(6000).total == 6000
        assert checkout.state == CheckoutState.COMPLETED

    def test_empty_cart_cannot_pay(self, users):
        checkout = Checkout(users[Role.KASIR])
        with pytest.raises(ValidationError):
            checkout.begin_payment()

    def test_abort(self, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        checkout = Checkout(users[Role.KASIR])
        checkout.add_item(aqua.id)
        checkout.abort()
        assert checkout.state == CheckoutState.ABORTED
        assert checkout.cart.is_empty
        with pytest.raises(InvalidStateError):
            checkout.begin_payment()


class TestPosApi:
    def test_create_order_over_http(self, client, login, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        login(Role.KASIR)
        resp = client.post("/api/pos/orders", json={
            "items": [{"product_id": aqua.id, "quantity": 2}],
            "payment_amount": 10000,
            "customer_name": "  ",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["total"] == 6000
        assert body["change_amount"] == 4000
        assert body["customer_name"] is None
        assert body["items"][0]["product_name"] == "Aqua"

    def test_client_prices_are_not_accepted(self, client, login, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=5)
        login(Role.KASIR)
        resp = client.post("/api/pos/orders", json={
            "items": [{"product_id": aqua.id, "quantity": 1, "price": 1}],
            "payment_amount": 3000,
        })
        assert resp.status_code == 400

    def test_insufficient_stock_over_http(self, client, login, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=1)
        login(Role.KASIR)
        resp = client.post("/api/pos/orders", json={
            "items": [{"product_id": aqua.id, "quantity": 2}],
            "payment_amount": 10000,
        })
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["available"] == 1
        assert body["requested"] == 2

    def test_stats_and_best_sellers(self, client, login, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=10)
        teh = make_product("Teh", selling_price=5000, stock=10)
        pos_service.create_order(
            items=[{"product_id": aqua.id, "quantity": 3}, {"product_id": teh.id, "quantity": 1}],
            payment_amount=14000,
            actor=users[Role.KASIR],
        )
        login(Role.KASIR)
        stats = client.get("/api/pos/stats").get_json()
        assert stats["total_orders"] == 1
        assert stats["total_revenue"] == 14000
        assert stats["top_products"][0]["name"] == "Aqua"

        best = client.get("/api/pos/best-sellers?days=7").get_json()["items"]
        assert [b["product_name"] for b in best] == ["Aqua", "Teh"]
        assert best[0]["category_name"] == "Uncategorized"

    def test_list_and_cancel(self, client, login, users, make_product):
        aqua = make_product("Aqua", selling_price=3000, stock=10)
        order = pos_service.create_order(
            items=[{"product_id": aqua.id, "quantity": 1}], payment_amount=3000, actor=users[Role.KASIR]
        )
        login(Role.KASIR)
        listing = client.get("/api/pos/orders").get_json()
        assert listing["total"] == 1
        assert "items" not in listing["items"][0]

        resp = client.post(f"/api/pos/orders/{order.id}/cancel", json={"reason": "Batal"})
        assert resp.status_code == 200
        assert resp.get_json()["status"] == OrderStatus.CANCELLED
        again = client.post(f"/api/pos/orders/{order.id}/cancel", json={})
        assert again.status_code == 400
