"""Cart arithmetic and stock checks (no database)."""

import pytest

from koperasi.errors import InsufficientPayment, InsufficientStock, ValidationError
from koperasi.services.cart_service import (
    Cart,
    LineItem,
    can_add_to_cart,
    compute_change,
    compute_totals,
    ensure_can_add,
    percentage_discount,
)


class TestComputeTotals:
    def test_sums_line_items(self):
        totals = compute_totals([LineItem(10000, 2), LineItem(15000, 3)])
        assert totals.subtotal == 65000
        assert totals.total == 65000

    def test_discount_and_tax(self):
        totals = compute_totals([LineItem(10000, 2)], discount=5000, tax=1500)
        assert totals.to_dict() == {"subtotal": 20000, "discount": 5000, "tax": 1500, "total": 16500}

    def test_total_never_negative(self):
        totals = compute_totals([LineItem(10000, 1)], discount=25000)
        assert totals.total == 0

    def test_empty_cart_is_zero(self):
        totals = compute_totals([])
        assert (totals.subtotal, totals.total) == (0, 0)

    def test_rejects_non_positive_quantity(self):
        with pytest.raises(ValidationError):
            compute_totals([LineItem(10000, 0)])

    def test_rejects_negative_discount(self):
        with pytest.raises(ValidationError):
            compute_totals([LineItem(10000, 1)], discount=-1)


class TestPayment:
    def test_change(self):
        assert compute_change(65000, 70000) == 5000

    def test_exact_payment(self):
        assert compute_change(65000, 65000) == 0

    def test_short_payment(self):
        with pytest.raises(InsufficientPayment) as exc:
            compute_change(65000, 60000)
        assert exc.value.to_dict()["shortfall"] == 5000
        assert exc.value.status_code == 400

    def test_percentage_discount(self):
        assert percentage_discount(65000, 10) == 6500
        with pytest.raises(ValidationError):
            percentage_discount(65000, 120)


class TestStockCheck:
    def test_can_add_up_to_stock(self):
        assert can_add_to_cart(2, 3, 5) is True
        assert can_add_to_cart(3, 3, 5) is False

    def test_ensure_can_add_reports_quantities(self):
        with pytest.raises(InsufficientStock) as exc:
            ensure_can_add(product_id=1, product_name="Aqua", requested_qty=3, current_cart_qty=3, available_stock=5)
        body = exc.value.to_dict()
        assert body["requested"] == 6
        assert body["available"] == 5
        assert "Aqua" in body["error"]


class TestCart:
    def test_adding_same_product_merges(self):
        cart = Cart()
        cart.add(product_id=1, name="Aqua", unit_price=3000, available_stock=10)
        cart.add(product_id=1, name="Aqua", unit_price=3000, available_stock=10, quantity=2)
        assert cart.quantity_of(1) == 3
        assert len(cart.lines) == 1
        assert cart.totals().subtotal == 9000

    def test_add_beyond_stock_keeps_cart(self):
        cart = Cart()
        cart.add(product_id=1, name="Aqua", unit_price=3000, available_stock=2, quantity=2)
        with pytest.raises(InsufficientStock):
            cart.add(product_id=1, name="Aqua", unit_price=3000, available_stock=2)
        assert cart.quantity_of(1) == 2

    def test_set_quantity_zero_removes(self):
        cart = Cart()
        cart.add(product_id=1, name="Aqua", unit_price=3000, available_stock=5)
        assert cart.set_quantity(1, 0) is None
        assert cart.is_empty

    def test_set_quantity_checks_stock(self):
        cart = Cart()
        cart.add(product_id=1, name="Aqua", unit_price=3000, available_stock=5)
        with pytest.raises(InsufficientStock):
            cart.set_quantity(1, 6)
        cart.set_quantity(1, 5)
        assert cart.to_items_payload() == [{"product_id": 1, "quantity": 5}]

    def test_set_quantity_unknown_product(self):
        with pytest.raises(ValidationError):
            Cart().set_quantity(99, 1)
