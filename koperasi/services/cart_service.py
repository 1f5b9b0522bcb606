# Overview: Pure cart arithmetic and stock checks used by the POS checkout.

"""
Cart Service

Totals are integer rupiah. A cart is an explicit object owned by whoever
drives the checkout (a POS terminal session, a test) rather than shared
state, so two checkouts never see each other's lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..errors import InsufficientPayment, InsufficientStock, ValidationError


@dataclass(frozen=True)
class LineItem:
    unit_price: int
    quantity: int

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartTotals:
    subtotal: int
    discount: int
    tax: int
    total: int

    def to_dict(self) -> dict:
        return {"subtotal": self.subtotal, "discount": self.discount, "tax": self.tax, "total": self.total}


def _require_int(value, name: str, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer", field=name)
    if value < minimum:
        raise ValidationError(f"{name} must be at least {minimum}", field=name)
    return value


def compute_totals(items: Iterable[LineItem], discount: int = 0, tax: int = 0) -> CartTotals:
    """
    subtotal = Σ unit_price × quantity
    total    = max(subtotal − discount + tax, 0)

    An empty cart gives all zeros.
    """
    _require_int(discount, "discount", minimum=0)
    _require_int(tax, "tax", minimum=0)
    subtotal = 0
    for item in items:
        _require_int(item.quantity, "quantity", minimum=1)
        _require_int(item.unit_price, "unit_price", minimum=0)
        subtotal += item.subtotal
    return CartTotals(subtotal=subtotal, discount=discount, tax=tax, total=max(subtotal - discount + tax, 0))


def compute_change(total: int, payment_amount: int) -> int:
    _require_int(payment_amount, "payment_amount", minimum=0)
    if payment_amount < total:
        raise InsufficientPayment(total=total, payment_amount=payment_amount)
    return payment_amount - total


def percentage_discount(subtotal: int, percent: float) -> int:
    """Discount in rupiah for a percentage of the subtotal, rounded half up."""
    if percent < 0 or percent > 100:
        raise ValidationError("Discount percentage must be between 0 and 100", field="discount")
    return int(subtotal * percent / 100 + 0.5)


def can_add_to_cart(requested_qty: int, current_cart_qty: int, available_stock: int) -> bool:
    return current_cart_qty + requested_qty <= available_stock


def ensure_can_add(
    *,
    product_id: Optional[int],
    product_name: str,
    requested_qty: int,
    current_cart_qty: int,
    available_stock: int,
) -> None:
    if not can_add_to_cart(requested_qty, current_cart_qty, available_stock):
        raise InsufficientStock(
            product_id=product_id,
            product_name=product_name,
            requested=current_cart_qty + requested_qty,
            available=available_stock,
        )


@dataclass
class CartLine:
    product_id: int
    name: str
    unit_price: int
    quantity: int
    available_stock: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": self.unit_price,
            "quantity": self.quantity,
            "subtotal": self.unit_price * self.quantity,
            "stock": self.available_stock,
        }


@dataclass
class Cart:
    """Lines keyed by product; adding an existing product merges quantities."""

    lines: dict[int, CartLine] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def quantity_of(self, product_id: int) -> int:
        line = self.lines.get(product_id)
        return line.quantity if line else 0

    def add(self, *, product_id: int, name: str, unit_price: int, available_stock: int, quantity: int = 1) -> CartLine:
        _require_int(quantity, "quantity", minimum=1)
        _require_int(unit_price, "unit_price", minimum=0)
        ensure_can_add(
            product_id=product_id,
            product_name=name,
            requested_qty=quantity,
            current_cart_qty=self.quantity_of(product_id),
            available_stock=available_stock,
        )
        line = self.lines.get(product_id)
        if line is None:
            line = self.lines[product_id] = CartLine(product_id, name, unit_price, 0, available_stock)
        line.quantity += quantity
        line.available_stock = available_stock
        return line

    def set_quantity(self, product_id: int, quantity: int) -> Optional[CartLine]:
        """Set an absolute quantity; zero or less removes the line."""
        line = self.lines.get(product_id)
        if line is None:
            raise ValidationError("Product is not in the cart", field="product_id")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("quantity must be an integer", field="quantity")
        if quantity <= 0:
            self.remove(product_id)
            return None
        ensure_can_add(
            product_id=product_id,
            product_name=line.name,
            requested_qty=quantity,
            current_cart_qty=0,
            available_stock=line.available_stock,
        )
        line.quantity = quantity
        return line

    def remove(self, product_id: int) -> None:
        self.lines.pop(product_id, None)

    def clear(self) -> None:
        self.lines.clear()

    def line_items(self) -> list[LineItem]:
        return [LineItem(unit_price=line.unit_price, quantity=line.quantity) for line in self.lines.values()]

    def totals(self, discount: int = 0, tax: int = 0) -> CartTotals:
        return compute_totals(self.line_items(), discount=discount, tax=tax)

    def to_items_payload(self) -> list[dict]:
        return [{"product_id": line.product_id, "quantity": line.quantity} for line in self.lines.values()]
