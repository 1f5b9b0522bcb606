from __future__ import annotations

from ..extensions import db
from ..constants import OrderStatus
from ..time_utils import to_utc_z, utcnow


class Order(db.Model):
    """
    POS order header.

    Invariants:
    - total == max(subtotal - discount + tax, 0)
    - change_amount == payment_amount - total
    - payment_amount >= total for COMPLETED orders
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("total >= 0", name="ck_orders_total_non_negative"),
        db.CheckConstraint("change_amount >= 0", name="ck_orders_change_non_negative"),
        db.Index("ix_orders_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    # ORD-YYYYMMDD-NNNN
    order_number = db.Column(db.String(32), nullable=False, unique=True)
    customer_name = db.Column(db.String(255), nullable=True)

    subtotal = db.Column(db.BigInteger, nullable=False)
    discount = db.Column(db.BigInteger, nullable=False, default=0)
    tax = db.Column(db.BigInteger, nullable=False, default=0)
    total = db.Column(db.BigInteger, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False)
    payment_amount = db.Column(db.BigInteger, nullable=False)
    change_amount = db.Column(db.BigInteger, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default=OrderStatus.PENDING, index=True)
    notes = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancel_reason = db.Column(db.String(255), nullable=True)

    items = db.relationship("OrderItem", backref="order", lazy=True, order_by="OrderItem.id")
    cashier = db.relationship("User")

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "customer_name": self.customer_name,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "tax": self.tax,
            "total": self.total,
            "payment_method": self.payment_method,
            "payment_amount": self.payment_amount,
            "change_amount": self.change_amount,
            "status": self.status,
            "notes": self.notes,
            "created_by": self.created_by,
            "cashier_name": self.cashier.full_name if self.cashier else None,
            "created_at": to_utc_z(self.created_at),
            "cancelled_at": to_utc_z(self.cancelled_at),
            "cancel_reason": self.cancel_reason,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderItem(db.Model):
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    # Snapshot of Product.selling_price at checkout
    price = db.Column(db.BigInteger, nullable=False)
    subtotal = db.Column(db.BigInteger, nullable=False)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "product_sku": self.product.sku if self.product else None,
            "quantity": self.quantity,
            "price": self.price,
            "subtotal": self.subtotal,
        }
