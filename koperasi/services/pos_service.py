# Overview: Service-layer operations for POS; checkout workflow, order persistence and sales statistics.

"""
POS Service

ORDER COMPLETION is all-or-nothing. In one database transaction it writes
the Order and its OrderItems, decrements stock with one OUT StockMovement
per line, records the CASH_IN / SALES ledger entry (reference_id = order id)
and the activity log entry.

- Business-rule failures (empty cart, unknown/inactive product, stock,
  payment) are raised before anything is written.
- Database failures (lost optimistic-version race, constraint violation,
  lock timeout) roll everything back and surface as OrderCreationFailed,
  which the cashier may simply retry. Nothing is retried automatically.
- Unit prices are snapshotted from Product.selling_price at confirmation;
  prices sent by a client are never trusted.
"""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo

from flask import current_app
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..constants import (
    ActivityAction,
    ActivityModule,
    OrderStatus,
    PaymentMethod,
    StockMovementType,
    TransactionCategory,
    TransactionType,
)
from ..errors import ConflictError, InvalidStateError, KoperasiError, NotFound, OrderCreationFailed, ValidationError
from ..extensions import db
from ..formatting import format_currency
from ..models import Category, Order, OrderItem, Product, Transaction, User
from ..permissions import Capability
from ..time_utils import app_timezone, normalize_utc, to_local, utcnow
from .activity_service import log_activity
from .cart_service import Cart, CartTotals, LineItem, compute_change, compute_totals, ensure_can_add
from .concurrency import begin_write_transaction, lock_for_update
from .financial_service import build_transaction
from .inventory_service import apply_stock_change, get_product
from .permission_service import require_capability


def generate_order_number(now: datetime, tz: tzinfo) -> str:
    """Next ORD-YYYYMMDD-NNNN for the local business day of `now`."""
    prefix = f"ORD-{to_local(now, tz).strftime('%Y%m%d')}-"
    last = (
        db.session.query(Order.order_number)
        .filter(Order.order_number.like(prefix + "%"))
        # Longest first so ...-10000 ranks above ...-9999
        .order_by(func.length(Order.order_number).desc(), Order.order_number.desc())
        .first()
    )
    sequence = int(last[0][len(prefix):]) + 1 if last else 1
    return f"{prefix}{sequence:04d}"


def _merge_lines(items) -> dict[int, int]:
    """[{product_id, quantity}] -> {product_id: total quantity}, order kept."""
    merged: dict[int, int] = {}
    for item in items:
        product_id = item["product_id"] if isinstance(item, dict) else item.product_id
        quantity = item["quantity"] if isinstance(item, dict) else item.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("Quantity must be a positive integer", field="items.quantity")
        merged[product_id] = merged.get(product_id, 0) + quantity
    return merged


def _load_sellable(product_id: int, quantity: int) -> Product:
    product = lock_for_update(db.session.query(Product).filter(Product.id == product_id)).first()
    if product is None or product.deleted_at is not None:
        raise NotFound(f"Product {product_id} not found", details={"product_id": product_id})
    if not product.is_active:
        raise ValidationError(f'Product "{product.name}" is not active', field="items.product_id")
    ensure_can_add(
        product_id=product.id,
        product_name=product.name,
        requested_qty=quantity,
        current_cart_qty=0,
        available_stock=product.stock,
    )
    return product


def create_order(
    *,
    items,
    payment_amount: int,
    actor: User,
    payment_method: str = PaymentMethod.CASH,
    customer_name: str | None = None,
    discount: int = 0,
    tax: int = 0,
    notes: str | None = None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> Order:
    require_capability(actor, Capability.MANAGE_POS, resource="pos.create_order")
    if not items:
        raise ValidationError("Cart is empty. Please add items to cart.", field="items")
    if payment_method not in PaymentMethod.ALL:
        raise ValidationError(f"Unknown payment method {payment_method}", field="payment_method")
    quantities = _merge_lines(items)
    now = now or utcnow()
    tz = tz or app_timezone()

    try:
        begin_write_transaction()

        # Validate everything before the first write
        products = [(_load_sellable(pid, qty), qty) for pid, qty in quantities.items()]
        totals = compute_totals(
            [LineItem(unit_price=p.selling_price, quantity=qty) for p, qty in products],
            discount=discount,
            tax=tax,
        )
        change = compute_change(totals.total, payment_amount)

        order_number = generate_order_number(now, tz)
        order = Order(
            order_number=order_number,
            customer_name=customer_name,
            subtotal=totals.subtotal,
            discount=totals.discount,
            tax=totals.tax,
            total=totals.total,
            payment_method=payment_method,
            payment_amount=payment_amount,
            change_amount=change,
            status=OrderStatus.COMPLETED,
            notes=notes,
            created_by=actor.id,
            created_at=now,
        )
        db.session.add(order)
        db.session.flush()

        for product, quantity in products:
            db.session.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=quantity,
                price=product.selling_price,
                subtotal=product.selling_price * quantity,
            ))
            apply_stock_change(
                product,
                delta=-quantity,
                movement_type=StockMovementType.OUT,
                actor_id=actor.id,
                notes=f"POS Sale - Order {order_number}",
                reference_id=order.id,
            )

        # A fully discounted order moves no cash
        if totals.total > 0:
            build_transaction(
                tx_type=TransactionType.CASH_IN,
                category=TransactionCategory.SALES,
                amount=totals.total,
                payment_method=payment_method,
                description=f"POS Sale - Order {order_number}",
                notes=f"Customer: {customer_name}" if customer_name else "Walk-in customer",
                reference_id=order.id,
                created_by_id=actor.id,
                created_at=now,
            )

        log_activity(
            user=actor,
            module=ActivityModule.POS,
            action=ActivityAction.CREATE,
            description=f"Created order {order_number} - {format_currency(totals.total)}",
        )
        db.session.commit()
    except KoperasiError:
        db.session.rollback()
        raise
    except (StaleDataError, IntegrityError, OperationalError) as exc:
        db.session.rollback()
        current_app.logger.warning("Order creation failed: %s", exc)
        raise OrderCreationFailed()

    current_app.logger.info("Order %s completed by %s (total %s)", order.order_number, actor.username, order.total)
    return order


def cancel_order(order_id: int, *, actor: User, reason: str | None = None) -> Order:
    """Cancel a completed order: restore stock with IN movements and void its sales entry."""
    require_capability(actor, Capability.MANAGE_POS, resource="pos.cancel_order")
    try:
        begin_write_transaction()
        order = lock_for_update(db.session.query(Order).filter(Order.id == order_id)).first()
        if order is None:
            raise NotFound("Order not found")
        if order.status == OrderStatus.CANCELLED:
            raise InvalidStateError("Order already cancelled")
        if order.status != OrderStatus.COMPLETED:
            raise InvalidStateError(f"Only completed orders can be cancelled (status {order.status})")

        suffix = f": {reason}" if reason else ""
        for item in order.items:
            product = lock_for_update(db.session.query(Product).filter(Product.id == item.product_id)).one()
            apply_stock_change(
                product,
                delta=item.quantity,
                movement_type=StockMovementType.IN,
                actor_id=actor.id,
                notes=f"Order cancelled - {order.order_number}{suffix}",
                reference_id=order.id,
            )

        cancelled_at = utcnow()
        sales_entries = db.session.query(Transaction).filter(
            Transaction.reference_id == order.id,
            Transaction.category == TransactionCategory.SALES,
            Transaction.deleted_at.is_(None),
        ).all()
        for entry in sales_entries:
            entry.deleted_at = cancelled_at

        order.status = OrderStatus.CANCELLED
        order.cancelled_at = cancelled_at
        order.cancel_reason = reason

        log_activity(
            user=actor,
            module=ActivityModule.POS,
            action=ActivityAction.UPDATE,
            description=f"Cancelled order {order.order_number}{suffix}",
        )
        db.session.commit()
    except KoperasiError:
        db.session.rollback()
        raise
    except (StaleDataError, IntegrityError, OperationalError) as exc:
        db.session.rollback()
        current_app.logger.warning("Order cancellation failed: %s", exc)
        raise ConflictError("Failed to cancel order, please try again")
    return order


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    return order


def list_orders(
    *,
    status: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Order], int]:
    query = db.session.query(Order)
    if status:
        query = query.filter(Order.status == status)
    if start:
        query = query.filter(Order.created_at >= start)
    if end:
        query = query.filter(Order.created_at < end)
    total = query.count()
    items = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit).all()
    return items, total


def search_products(
    *,
    search: str | None = None,
    category_id: int | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Product], int]:
    """Sellable products for the POS grid: active and not deleted."""
    query = db.session.query(Product).filter(Product.deleted_at.is_(None), Product.is_active.is_(True))
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
    if category_id:
        query = query.filter(Product.category_id == category_id)
    total = query.count()
    items = query.order_by(Product.name, Product.id).offset(offset).limit(limit).all()
    return items, total


def _product_sales(start: datetime | None = None, end: datetime | None = None):
    quantity = func.sum(OrderItem.quantity).label("total_quantity")
    revenue = func.sum(OrderItem.subtotal).label("total_revenue")
    query = (
        db.session.query(Product, Category.name, quantity, revenue)
        .join(OrderItem, OrderItem.product_id == Product.id)
        .join(Order, Order.id == OrderItem.order_id)
        .outerjoin(Category, Category.id == Product.category_id)
        .filter(Order.status == OrderStatus.COMPLETED)
        .group_by(Product.id, Category.name)
        .order_by(quantity.desc(), Product.name)
    )
    if start:
        query = query.filter(Order.created_at >= start)
    if end:
        query = query.filter(Order.created_at < end)
    return query


def get_sales_stats(*, start: datetime | None = None, end: datetime | None = None) -> dict:
    query = db.session.query(func.coalesce(func.sum(Order.total), 0), func.count(Order.id)).filter(
        Order.status == OrderStatus.COMPLETED
    )
    if start:
        query = query.filter(Order.created_at >= start)
    if end:
        query = query.filter(Order.created_at < end)
    revenue, count = query.one()
    revenue = int(revenue)

    top = _product_sales(start, end).limit(5).all()
    return {
        "total_revenue": revenue,
        "total_orders": count,
        "average_order_value": round(revenue / count) if count else 0,
        "top_products": [
            {
                "id": product.id,
                "name": product.name,
                "sku": product.sku,
                "total_quantity": int(qty),
                "total_revenue": int(rev),
            }
            for product, _, qty, rev in top
        ],
    }


def get_best_sellers(*, days: int = 30, limit: int = 10, now: datetime | None = None, tz: tzinfo | None = None) -> list[dict]:
    now = now or utcnow()
    tz = tz or app_timezone()
    local_start = to_local(now, tz).replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=days)
    rows = _product_sales(start=normalize_utc(local_start)).limit(limit).all()
    return [
        {
            "product_id": product.id,
            "product_name": product.name,
            "product_sku": product.sku,
            "category_name": category_name or "Uncategorized",
            "total_quantity": int(qty),
            "total_revenue": int(rev),
        }
        for product, category_name, qty, rev in rows
    ]


class CheckoutState:
    DRAFT = "DRAFT"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


class Checkout:
    """
    One cashier's checkout: DRAFT -> PENDING_PAYMENT -> COMPLETED | ABORTED.

    The cart can only change in DRAFT. complete() persists the order via
    create_order; if that fails the checkout stays in PENDING_PAYMENT with
    the cart intact so the cashier can fix the payment or retry.
    """

    def __init__(self, actor: User):
        self.actor = actor
        self.cart = Cart()
        self.state = CheckoutState.DRAFT
        self.customer_name: str | None = None
        self.discount = 0
        self.tax = 0
        self.totals: CartTotals | None = None
        self.order: Order | None = None

    def _require(self, *states: str) -> None:
        if self.state not in states:
            raise InvalidStateError(f"Checkout is {self.state}, expected {' or '.join(states)}")

    def add_item(self, product_id: int, quantity: int = 1):
        self._require(CheckoutState.DRAFT)
        product = get_product(product_id)
        db.session.refresh(product)
        if not product.is_active:
            raise ValidationError(f'Product "{product.name}" is not active', field="product_id")
        return self.cart.add(
            product_id=product.id,
            name=product.name,
            unit_price=product.selling_price,
            available_stock=product.stock,
            quantity=quantity,
        )

    def set_quantity(self, product_id: int, quantity: int):
        """Change a line's quantity, checked against the product's current stock."""
        self._require(CheckoutState.DRAFT)
        line = self.cart.lines.get(product_id)
        if line is not None:
            product = get_product(product_id)
            db.session.refresh(product)
            line.available_stock = product.stock
        return self.cart.set_quantity(product_id, quantity)

    def remove_item(self, product_id: int) -> None:
        self._require(CheckoutState.DRAFT)
        self.cart.remove(product_id)

    def clear(self) -> None:
        self._require(CheckoutState.DRAFT)
        self.cart.clear()

    def begin_payment(self, *, discount: int = 0, tax: int = 0, customer_name: str | None = None) -> CartTotals:
        self._require(CheckoutState.DRAFT)
        if self.cart.is_empty:
            raise ValidationError("Cart is empty. Please add items to cart.", field="items")
        self.totals = self.cart.totals(discount=discount, tax=tax)
        self.discount = discount
        self.tax = tax
        self.customer_name = customer_name
        self.state = CheckoutState.PENDING_PAYMENT
        return self.totals

    def back_to_cart(self) -> None:
        self._require(CheckoutState.PENDING_PAYMENT)
        self.totals = None
        self.state = CheckoutState.DRAFT

    def abort(self) -> None:
        self._require(CheckoutState.DRAFT, CheckoutState.PENDING_PAYMENT)
        self.cart.clear()
        self.totals = None
        self.state = CheckoutState.ABORTED

    def complete(self, payment_amount: int, payment_method: str = PaymentMethod.CASH) -> Order:
        self._require(CheckoutState.PENDING_PAYMENT)
        compute_change(self.totals.total, payment_amount)
        self.order = create_order(
            items=self.cart.to_items_payload(),
            payment_amount=payment_amount,
            payment_method=payment_method,
            customer_name=self.customer_name,
            discount=self.discount,
            tax=self.tax,
            actor=self.actor,
        )
        self.state = CheckoutState.COMPLETED
        return self.order
