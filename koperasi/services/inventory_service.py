# Overview: Service-layer operations for inventory; products, categories and stock movements.

"""
Inventory Service

STOCK RULES:
- Product.stock changes only through apply_stock_change, which writes the
  matching StockMovement (signed quantity, before/after levels) in the same
  session. Opening stock on product creation is an IN movement.
- Stock never goes below zero: checked here and by a DB check constraint.
- Product.version_id makes concurrent writers to one product fail with a
  conflict instead of silently overwriting each other.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from ..constants import ActivityAction, ActivityModule, StockMovementType
from ..errors import ConflictError, InsufficientStock, NotFound, ValidationError
from ..extensions import db
from ..models import Category, Product, StockMovement, Supplier, User
from ..permissions import Capability
from ..time_utils import utcnow
from .activity_service import log_activity
from .permission_service import require_capability


def _live_products():
    return db.session.query(Product).filter(Product.deleted_at.is_(None))


def get_product(product_id: int) -> Product:
    product = _live_products().filter(Product.id == product_id).first()
    if product is None:
        raise NotFound("Product not found")
    return product


def list_products(
    *,
    search: str | None = None,
    category_id: int | None = None,
    supplier_id: int | None = None,
    is_active: bool | None = None,
    low_stock: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Product], int]:
    query = _live_products()
    if search:
        like = f"%{search}%"
        query = query.filter(or_(
            Product.name.ilike(like),
            Product.sku.ilike(like),
            Product.description.ilike(like),
        ))
    if category_id:
        query = query.filter(Product.category_id == category_id)
    if supplier_id:
        query = query.filter(Product.supplier_id == supplier_id)
    if is_active is not None:
        query = query.filter(Product.is_active.is_(is_active))
    if low_stock:
        query = query.filter(Product.stock <= Product.min_stock)

    total = query.count()
    items = query.order_by(Product.name, Product.id).offset(offset).limit(limit).all()
    return items, total


def _ensure_sku_free(sku: str, exclude_id: int | None = None) -> None:
    query = _live_products().filter(Product.sku == sku)
    if exclude_id:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ConflictError("SKU already exists", details={"field": "sku"})


def _ensure_references(category_id: int | None, supplier_id: int | None) -> None:
    if category_id is not None:
        exists = db.session.query(Category.id).filter(
            Category.id == category_id, Category.deleted_at.is_(None)
        ).first()
        if not exists:
            raise ValidationError("Category not found", field="category_id")
    if supplier_id is not None:
        exists = db.session.query(Supplier.id).filter(
            Supplier.id == supplier_id, Supplier.deleted_at.is_(None)
        ).first()
        if not exists:
            raise ValidationError("Supplier not found", field="supplier_id")


def apply_stock_change(
    product: Product,
    *,
    delta: int,
    movement_type: str,
    actor_id: int | None,
    notes: str | None = None,
    reference_id: int | None = None,
) -> StockMovement:
    """Change product.stock by `delta` and stage the audit movement. Does not commit."""
    if delta == 0:
        raise ValidationError("Stock change must not be zero", field="quantity")
    before = product.stock
    after = before + delta
    if after < 0:
        raise InsufficientStock(
            product_id=product.id,
            product_name=product.name,
            requested=-delta,
            available=before,
        )
    product.stock = after
    movement = StockMovement(
        product_id=product.id,
        type=movement_type,
        quantity=delta,
        stock_before=before,
        stock_after=after,
        notes=notes,
        reference_id=reference_id,
        created_by=actor_id,
    )
    db.session.add(movement)
    return movement


def _commit_stock_write(action: str) -> None:
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise ConflictError(f"Product was modified by another request while {action}, please retry")
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Could not save changes while {action}, please retry")


def create_product(*, actor: User, **data) -> Product:
    require_capability(actor, Capability.MANAGE_INVENTORY, resource="inventory.create_product")
    _ensure_sku_free(data["sku"])
    _ensure_references(data.get("category_id"), data.get("supplier_id"))

    opening_stock = data.pop("stock", 0) or 0
    product = Product(stock=0, **data)
    db.session.add(product)
    db.session.flush()

    if opening_stock:
        apply_stock_change(
            product,
            delta=opening_stock,
            movement_type=StockMovementType.IN,
            actor_id=actor.id,
            notes="Initial stock",
        )

    log_activity(
        user=actor,
        module=ActivityModule.INVENTORY,
        action=ActivityAction.CREATE,
        description=f"Created product {product.name} ({product.sku})",
    )
    _commit_stock_write("creating the product")
    return product


def update_product(product_id: int, *, actor: User, version_id: int | None = None, **changes) -> Product:
    require_capability(actor, Capability.MANAGE_INVENTORY, resource="inventory.update_product")
    product = get_product(product_id)
    if version_id is not None and version_id != product.version_id:
        raise ConflictError("Product was modified since it was loaded, reload and try again")
    if "stock" in changes:
        raise ValidationError("Stock can only be changed through stock movements", field="stock")

    if changes.get("sku") and changes["sku"] != product.sku:
        _ensure_sku_free(changes["sku"], exclude_id=product.id)
    _ensure_references(changes.get("category_id"), changes.get("supplier_id"))

    for field, value in changes.items():
        setattr(product, field, value)

    log_activity(
        user=actor,
        module=ActivityModule.INVENTORY,
        action=ActivityAction.UPDATE,
        description=f"Updated product {product.name} ({product.sku})",
    )
    _commit_stock_write("updating the product")
    return product


def delete_product(product_id: int, *, actor: User) -> None:
    require_capability(actor, Capability.MANAGE_INVENTORY, resource="inventory.delete_product")
    product = get_product(product_id)
    product.deleted_at = utcnow()
    log_activity(
        user=actor,
        module=ActivityModule.INVENTORY,
        action=ActivityAction.DELETE,
        description=f"Deleted product {product.name} ({product.sku})",
    )
    _commit_stock_write("deleting the product")


def record_stock_movement(
    *,
    product_id: int,
    movement_type: str,
    actor: User,
    quantity: int | None = None,
    new_stock: int | None = None,
    notes: str | None = None,
) -> StockMovement:
    """
    Record a manual stock movement.

    IN/OUT take a positive quantity; ADJUSTMENT takes either a signed
    quantity or the counted `new_stock` level.
    """
    require_capability(actor, Capability.MANAGE_INVENTORY, resource="inventory.stock_movement")
    product = get_product(product_id)

    if movement_type == StockMovementType.IN:
        delta = quantity
    elif movement_type == StockMovementType.OUT:
        delta = -quantity
    elif movement_type == StockMovementType.ADJUSTMENT:
        delta = quantity if new_stock is None else new_stock - product.stock
        if delta == 0:
            raise ValidationError("Counted stock equals current stock, nothing to adjust", field="new_stock")
    else:
        raise ValidationError(f"Unknown movement type {movement_type}", field="type")

    movement = apply_stock_change(
        product,
        delta=delta,
        movement_type=movement_type,
        actor_id=actor.id,
        notes=notes,
    )
    log_activity(
        user=actor,
        module=ActivityModule.INVENTORY,
        action=ActivityAction.CREATE,
        description=f"Stock {movement_type} for {product.name}: {abs(delta)} units",
    )
    _commit_stock_write("recording the stock movement")
    return movement


def list_stock_movements(
    *,
    product_id: int | None = None,
    movement_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[StockMovement], int]:
    query = db.session.query(StockMovement)
    if product_id:
        query = query.filter(StockMovement.product_id == product_id)
    if movement_type:
        query = query.filter(StockMovement.type == movement_type)
    if start:
        query = query.filter(StockMovement.created_at >= start)
    if end:
        query = query.filter(StockMovement.created_at < end)
    total = query.count()
    items = (
        query.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def get_low_stock_alerts() -> list[Product]:
    return (
        _live_products()
        .filter(Product.is_active.is_(True), Product.stock <= Product.min_stock)
        .order_by(Product.stock.asc(), Product.name)
        .all()
    )


def get_inventory_stats() -> dict:
    live = Product.deleted_at.is_(None)
    total_products = db.session.query(func.count(Product.id)).filter(live).scalar() or 0
    active_products = (
        db.session.query(func.count(Product.id)).filter(live, Product.is_active.is_(True)).scalar() or 0
    )
    low_stock = (
        db.session.query(func.count(Product.id))
        .filter(live, Product.is_active.is_(True), Product.stock <= Product.min_stock)
        .scalar() or 0
    )
    out_of_stock = (
        db.session.query(func.count(Product.id))
        .filter(live, Product.is_active.is_(True), Product.stock == 0)
        .scalar() or 0
    )
    total_stock, inventory_value, retail_value = db.session.query(
        func.coalesce(func.sum(Product.stock), 0),
        func.coalesce(func.sum(Product.stock * Product.purchase_price), 0),
        func.coalesce(func.sum(Product.stock * Product.selling_price), 0),
    ).filter(live).one()
    return {
        "total_products": total_products,
        "active_products": active_products,
        "low_stock_products": low_stock,
        "out_of_stock_products": out_of_stock,
        "total_stock": int(total_stock),
        "inventory_value": int(inventory_value),
        "retail_value": int(retail_value),
    }


def list_categories(search: str | None = None) -> list[Category]:
    query = db.session.query(Category).filter(Category.deleted_at.is_(None))
    if search:
        query = query.filter(Category.name.ilike(f"%{search}%"))
    return query.order_by(Category.name).all()


def create_category(*, name: str, description: str | None = None, actor: User) -> Category:
    require_capability(actor, Capability.MANAGE_INVENTORY, resource="inventory.create_category")
    existing = db.session.query(Category).filter(
        Category.name == name, Category.deleted_at.is_(None)
    ).first()
    if existing:
        raise ConflictError(f"Category '{name}' already exists")
    category = Category(name=name, description=description)
    db.session.add(category)
    log_activity(
        user=actor,
        module=ActivityModule.INVENTORY,
        action=ActivityAction.CREATE,
        description=f"Created category {name}",
    )
    db.session.commit()
    return category


def list_supplier_options() -> list[Supplier]:
    """Active suppliers for product forms and filters."""
    return (
        db.session.query(Supplier)
        .filter(Supplier.deleted_at.is_(None), Supplier.is_active.is_(True))
        .order_by(Supplier.business_name)
        .all()
    )
