# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

"""
Inventory routes

SECURITY: Reads need the inventory module (KASIR included, read-only).
Writes need MANAGE_INVENTORY; stock levels only change through stock
movements, never through a product update.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_module, require_permission
from ..permissions import Capability, Module
from ..schemas.inventory import (
    CategoryCreate,
    CategoryQuery,
    ProductCreate,
    ProductFilter,
    ProductUpdate,
    StockMovementFilter,
    stock_movement_adapter,
)
from ..services import inventory_service
from ..validation import parse_payload, parse_query


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/products")
@require_auth
@require_module(Module.INVENTORY)
def list_products_route():
    filters = parse_query(ProductFilter, request.args)
    items, total = inventory_service.list_products(
        search=filters.search,
        category_id=filters.category_id,
        supplier_id=filters.supplier_id,
        is_active=filters.is_active,
        low_stock=filters.low_stock,
        limit=filters.limit,
        offset=filters.offset,
    )
    return jsonify({"items": [p.to_dict() for p in items], **filters.envelope(total)}), 200


@inventory_bp.post("/products")
@require_auth
@require_permission(Capability.MANAGE_INVENTORY)
def create_product_route():
    data = parse_payload(ProductCreate, request.get_json(silent=True))
    product = inventory_service.create_product(actor=g.current_user, **data.model_dump())
    return jsonify(product.to_dict()), 201


@inventory_bp.get("/products/<int:product_id>")
@require_auth
@require_module(Module.INVENTORY)
def get_product_route(product_id: int):
    product = inventory_service.get_product(product_id)
    movements, _ = inventory_service.list_stock_movements(product_id=product.id, limit=10)
    payload = product.to_dict()
    payload["recent_movements"] = [m.to_dict() for m in movements]
    return jsonify(payload), 200


@inventory_bp.patch("/products/<int:product_id>")
@require_auth
@require_permission(Capability.MANAGE_INVENTORY)
def update_product_route(product_id: int):
    data = parse_payload(ProductUpdate, request.get_json(silent=True))
    changes = data.model_dump(exclude_unset=True)
    version_id = changes.pop("version_id", None)
    product = inventory_service.update_product(
        product_id, actor=g.current_user, version_id=version_id, **changes
    )
    return jsonify(product.to_dict()), 200


@inventory_bp.delete("/products/<int:product_id>")
@require_auth
@require_permission(Capability.MANAGE_INVENTORY)
def delete_product_route(product_id: int):
    inventory_service.delete_product(product_id, actor=g.current_user)
    return jsonify({"success": True}), 200


@inventory_bp.get("/movements")
@require_auth
@require_module(Module.INVENTORY)
def list_movements_route():
    filters = parse_query(StockMovementFilter, request.args)
    items, total = inventory_service.list_stock_movements(
        product_id=filters.product_id,
        movement_type=filters.type,
        start=filters.start_date,
        end=filters.end_date,
        limit=filters.limit,
        offset=filters.offset,
    )
    return jsonify({"items": [m.to_dict() for m in items], **filters.envelope(total)}), 200


@inventory_bp.post("/movements")
@require_auth
@require_permission(Capability.MANAGE_INVENTORY)
def create_movement_route():
    """Record IN, OUT or ADJUSTMENT; the body's `type` selects the shape."""
    data = parse_payload(stock_movement_adapter, request.get_json(silent=True))
    movement = inventory_service.record_stock_movement(
        product_id=data.product_id,
        movement_type=data.type,
        actor=g.current_user,
        quantity=data.quantity,
        new_stock=getattr(data, "new_stock", None),
        notes=data.notes,
    )
    return jsonify(movement.to_dict()), 201


@inventory_bp.get("/low-stock")
@require_auth
@require_module(Module.INVENTORY)
def low_stock_route():
    products = inventory_service.get_low_stock_alerts()
    return jsonify({"items": [p.to_dict() for p in products], "total": len(products)}), 200


@inventory_bp.get("/stats")
@require_auth
@require_module(Module.INVENTORY)
def stats_route():
    return jsonify(inventory_service.get_inventory_stats()), 200


@inventory_bp.get("/categories")
@require_auth
@require_module(Module.INVENTORY)
def list_categories_route():
    query = parse_query(CategoryQuery, request.args)
    categories = inventory_service.list_categories(query.search)
    return jsonify({"items": [c.to_dict() for c in categories]}), 200


@inventory_bp.post("/categories")
@require_auth
@require_permission(Capability.MANAGE_INVENTORY)
def create_category_route():
    data = parse_payload(CategoryCreate, request.get_json(silent=True))
    category = inventory_service.create_category(actor=g.current_user, **data.model_dump())
    return jsonify(category.to_dict()), 201


@inventory_bp.get("/suppliers")
@require_auth
@require_module(Module.INVENTORY)
def supplier_options_route():
    """Supplier picker for product forms (id and name only)."""
    suppliers = inventory_service.list_supplier_options()
    return jsonify({"items": [{"id": s.id, "business_name": s.business_name} for s in suppliers]}), 200
