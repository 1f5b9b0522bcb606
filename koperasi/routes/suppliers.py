# Overview: Flask API routes for supplier operations; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_module, require_permission
from ..permissions import Capability, Module
from ..schemas.supplier import SupplierCreate, SupplierFilter, SupplierUpdate
from ..services import supplier_service
from ..validation import parse_payload, parse_query


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
@require_auth
@require_module(Module.SUPPLIERS)
def list_suppliers_route():
    filters = parse_query(SupplierFilter, request.args)
    rows, total = supplier_service.list_suppliers(
        search=filters.search,
        is_active=filters.is_active,
        limit=filters.limit,
        offset=filters.offset,
    )
    items = [supplier.to_dict(product_count=count) for supplier, count in rows]
    return jsonify({"items": items, **filters.envelope(total)}), 200


@suppliers_bp.post("")
@require_auth
@require_permission(Capability.MANAGE_SUPPLIERS)
def create_supplier_route():
    data = parse_payload(SupplierCreate, request.get_json(silent=True))
    supplier = supplier_service.create_supplier(actor=g.current_user, **data.model_dump())
    return jsonify(supplier.to_dict(product_count=0)), 201


@suppliers_bp.get("/stats")
@require_auth
@require_module(Module.SUPPLIERS)
def supplier_stats_route():
    return jsonify(supplier_service.get_supplier_stats()), 200


@suppliers_bp.get("/<int:supplier_id>")
@require_auth
@require_module(Module.SUPPLIERS)
def get_supplier_route(supplier_id: int):
    supplier = supplier_service.get_supplier(supplier_id)
    return jsonify(supplier.to_dict(product_count=supplier_service.count_products(supplier.id))), 200


@suppliers_bp.patch("/<int:supplier_id>")
@require_auth
@require_permission(Capability.MANAGE_SUPPLIERS)
def update_supplier_route(supplier_id: int):
    data = parse_payload(SupplierUpdate, request.get_json(silent=True))
    supplier = supplier_service.update_supplier(
        supplier_id, actor=g.current_user, **data.model_dump(exclude_unset=True)
    )
    return jsonify(supplier.to_dict(product_count=supplier_service.count_products(supplier.id))), 200


@suppliers_bp.delete("/<int:supplier_id>")
@require_auth
@require_permission(Capability.MANAGE_SUPPLIERS)
def delete_supplier_route(supplier_id: int):
    """Soft delete. Refused (409) while live products still reference the supplier."""
    supplier_service.delete_supplier(supplier_id, actor=g.current_user)
    return jsonify({"success": True}), 200
