# Overview: Flask API routes for point-of-sale operations; parses input and returns JSON responses.

"""
POS routes

Order creation is one database transaction: the order, its items, the stock
movements and the sales ledger entry are written together or not at all.
Prices always come from the product rows; the client only sends product ids
and quantities.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_module, require_permission
from ..permissions import Capability, Module
from ..schemas.pos import (
    BestSellersQuery,
    OrderCancel,
    OrderCreate,
    OrderFilter,
    PosProductFilter,
    SalesStatsQuery,
)
from ..services import pos_service
from ..time_utils import app_timezone
from ..validation import parse_payload, parse_query


pos_bp = Blueprint("pos", __name__, url_prefix="/api/pos")


@pos_bp.get("/products")
@require_auth
@require_module(Module.POS)
def products_route():
    """Sellable products: active and not deleted, with their current stock."""
    filters = parse_query(PosProductFilter, request.args)
    items, total = pos_service.search_products(
        search=filters.search,
        category_id=filters.category_id,
        limit=filters.limit,
        offset=filters.offset,
    )
    return jsonify({"items": [p.to_dict() for p in items], **filters.envelope(total)}), 200


@pos_bp.post("/orders")
@require_auth
@require_permission(Capability.MANAGE_POS)
def create_order_route():
    data = parse_payload(OrderCreate, request.get_json(silent=True))
    order = pos_service.create_order(
        items=[item.model_dump() for item in data.items],
        payment_amount=data.payment_amount,
        payment_method=data.payment_method,
        customer_name=data.customer_name,
        discount=data.discount,
        tax=data.tax,
        notes=data.notes,
        actor=g.current_user,
        tz=app_timezone(),
    )
    return jsonify(order.to_dict()), 201


@pos_bp.get("/orders")
@require_auth
@require_module(Module.POS)
def list_orders_route():
    filters = parse_query(OrderFilter, request.args)
    items, total = pos_service.list_orders(
        status=filters.status,
        start=filters.start_date,
        end=filters.end_date,
        limit=filters.limit,
        offset=filters.offset,
    )
    return jsonify({"items": [o.to_dict(include_items=False) for o in items], **filters.envelope(total)}), 200


@pos_bp.get("/orders/<int:order_id>")
@require_auth
@require_module(Module.POS)
def get_order_route(order_id: int):
    return jsonify(pos_service.get_order(order_id).to_dict()), 200


@pos_bp.post("/orders/<int:order_id>/cancel")
@require_auth
@require_permission(Capability.MANAGE_POS)
def cancel_order_route(order_id: int):
    data = parse_payload(OrderCancel, request.get_json(silent=True))
    order = pos_service.cancel_order(order_id, actor=g.current_user, reason=data.reason)
    return jsonify(order.to_dict()), 200


@pos_bp.get("/stats")
@require_auth
@require_module(Module.POS)
def stats_route():
    query = parse_query(SalesStatsQuery, request.args)
    return jsonify(pos_service.get_sales_stats(start=query.start_date, end=query.end_date)), 200


@pos_bp.get("/best-sellers")
@require_auth
@require_module(Module.POS)
def best_sellers_route():
    query = parse_query(BestSellersQuery, request.args)
    items = pos_service.get_best_sellers(days=query.days, limit=query.limit, tz=app_timezone())
    return jsonify({"items": items}), 200
