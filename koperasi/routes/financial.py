# Overview: Flask API routes for the financial ledger; parses input and returns JSON responses.

"""
Financial ledger routes

SECURITY: Every route needs the financial module (edge gate plus
@require_module). Mutations additionally need MANAGE_FINANCIAL and the CSV
export needs EXPORT_DATA.
"""

from flask import Blueprint, Response, g, jsonify, request

from ..constants import TransactionCategory
from ..decorators import require_auth, require_module, require_permission
from ..permissions import Capability, Module
from ..schemas.common import PeriodFilter
from ..schemas.financial import ExportFilter, TransactionCreate, TransactionFilter, TransactionUpdate
from ..services import export_service, financial_service, ledger_rules
from ..time_utils import app_timezone, to_local, utcnow
from ..validation import parse_payload, parse_query


financial_bp = Blueprint("financial", __name__, url_prefix="/api/financial")


def _period(filters: PeriodFilter):
    return ledger_rules.get_period_range(
        filters.period,
        filters.start_date,
        filters.end_date,
        tz=app_timezone(),
    )


def _list_filters(filters) -> dict:
    start, end = ledger_rules.resolve_bounds(
        filters.period, filters.start_date, filters.end_date, tz=app_timezone()
    )
    return {
        "search": filters.search,
        "tx_type": filters.type,
        "category": filters.category,
        "supplier_id": filters.supplier_id,
        "start": start,
        "end": end,
    }


@financial_bp.get("/summary")
@require_auth
@require_module(Module.FINANCIAL)
def summary_route():
    filters = parse_query(PeriodFilter, request.args)
    return jsonify(financial_service.get_summary(_period(filters))), 200


@financial_bp.get("/chart")
@require_auth
@require_module(Module.FINANCIAL)
def chart_route():
    filters = parse_query(PeriodFilter, request.args)
    period = _period(filters)
    return jsonify({"series": financial_service.get_chart_data(period), **period.to_dict()}), 200


@financial_bp.get("/balance")
@require_auth
@require_module(Module.FINANCIAL)
def balance_route():
    return jsonify({
        "balance": financial_service.get_balance(),
        "store_balance": financial_service.get_balance(category=TransactionCategory.SALES),
    }), 200


@financial_bp.get("/transactions")
@require_auth
@require_module(Module.FINANCIAL)
def list_transactions_route():
    filters = parse_query(TransactionFilter, request.args)
    items, total = financial_service.list_transactions(
        limit=filters.limit,
        offset=filters.offset,
        **_list_filters(filters),
    )
    return jsonify({"items": [tx.to_dict() for tx in items], **filters.envelope(total)}), 200


@financial_bp.post("/transactions")
@require_auth
@require_permission(Capability.MANAGE_FINANCIAL)
def create_transaction_route():
    data = parse_payload(TransactionCreate, request.get_json(silent=True))
    tx = financial_service.create_transaction(actor=g.current_user, **data.model_dump())
    return jsonify(tx.to_dict()), 201


@financial_bp.get("/transactions/<int:transaction_id>")
@require_auth
@require_module(Module.FINANCIAL)
def get_transaction_route(transaction_id: int):
    return jsonify(financial_service.get_transaction(transaction_id).to_dict()), 200


@financial_bp.patch("/transactions/<int:transaction_id>")
@require_auth
@require_permission(Capability.MANAGE_FINANCIAL)
def update_transaction_route(transaction_id: int):
    data = parse_payload(TransactionUpdate, request.get_json(silent=True))
    tx = financial_service.update_transaction(
        transaction_id, actor=g.current_user, **data.model_dump(exclude_unset=True)
    )
    return jsonify(tx.to_dict()), 200


@financial_bp.delete("/transactions/<int:transaction_id>")
@require_auth
@require_permission(Capability.MANAGE_FINANCIAL)
def delete_transaction_route(transaction_id: int):
    financial_service.delete_transaction(transaction_id, actor=g.current_user)
    return jsonify({"success": True}), 200


@financial_bp.get("/export.csv")
@require_auth
@require_module(Module.FINANCIAL)
@require_permission(Capability.EXPORT_DATA)
def export_csv_route():
    filters = parse_query(ExportFilter, request.args)
    tz = app_timezone()
    transactions = financial_service.transactions_for_export(**_list_filters(filters))
    body = export_service.export_transactions_csv(transactions, tz)
    filename = f"transactions-{to_local(utcnow(), tz).strftime('%Y%m%d')}.csv"
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
