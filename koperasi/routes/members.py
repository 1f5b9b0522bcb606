# Overview: Flask API routes for member savings; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_module, require_permission
from ..permissions import Capability, Module
from ..schemas.member import MemberCashRequest, MemberTransactionFilter
from ..services import ledger_rules, member_service
from ..time_utils import app_timezone, to_utc_z
from ..validation import parse_payload, parse_query


members_bp = Blueprint("members", __name__, url_prefix="/api/members")


def _with_member(tx) -> dict:
    payload = tx.to_dict()
    payload["member_name"] = member_service.member_name_from_description(tx.description)
    return payload


@members_bp.post("/deposit")
@require_auth
@require_permission(Capability.MANAGE_MEMBERS)
def deposit_route():
    data = parse_payload(MemberCashRequest, request.get_json(silent=True))
    tx = member_service.record_deposit(actor=g.current_user, **data.model_dump())
    return jsonify(_with_member(tx)), 201


@members_bp.post("/withdrawal")
@require_auth
@require_permission(Capability.MANAGE_MEMBERS)
def withdrawal_route():
    data = parse_payload(MemberCashRequest, request.get_json(silent=True))
    tx = member_service.record_withdrawal(actor=g.current_user, **data.model_dump())
    return jsonify(_with_member(tx)), 201


@members_bp.get("/transactions")
@require_auth
@require_module(Module.MEMBERS)
def list_member_transactions_route():
    filters = parse_query(MemberTransactionFilter, request.args)
    start, end = ledger_rules.resolve_bounds(
        filters.period, filters.start_date, filters.end_date, tz=app_timezone()
    )
    items, total = member_service.list_member_transactions(
        member_name=filters.member_name,
        kind=filters.type,
        start=start,
        end=end,
        limit=filters.limit,
        offset=filters.offset,
    )
    return jsonify({"items": [_with_member(tx) for tx in items], **filters.envelope(total)}), 200


@members_bp.get("/stats")
@require_auth
@require_module(Module.MEMBERS)
def member_stats_route():
    return jsonify(member_service.get_member_stats()), 200


@members_bp.get("/balances")
@require_auth
@require_module(Module.MEMBERS)
def member_balances_route():
    balances = member_service.get_member_balances()
    for row in balances:
        row["last_transaction_at"] = to_utc_z(row["last_transaction_at"])
    return jsonify({"items": balances}), 200
