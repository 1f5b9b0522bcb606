# Overview: Flask API routes for the activity log; read-only listing, stats and trends.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_module
from ..permissions import Module
from ..schemas.activity import ActivityFilter, ActivityTrendsQuery
from ..services import activity_service, ledger_rules
from ..time_utils import app_timezone
from ..validation import parse_query


activity_bp = Blueprint("activity_logs", __name__, url_prefix="/api/activity-logs")


@activity_bp.get("")
@require_auth
@require_module(Module.ACTIVITY_LOGS)
def list_activity_route():
    filters = parse_query(ActivityFilter, request.args)
    start, end = ledger_rules.resolve_bounds(
        filters.period, filters.start_date, filters.end_date, tz=app_timezone()
    )
    items, total = activity_service.list_activity_logs(
        search=filters.search,
        module=filters.module,
        action=filters.action,
        user_id=filters.user_id,
        start=start,
        end=end,
        limit=filters.limit,
        offset=filters.offset,
    )
    return jsonify({"items": [log.to_dict() for log in items], **filters.envelope(total)}), 200


@activity_bp.get("/stats")
@require_auth
@require_module(Module.ACTIVITY_LOGS)
def activity_stats_route():
    return jsonify(activity_service.get_activity_stats()), 200


@activity_bp.get("/trends")
@require_auth
@require_module(Module.ACTIVITY_LOGS)
def activity_trends_route():
    query = parse_query(ActivityTrendsQuery, request.args)
    trends = activity_service.get_activity_trends(days=query.days, tz=app_timezone())
    return jsonify({"days": query.days, "items": trends}), 200
