# Overview: Flask API routes for reports and the dashboard landing page.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_module
from ..permissions import Module
from ..schemas.report import ReportQuery
from ..services import ledger_rules, report_service
from ..time_utils import app_timezone
from ..validation import parse_query


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")
dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@reports_bp.get("/dashboard")
@require_auth
@require_module(Module.REPORTS)
def dashboard_report_route():
    query = parse_query(ReportQuery, request.args)
    period = ledger_rules.get_period_range(
        query.period or "month",
        query.start_date,
        query.end_date,
        tz=app_timezone(),
    )
    return jsonify(report_service.get_dashboard_report(period)), 200


@dashboard_bp.get("")
@require_auth
@require_module(Module.DASHBOARD)
def dashboard_route():
    """Landing page for every role; sections the role cannot open are left out by the client via allowed_routes."""
    return jsonify(report_service.get_dashboard_overview(g.current_user, tz=app_timezone())), 200
