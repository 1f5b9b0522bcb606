# Overview: System health endpoint.

import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
    except Exception as e:
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "latency_ms": round((time.time() - start_time) * 1000, 2)}


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    return jsonify({
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database},
    }), 200 if healthy else 503
