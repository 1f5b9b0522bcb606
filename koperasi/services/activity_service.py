# Overview: Service-layer operations for activity logs; append-only audit trail and its statistics.

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Optional

from sqlalchemy import func, or_

from ..extensions import db
from ..models import ActivityLog, User
from ..time_utils import normalize_utc, to_local, utcnow


def log_activity(
    *,
    user: Optional[User],
    module: str,
    action: str,
    description: str,
    commit: bool = False,
) -> ActivityLog:
    """
    Append an activity entry to the current session.

    The entry is flushed with the caller's own changes so it commits or rolls
    back together with the mutation it describes. Pass commit=True only for
    standalone events (login, logout, access denied).
    """
    entry = ActivityLog(
        user_id=user.id if user else None,
        role=user.role if user else None,
        module=module,
        action=action,
        description=description[:500],
    )
    db.session.add(entry)
    if commit:
        db.session.commit()
    return entry


def list_activity_logs(
    *,
    search: str | None = None,
    module: str | None = None,
    action: str | None = None,
    user_id: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[ActivityLog], int]:
    query = db.session.query(ActivityLog).outerjoin(User, ActivityLog.user_id == User.id)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(
            ActivityLog.description.ilike(like),
            User.username.ilike(like),
            User.full_name.ilike(like),
        ))
    if module:
        query = query.filter(ActivityLog.module == module)
    if action:
        query = query.filter(ActivityLog.action == action)
    if user_id:
        query = query.filter(ActivityLog.user_id == user_id)
    if start:
        query = query.filter(ActivityLog.created_at >= start)
    if end:
        query = query.filter(ActivityLog.created_at < end)

    total = query.count()
    items = (
        query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def get_activity_stats() -> dict:
    total = db.session.query(func.count(ActivityLog.id)).scalar() or 0
    by_module = (
        db.session.query(ActivityLog.module, func.count(ActivityLog.id))
        .group_by(ActivityLog.module)
        .order_by(ActivityLog.module)
        .all()
    )
    by_action = (
        db.session.query(ActivityLog.action, func.count(ActivityLog.id))
        .group_by(ActivityLog.action)
        .order_by(ActivityLog.action)
        .all()
    )
    # Most recently active users, newest first
    recent = (
        db.session.query(User, func.max(ActivityLog.created_at).label("last_seen"))
        .join(ActivityLog, ActivityLog.user_id == User.id)
        .group_by(User.id)
        .order_by(func.max(ActivityLog.created_at).desc())
        .limit(10)
        .all()
    )
    return {
        "total_logs": total,
        "module_stats": [{"module": m, "count": c} for m, c in by_module],
        "action_stats": [{"action": a, "count": c} for a, c in by_action],
        "recent_users": [
            {"id": u.id, "username": u.username, "full_name": u.full_name, "role": u.role}
            for u, _ in recent
        ],
    }


def get_activity_trends(*, days: int = 7, now: datetime | None = None, tz: tzinfo) -> list[dict]:
    """Daily activity counts for the last `days` local days, today included, zero days kept."""
    now = now or utcnow()
    local_today = to_local(now, tz).replace(hour=0, minute=0, second=0, microsecond=0)
    first_day = local_today - timedelta(days=days - 1)
    start = normalize_utc(first_day)
    end = normalize_utc(local_today + timedelta(days=1))

    stamps = (
        db.session.query(ActivityLog.created_at)
        .filter(ActivityLog.created_at >= start, ActivityLog.created_at < end)
        .all()
    )
    counts: dict[str, int] = {}
    for (created_at,) in stamps:
        key = to_local(created_at, tz).strftime("%Y-%m-%d")
        counts[key] = counts.get(key, 0) + 1

    trends = []
    for i in range(days):
        key = (first_day + timedelta(days=i)).strftime("%Y-%m-%d")
        trends.append({"date": key, "activities": counts.get(key, 0)})
    return trends
