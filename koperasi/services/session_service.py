# Overview: Service-layer operations for session; cookie-backed login sessions.

"""
Session Management Service

Sessions live in Flask's signed, HTTP-only session cookie. The cookie holds
a snapshot of the user for display, but every protected request reloads the
user from the database: a role change or deactivation takes effect on the
next request, not at cookie expiry.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app, session

from ..extensions import db
from ..models import User
from ..time_utils import parse_iso_datetime, to_utc_z, utcnow



@dataclass
class SessionContext:
    """Validated session: the live user row plus the cookie's expiry."""
    user: User
    expires_at: datetime

    @property
    def role(self) -> str:
        return self.user.role

    def to_dict(self) -> dict:
        return {
            "userId": self.user.id,
            "username": self.user.username,
            "email": self.user.email,
            "fullName": self.user.full_name,
            "role": self.user.role,
            "isActive": self.user.is_active,
            "expiresAt": to_utc_z(self.expires_at),
        }


def _lifetime() -> timedelta:
    return current_app.permanent_session_lifetime


def create_session(user: User) -> SessionContext:
    expires_at = utcnow() + _lifetime()
    session.clear()
    session.permanent = True
    context = SessionContext(user=user, expires_at=expires_at)
    session.update(context.to_dict())
    return context


def validate_session() -> SessionContext | None:
    """
    Return the SessionContext for the current request, or None when there
    is no session, it has expired, or the user is gone or deactivated.
    Invalid sessions are cleared.
    """
    user_id = session.get("userId")
    if not user_id:
        return None

    expires_at = parse_iso_datetime(session.get("expiresAt"))
    if expires_at is None or expires_at <= utcnow():
        session.clear()
        return None

    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        session.clear()
        return None

    return SessionContext(user=user, expires_at=expires_at)


def destroy_session() -> None:
    session.clear()
