# Overview: Service-layer operations for permissions; module access checks with denial auditing.

"""
Permission Service

Role rules live in koperasi.permissions (pure). This module adds the side
effects of enforcement: a warning in the application log and an
ACCESS_DENIED activity entry for every refusal by an authenticated user.
"""

from __future__ import annotations

from flask import current_app

from ..constants import ActivityAction, ActivityModule
from ..errors import Unauthorized
from ..extensions import db
from ..models import User
from ..permissions import can_access_module, has_permission
from .activity_service import log_activity


class PermissionDeniedError(Unauthorized):
    """Raised when a user lacks access to a module or capability."""
    pass


def log_access_denied(user: User | None, *, resource: str, reason: str) -> None:
    current_app.logger.warning(
        "Access denied: user=%s role=%s resource=%s reason=%s",
        user.username if user else None,
        user.role if user else None,
        resource,
        reason,
    )
    if user is None:
        return
    # Denials are checked before any write; drop whatever the request staged
    db.session.rollback()
    log_activity(
        user=user,
        module=ActivityModule.AUTH,
        action=ActivityAction.ACCESS_DENIED,
        description=f"Access denied to {resource} ({reason})",
        commit=True,
    )


def require_module_access(user: User, module: str, *, resource: str | None = None) -> None:
    if can_access_module(user.role, module):
        return
    log_access_denied(user, resource=resource or module, reason=f"module {module}")
    raise PermissionDeniedError(module=module)


def require_capability(user: User, capability: str, *, resource: str | None = None) -> None:
    if has_permission(user.role, capability):
        return
    log_access_denied(user, resource=resource or capability, reason=f"capability {capability}")
    raise PermissionDeniedError(f"Missing permission {capability}")
