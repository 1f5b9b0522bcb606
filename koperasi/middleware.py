# Overview: Edge access gate; checks session and module access before any /api route runs.

"""
Access gate

Every request under /api/<segment>/... is mapped to a module and checked
before the view runs. Routes still carry their own decorators; the gate only
stops requests early, it does not replace the per-route checks.
"""

from __future__ import annotations

from flask import Flask, g, request

from .decorators import load_session_context
from .errors import AuthenticationRequired
from .permissions import Module
from .services import permission_service

PUBLIC_SEGMENTS = frozenset({"auth", "health"})

SEGMENT_MODULES = {module: module for module in Module.ALL}


def module_for_path(path: str) -> str | None:
    """'/api/pos/orders' -> 'pos'. None for public or unknown paths."""
    parts = path.strip("/").split("/")
    if len(parts) < 2 or parts[0] != "api":
        return None
    segment = parts[1]
    if segment in PUBLIC_SEGMENTS:
        return None
    return SEGMENT_MODULES.get(segment)


def register_access_gate(app: Flask) -> None:
    @app.before_request
    def reset_request_state():
        # g outlives a request when an app context is already pushed
        g.pop("session_context", None)
        g.pop("current_user", None)

    @app.before_request
    def enforce_module_access():
        if request.method == "OPTIONS":
            return None
        module = module_for_path(request.path)
        if module is None:
            return None

        context = load_session_context()
        if context is None:
            raise AuthenticationRequired(callback_url=request.path)
        permission_service.require_module_access(context.user, module, resource=request.path)
        return None
