# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

SECURITY:
- Unknown usernames and wrong passwords get the same 401 response
- Deactivated accounts are refused only after a correct password
- Sessions live in the signed, HTTP-only session cookie
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import load_session_context, require_auth
from ..permissions import get_allowed_routes, get_role_display_name, get_role_permissions
from ..schemas.auth import LoginRequest
from ..services import auth_service, session_service
from ..validation import parse_payload


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(context) -> dict:
    user = context.user
    return {
        "user": user.to_dict(),
        "session": context.to_dict(),
        "role_display_name": get_role_display_name(user.role),
        "permissions": sorted(get_role_permissions(user.role)),
        "allowed_routes": get_allowed_routes(user.role),
    }


@auth_bp.post("/login")
def login_route():
    """Verify credentials and start a cookie session."""
    data = parse_payload(LoginRequest, request.get_json(silent=True))
    user = auth_service.authenticate(data.username, data.password)
    context = session_service.create_session(user)

    callback_url = request.args.get("callbackUrl") or "/dashboard"
    # Only same-site paths are followed after login
    if not callback_url.startswith("/") or callback_url.startswith("//"):
        callback_url = "/dashboard"

    payload = _session_payload(context)
    payload["redirect"] = callback_url
    return jsonify(payload), 200


@auth_bp.post("/logout")
def logout_route():
    context = load_session_context()
    if context is not None:
        auth_service.record_logout(context.user)
    session_service.destroy_session()
    return jsonify({"success": True, "redirect": "/login"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify(_session_payload(g.session_context)), 200
