# Overview: Flask API routes for user administration; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_module, require_permission
from ..permissions import Capability, Module
from ..schemas.auth import RoleChange, UserCreate, UserFilter, UserStatusChange, UserUpdate
from ..services import auth_service
from ..validation import parse_payload, parse_query


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_module(Module.USERS)
def list_users_route():
    filters = parse_query(UserFilter, request.args)
    users = auth_service.list_users(
        search=filters.search,
        role=filters.role,
        include_inactive=filters.include_inactive,
    )
    return jsonify({"items": [u.to_dict() for u in users], "total": len(users)}), 200


@users_bp.post("")
@require_auth
@require_permission(Capability.MANAGE_USERS)
def create_user_route():
    data = parse_payload(UserCreate, request.get_json(silent=True))
    user = auth_service.create_user(actor=g.current_user, **data.model_dump())
    return jsonify(user.to_dict()), 201


@users_bp.get("/<int:user_id>")
@require_auth
@require_module(Module.USERS)
def get_user_route(user_id: int):
    return jsonify(auth_service.get_user(user_id).to_dict()), 200


@users_bp.patch("/<int:user_id>")
@require_auth
@require_permission(Capability.MANAGE_USERS)
def update_user_route(user_id: int):
    data = parse_payload(UserUpdate, request.get_json(silent=True))
    user = auth_service.update_user(user_id, actor=g.current_user, **data.model_dump(exclude_unset=True))
    return jsonify(user.to_dict()), 200


@users_bp.put("/<int:user_id>/role")
@require_auth
@require_permission(Capability.MANAGE_USERS)
def change_role_route(user_id: int):
    """Change a user's role. Requires MANAGE_ROLES (checked in the service)."""
    data = parse_payload(RoleChange, request.get_json(silent=True))
    user = auth_service.change_role(user_id, data.role, actor=g.current_user)
    return jsonify(user.to_dict()), 200


@users_bp.put("/<int:user_id>/status")
@require_auth
@require_permission(Capability.MANAGE_USERS)
def set_status_route(user_id: int):
    data = parse_payload(UserStatusChange, request.get_json(silent=True))
    user = auth_service.set_active(user_id, data.is_active, actor=g.current_user)
    return jsonify(user.to_dict()), 200
