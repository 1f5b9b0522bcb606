# Overview: Service-layer operations for auth; password hashing, login and user administration.

"""
Authentication Service

WHY: Every action must be attributable. Uses bcrypt for password hashing;
accounts are deactivated rather than deleted.

SECURITY NOTES:
- Cost factor comes from BCRYPT_LOG_ROUNDS (12 in production)
- Unknown usernames and wrong passwords produce the same error, and an
  unknown username still pays for one bcrypt check
- A deactivated account is only reported after the password matched
"""

from __future__ import annotations

import bcrypt
from flask import current_app
from sqlalchemy import or_

from ..constants import ActivityAction, ActivityModule, Role
from ..errors import AccountDeactivated, ConflictError, InvalidCredentials, NotFound, Unauthorized, ValidationError
from ..extensions import db
from ..models import User
from ..permissions import Capability, has_permission
from ..time_utils import utcnow
from .activity_service import log_activity


MIN_PASSWORD_LENGTH = 6

# Compared against when the username does not exist
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=4)).decode("utf-8")


def _log_rounds() -> int:
    try:
        return int(current_app.config.get("BCRYPT_LOG_ROUNDS", 12))
    except RuntimeError:
        return 12


def hash_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", field="password"
        )
    salt = bcrypt.gensalt(rounds=_log_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check; malformed hashes count as a mismatch."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def authenticate(username: str, password: str) -> User:
    """
    Verify credentials and record the login.

    Raises:
        InvalidCredentials: unknown username or wrong password (same message)
        AccountDeactivated: correct password on an inactive account
    """
    user = db.session.query(User).filter_by(username=username.strip()).first()
    if user is None:
        verify_password(password, _DUMMY_HASH)
        raise InvalidCredentials()

    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()

    if not user.is_active:
        raise AccountDeactivated()

    user.last_login_at = utcnow()
    log_activity(
        user=user,
        module=ActivityModule.AUTH,
        action=ActivityAction.LOGIN,
        description=f"User {user.username} logged in",
    )
    db.session.commit()
    current_app.logger.info("User %s logged in", user.username)
    return user


def record_logout(user: User) -> None:
    log_activity(
        user=user,
        module=ActivityModule.AUTH,
        action=ActivityAction.LOGOUT,
        description=f"User {user.username} logged out",
        commit=True,
    )


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def list_users(*, search: str | None = None, role: str | None = None, include_inactive: bool = True) -> list[User]:
    query = db.session.query(User)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(User.username.ilike(like), User.full_name.ilike(like), User.email.ilike(like)))
    if role:
        query = query.filter(User.role == role)
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))
    return query.order_by(User.username).all()


def _ensure_unique(username: str | None, email: str | None, exclude_id: int | None = None) -> None:
    if username:
        query = db.session.query(User).filter(User.username == username)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError(f"Username '{username}' already exists")
    if email:
        query = db.session.query(User).filter(User.email == email)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError(f"Email '{email}' already exists")


def _ensure_can_assign(actor: User | None, role: str) -> None:
    # Only role managers may hand out DEVELOPER
    if role == Role.DEVELOPER and actor is not None and not has_permission(actor.role, Capability.MANAGE_ROLES):
        raise Unauthorized("Only developers can create developer accounts")


def create_user(
    *,
    username: str,
    password: str,
    full_name: str,
    email: str | None = None,
    phone: str | None = None,
    role: str = Role.STAFF,
    actor: User | None = None,
) -> User:
    if role not in Role.ALL:
        raise ValidationError(f"Unknown role {role}", field="role")
    _ensure_can_assign(actor, role)
    _ensure_unique(username, email)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        phone=phone,
        role=role,
        is_active=True,
    )
    db.session.add(user)
    db.session.flush()

    log_activity(
        user=actor,
        module=ActivityModule.USER,
        action=ActivityAction.CREATE,
        description=f"Created user {username} ({role})",
    )
    db.session.commit()
    return user


def update_user(user_id: int, *, actor: User | None = None, **changes) -> User:
    user = get_user(user_id)
    _ensure_unique(None, changes.get("email"), exclude_id=user.id)

    password = changes.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for field in ("full_name", "email", "phone"):
        if field in changes:
            setattr(user, field, changes[field])

    log_activity(
        user=actor,
        module=ActivityModule.USER,
        action=ActivityAction.UPDATE,
        description=f"Updated user {user.username}",
    )
    db.session.commit()
    return user


def change_role(user_id: int, role: str, *, actor: User) -> User:
    if not has_permission(actor.role, Capability.MANAGE_ROLES):
        raise Unauthorized("You are not allowed to change roles")
    if role not in Role.ALL:
        raise ValidationError(f"Unknown role {role}", field="role")
    user = get_user(user_id)
    old_role = user.role
    user.role = role
    log_activity(
        user=actor,
        module=ActivityModule.USER,
        action=ActivityAction.UPDATE,
        description=f"Changed role of {user.username} from {old_role} to {role}",
    )
    db.session.commit()
    return user


def set_active(user_id: int, is_active: bool, *, actor: User | None) -> User:
    user = get_user(user_id)
    if actor is not None and user.id == actor.id and not is_active:
        raise ValidationError("You cannot deactivate your own account", field="is_active")
    user.is_active = is_active
    log_activity(
        user=actor,
        module=ActivityModule.USER,
        action=ActivityAction.UPDATE,
        description=f"{'Activated' if is_active else 'Deactivated'} user {user.username}",
    )
    db.session.commit()
    return user
