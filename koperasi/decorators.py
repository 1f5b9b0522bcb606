# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import g, request

from .errors import AuthenticationRequired
from .services import permission_service, session_service


def load_session_context():
    """
    Resolve the session for this request once and cache it on g.

    Sets g.current_user and g.session_context when the session is valid.
    """
    if "session_context" not in g:
        context = session_service.validate_session()
        g.session_context = context
        g.current_user = context.user if context else None
    return g.session_context


def require_auth(f):
    """
    Require a valid, unexpired session for an active user.

    SECURITY: Answers 401 with a login redirect carrying the requested path
    when there is no session, the cookie expired, or the account was
    deactivated since login.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if load_session_context() is None:
            raise AuthenticationRequired(callback_url=request.path)
        return f(*args, **kwargs)

    return decorated_function


def require_module(module: str):
    """Require that the current user's role may open `module`. Use after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if load_session_context() is None:
                raise AuthenticationRequired(callback_url=request.path)
            permission_service.require_module_access(g.current_user, module, resource=request.path)
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def require_permission(capability: str):
    """Require a specific capability. Use after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if load_session_context() is None:
                raise AuthenticationRequired(callback_url=request.path)
            permission_service.require_capability(g.current_user, capability, resource=request.path)
            return f(*args, **kwargs)

        return decorated_function

    return decorator
