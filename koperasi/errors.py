# Overview: Domain error hierarchy and the Flask handlers that render it as JSON.

from __future__ import annotations

from typing import Any

from flask import jsonify
from werkzeug.exceptions import HTTPException


UNAUTHORIZED_REDIRECT = "/dashboard?error=unauthorized"


class KoperasiError(Exception):
    """Base for business errors; carries the HTTP status it maps to."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None, *, status_code: int | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload = {"error": self.message}
        payload.update(self.details)
        return payload


class ValidationError(KoperasiError, ValueError):
    """400-level input problem. `errors` is a list of {field, message}."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, *, errors: list[dict[str, str]] | None = None, field: str | None = None):
        if errors is None and field is not None:
            errors = [{"field": field, "message": message or self.default_message}]
        self.errors = errors or []
        details = {"errors": self.errors} if self.errors else {}
        super().__init__(message, details=details)


class InvalidStateError(KoperasiError):
    status_code = 400
    default_message = "Operation not allowed in the current state"


class InsufficientStock(KoperasiError):
    status_code = 400

    def __init__(self, *, product_id: int | None, product_name: str, requested: int, available: int):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name}. Available: {available}, requested: {requested}",
            details={
                "product_id": product_id,
                "product_name": product_name,
                "requested": requested,
                "available": available,
            },
        )


class InsufficientPayment(KoperasiError):
    status_code = 400

    def __init__(self, *, total: int, payment_amount: int):
        self.total = total
        self.payment_amount = payment_amount
        super().__init__(
            "Insufficient payment amount",
            details={"total": total, "payment_amount": payment_amount, "shortfall": total - payment_amount},
        )


class AuthenticationRequired(KoperasiError):
    status_code = 401
    default_message = "Authentication required"

    def __init__(self, message: str | None = None, *, callback_url: str = "/"):
        super().__init__(message, details={"redirect": f"/login?callbackUrl={callback_url}"})


class InvalidCredentials(KoperasiError):
    status_code = 401
    default_message = "Invalid username or password"


class Unauthorized(KoperasiError):
    status_code = 403
    default_message = "You do not have access to this resource"

    def __init__(self, message: str | None = None, *, module: str | None = None):
        details = {"redirect": UNAUTHORIZED_REDIRECT}
        if module:
            details["module"] = module
        super().__init__(message, details=details)


class AccountDeactivated(KoperasiError):
    status_code = 403
    default_message = "Account is deactivated. Please contact administrator."


class NotFound(KoperasiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(KoperasiError):
    """409-level business rule conflict (e.g., duplicate SKU)."""

    status_code = 409
    default_message = "Conflict"


class ReferentialIntegrityViolation(ConflictError):
    default_message = "Record is still referenced by other records"


class OrderCreationFailed(ConflictError):
    default_message = "Failed to create order, please try again"


def register_error_handlers(app):
    from .extensions import db

    @app.errorhandler(KoperasiError)
    def handle_koperasi_error(e: KoperasiError):
        # A failed operation leaves nothing staged
        db.session.rollback()
        if e.status_code >= 500:
            app.logger.error("Request failed: %s", e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_exception(e: Exception):
        app.logger.exception("Unhandled exception occurred")
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500
