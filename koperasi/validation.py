# Overview: Request parsing helpers that turn pydantic errors into ValidationError.

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError


T = TypeVar("T")

# Maximum single amount: Rp 999.999.999.999
MAX_AMOUNT = 999_999_999_999


def _field_name(loc: tuple) -> str:
    # Union members add their tag to the location; drop it from the field path
    parts = [str(p) for p in loc if not (isinstance(p, str) and p.isupper())]
    return ".".join(parts) or "body"


def format_errors(exc: PydanticValidationError) -> list[dict[str, str]]:
    errors = []
    for err in exc.errors():
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": _field_name(tuple(err.get("loc", ()))), "message": message})
    return errors


def parse_payload(schema: type[T] | TypeAdapter, payload: Any) -> T:
    """
    Validate `payload` against a pydantic model (or TypeAdapter).

    Raises ValidationError carrying a [{field, message}] list so the error
    handler can render every problem at once.
    """
    if payload is None:
        payload = {}
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(payload)
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            return schema.model_validate(payload)
        return TypeAdapter(schema).validate_python(payload)
    except PydanticValidationError as exc:
        raise ValidationError("Validation failed", errors=format_errors(exc))


def parse_query(schema: type[T], args) -> T:
    """Validate query-string args (a werkzeug MultiDict or dict); blank values are dropped."""
    data = {k: v for k, v in dict(args).items() if v not in (None, "")}
    return parse_payload(schema, data)
