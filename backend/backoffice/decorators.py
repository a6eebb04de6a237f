# Overview: Request decorators for API routes; maps service errors to JSON responses.

from functools import wraps

from flask import current_app, jsonify, request

from .extensions import db
from .validation import ConflictError, NotFoundError, ValidationError


def _error_body(message: str, errors: dict | None = None):
    body = {"message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body)


def handle_service_errors(action: str):
    """
    Translate service exceptions into JSON error responses.

    - ValidationError -> 400 (with per-field `errors` when present)
    - NotFoundError   -> 404
    - ConflictError   -> 409
    - anything else   -> 500, logged with traceback, generic message

    The session is rolled back on every failure so a half-applied request
    never leaks into the next one.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                db.session.rollback()
                return _error_body(str(e), e.errors), 400
            except NotFoundError as e:
                db.session.rollback()
                return _error_body(str(e)), 404
            except ConflictError as e:
                db.session.rollback()
                return _error_body(str(e)), 409
            except Exception:
                db.session.rollback()
                current_app.logger.exception("Failed to %s", action)
                return _error_body("Internal server error"), 500
        return decorated_function
    return decorator


def json_body() -> dict:
    """Request JSON as a dict; anything else is a validation error."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data
