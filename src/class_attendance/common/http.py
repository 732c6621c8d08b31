from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from ..core.exceptions import DomainError, UnauthorizedError, ValidationError
from .datetime_utils import parse_optional_date

logger = logging.getLogger(__name__)


def bearer_token() -> str:
    """Token from ``Authorization: Bearer <token>``; raises ``UnauthorizedError`` if absent."""

    header = request.headers.get("Authorization", "")
    parts = header.split(" ", 1)
    token = parts[1].strip() if len(parts) == 2 else ""
    if not token:
        raise UnauthorizedError("Access token required")
    return token


def make_token_required(token_service):
    """Decorator factory: resolve the bearer token and pass the identity as first argument.

    The identity travels explicitly with each call; nothing is kept in globals.
    """

    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            current_user = token_service.resolve(bearer_token())
            return view(current_user, *args, **kwargs)

        return wrapper

    return token_required


def json_body() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict() if request.form else {}


def query_date(name: str):
    try:
        return parse_optional_date(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def query_int(name: str) -> Optional[int]:
    value = request.args.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def ok(payload: Optional[dict] = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    body.update(payload or {})
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if e.status_code >= 500:
            logger.error("Request %s %s failed: %s", request.method, request.path, e.code)
        body = {"success": False, "code": e.code, "message": e.message}
        if e.status_code >= 500 and not app.config.get("DEBUG", False):
            body["message"] = "Server error"
        return jsonify(body), e.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        return jsonify({"success": False, "code": "invalid", "message": "File too large"}), 413
