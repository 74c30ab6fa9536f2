from __future__ import annotations

from functools import wraps
from typing import Any, Dict, Optional

from flask import g, jsonify, request

from ..core.exceptions import AuthenticationError, ValidationError
from .datetime_utils import parse_iso_date


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def query_date(name: str):
    value = request.args.get(name)
    # Accept full ISO timestamps too; only the date part matters.
    return parse_iso_date(value[:10]) if value else None


def respond(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    payload: Dict[str, Any] = {"success": True}
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    return jsonify(payload), status


def make_tenant_required(auth_service):
    """Decorator factory: verifies the bearer access token and stores its claims in `g.tenant`."""

    def tenant_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                raise AuthenticationError("Authorization token required")
            g.tenant = auth_service.authenticate(token)
            return view(*args, **kwargs)

        return wrapper

    return tenant_required
