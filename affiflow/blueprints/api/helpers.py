"""Response envelope and request parsing shared by the API views."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request

from affiflow.errors import ValidationError


def ok(data: Any = None, message: str | None = None, status: int = 200):
    payload: dict[str, Any] = {'success': True}
    if message:
        payload['message'] = message
    if data is not None:
        payload['data'] = data
    return jsonify(payload), status


def json_body() -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Invalid JSON body")
    return data


def query_int(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw in (None, ''):
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError.for_field(name, f"{name} must be an integer") from exc


def query_bool(name: str) -> bool | None:
    raw = request.args.get(name)
    if raw is None or raw == '':
        return None
    return raw.lower() == 'true'


__all__ = ['ok', 'json_body', 'query_int', 'query_bool']
