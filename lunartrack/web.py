"""Minimal request/response types, JSON responses and middleware."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qs

from .errors import APIError, MessageProcessingError, ValidationError
from .models import format_time

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

_HTML_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


@dataclass
class Request:
    """An incoming HTTP request."""

    method: str = "GET"
    path: str = "/"
    query_string: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    path_params: dict[str, str] = field(default_factory=dict)

    def path_value(self, name: str) -> str:
        """The value matched by a named path wildcard, or an empty string."""
        return self.path_params.get(name, "")

    def query_param(self, name: str) -> str:
        """The first value of a query parameter, or an empty string."""
        values = parse_qs(self.query_string, keep_blank_values=True).get(name)
        return values[0] if values else ""


@dataclass
class Response:
    """An outgoing HTTP response."""

    status: int = HTTPStatus.OK
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def json(self) -> Any:
        return json.loads(self.body)


Handler = Callable[[Request], Response]
Middleware = Callable[[Handler], Handler]


def _jsonable(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(obj, datetime):
        return format_time(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"cannot encode {type(obj).__name__} as JSON")


def _encode(data: Any) -> bytes:
    text = json.dumps(data, default=_jsonable, ensure_ascii=False, separators=(",", ":"))
    for char, escape in _HTML_ESCAPES:
        text = text.replace(char, escape)
    return (text + "\n").encode("utf-8")


def _json_response(status: int, payload: Any) -> Response:
    return Response(status=int(status), headers={"Content-Type": JSON_CONTENT_TYPE}, body=_encode(payload))


def write_error_response(err: BaseException) -> Response:
    """Build the JSON error response for an exception."""
    if isinstance(err, APIError):
        return _json_response(err.code, {
            "error": {"code": int(err.code), "message": err.message, "details": err.details},
        })
    if isinstance(err, ValidationError):
        return _json_response(HTTPStatus.BAD_REQUEST, {
            "error": {
                "code": int(HTTPStatus.BAD_REQUEST),
                "message": "Validation failed",
                "details": str(err),
                "field": err.field,
            },
        })
    if isinstance(err, MessageProcessingError):
        return _json_response(HTTPStatus.BAD_REQUEST, {
            "error": {
                "code": int(HTTPStatus.BAD_REQUEST),
                "message": "Message processing failed",
                "details": str(err),
                "rocketId": err.rocket_id,
                "messageNumber": err.message_number,
                "messageType": err.message_type,
            },
        })
    return _json_response(HTTPStatus.INTERNAL_SERVER_ERROR, {
        "error": {
            "code": int(HTTPStatus.INTERNAL_SERVER_ERROR),
            "message": "Internal server error",
            "details": str(err),
        },
    })


def write_success_response(data: Any) -> Response:
    """Build a 200 JSON response; None becomes a plain success status."""
    if data is None:
        return _json_response(HTTPStatus.OK, {"status": "success"})
    return _json_response(HTTPStatus.OK, data)


def error_handler(next_handler: Handler) -> Handler:
    """Turn any unhandled exception into a 500 JSON response."""

    def handle(request: Request) -> Response:
        try:
            return next_handler(request)
        except Exception as exc:
            logger.error("Unhandled error recovered: %s", exc)
            return write_error_response(
                APIError(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error", "")
            )

    return handle


def content_type_json(next_handler: Handler) -> Handler:
    """Give responses a JSON content type unless the handler set another."""

    def handle(request: Request) -> Response:
        response = next_handler(request)
        response.headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
        return response

    return handle


def chain_middleware(handler: Handler, *args: Middleware) -> Handler:
    """Wrap a handler so that the first middleware given runs outermost."""
    for middleware in reversed(args):
        handler = middleware(handler)
    return handler