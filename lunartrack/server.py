"""HTTP routing and the standalone server for the rocket tracking API."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import unquote

from .api import ApiHandler
from .web import Handler, Request, Response, chain_middleware, content_type_json, error_handler

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8088
CONNECTION_TIMEOUT = 120

_TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


def _split_path(path: str) -> list[str]:
    return path.split("/")[1:] if path.startswith("/") else path.split("/")


def _is_wildcard(segment: str) -> bool:
    return len(segment) > 2 and segment.startswith("{") and segment.endswith("}")


@dataclass(frozen=True)
class _Route:
    method: str
    segments: tuple[str, ...]
    handler: Handler

    def match(self, parts: list[str]) -> dict[str, str] | None:
        if len(parts) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for segment, part in zip(self.segments, parts):
            if _is_wildcard(segment):
                if not part:
                    return None
                params[segment[1:-1]] = unquote(part)
            elif segment != unquote(part):
                return None
        return params

    @property
    def specificity(self) -> tuple[bool, ...]:
        return tuple(_is_wildcard(segment) for segment in self.segments)


def _text_response(status: HTTPStatus, text: str, headers: dict[str, str] | None = None) -> Response:
    all_headers = {"Content-Type": _TEXT_CONTENT_TYPE, "X-Content-Type-Options": "nosniff"}
    all_headers.update(headers or {})
    return Response(status=int(status), headers=all_headers, body=(text + "\n").encode("utf-8"))


class Router:
    """Dispatches requests by method and path pattern; "{name}" matches one path segment."""

    def __init__(self) -> None:
        self._routes: list[_Route] = []

    def add(self, method: str, pattern: str, handler: Handler) -> None:
        """Register a handler for a method and a path pattern such as "/rockets/{id}"."""
        if not pattern.startswith("/"):
            raise ValueError(f"pattern must start with '/': {pattern!r}")
        segments = tuple(_split_path(pattern))
        for existing in self._routes:
            if existing.method == method.upper() and existing.segments == segments:
                raise ValueError(f"pattern already registered: {method} {pattern}")
        self._routes.append(_Route(method.upper(), segments, handler))

    def __call__(self, request: Request) -> Response:
        parts = _split_path(request.path or "/")
        matched = [(route, params) for route in self._routes
                   if (params := route.match(parts)) is not None]
        if not matched:
            return _text_response(HTTPStatus.NOT_FOUND, "404 page not found")

        method = request.method.upper()
        accepted = {method, "GET"} if method == "HEAD" else {method}
        usable = [(route, params) for route, params in matched if route.method in accepted]
        if not usable:
            allowed = {route.method for route, _ in matched}
            if "GET" in allowed:
                allowed.add("HEAD")
            return _text_response(
                HTTPStatus.METHOD_NOT_ALLOWED,
                "Method Not Allowed",
                {"Allow": ", ".join(sorted(allowed))},
            )

        route, params = min(usable, key=lambda pair: pair[0].specificity)
        request.path_params = params
        return route.handler(request)


def build_router(api_handler: ApiHandler) -> Router:
    """A router with every API route bound to the given handler."""
    router = Router()
    router.add("POST", "/messages", api_handler.handle_message)
    router.add("GET", "/rockets", api_handler.handle_get_rockets)
    router.add("GET", "/rockets/{id}", api_handler.handle_get_rocket)
    router.add("GET", "/debug/rockets", api_handler.handle_debug_all)
    router.add("GET", "/debug/rockets/{id}", api_handler.handle_debug_rocket)
    return router


def create_app(api_handler: ApiHandler | None = None) -> Handler:
    """The complete application: routes wrapped in error recovery and JSON content type."""
    handler = api_handler if api_handler is not None else ApiHandler()
    return chain_middleware(build_router(handler), error_handler, content_type_json)


class _RequestHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"
    timeout = CONNECTION_TIMEOUT
    server: _AppServer

    def _dispatch(self) -> None:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            self.send_error(HTTPStatus.BAD_REQUEST, "Invalid Content-Length")
            return
        body = self.rfile.read(length) if length > 0 else b""
        path, _, query = self.path.partition("?")
        request = Request(
            method=self.command,
            path=path,
            query_string=query,
            headers=dict(self.headers.items()),
            body=body,
        )
        response = self.server.app(request)
        self.send_response(response.status)
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(response.body)

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = do_HEAD = do_OPTIONS = _dispatch

    def log_message(self, format: str, *args: object) -> None:
        logger.info("%s - %s", self.address_string(), format % args)


class _AppServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], app: Handler) -> None:
        self.app = app
        super().__init__(address, _RequestHandler)


def _create_server(app: Handler, host: str = "", port: int = DEFAULT_PORT) -> _AppServer:
    return _AppServer((host, port), app)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the rocket tracking API server until interrupted."""
    parser = argparse.ArgumentParser(description="Lunar Rocket Tracking API server")
    parser.add_argument("--host", default="", help="address to bind (default: all interfaces)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    server = _create_server(create_app(), args.host, args.port)
    logger.info("Starting Lunar Rocket Tracking API on %s:%d", args.host, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
    return 0