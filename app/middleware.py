"""ASGI middleware: request logging, JSON body parsing and the catch-all error responder."""

import json
import logging
import math
import time

from starlette.datastructures import Headers
from starlette.requests import ClientDisconnect
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.errors import BodyParseError, PayloadTooLargeError, UnsupportedCharsetError

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("app.access")

GENERIC_ERROR_MESSAGE = "Something went wrong!"
JSON_MEDIA_TYPE = "application/json"


def format_dev_line(method: str, url: str, status: int | None, elapsed_ms: float, content_length: str | None) -> str:
    """Render one access line: ``GET /api/movements 200 1.234 ms - 57``."""
    status_text = str(status) if status is not None else "-"
    return f"{method} {url} {status_text} {elapsed_ms:.3f} ms - {content_length or '-'}"


def parse_content_type(headers: Headers) -> tuple[str, dict[str, str]]:
    """Split a Content-Type header into a lowercased media type and its parameters."""
    raw = headers.get("content-type", "")
    media_type, _, params = raw.partition(";")
    options = {}
    for part in params.split(";"):
        key, sep, value = part.strip().partition("=")
        if sep:
            options[key.strip().lower()] = value.strip().strip('"').lower()
    return media_type.strip().lower(), options


def _reject_constant(name: str):
    raise BodyParseError(f"Unexpected token {name!r} in JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise BodyParseError(f"Number {text} is out of range")
    return value


def parse_json_body(body: bytes):
    """Decode a strict JSON body: only objects and arrays are accepted at the top level."""
    if not body:
        return None
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BodyParseError(f"Invalid UTF-8 in JSON body: {e}") from e

    first = text.lstrip(" \t\n\r")[:1]
    if first not in ("{", "["):
        raise BodyParseError(f"Unexpected token {first!r} in JSON at the top level", body=text)
    try:
        return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except json.JSONDecodeError as e:
        raise BodyParseError(f"Invalid JSON body: {e}", body=text) from e


class RequestLoggerMiddleware:
    """Log one development-style line per request once the response is known."""

    def __init__(self, app: ASGIApp, logger: logging.Logger = access_logger):
        self.app = app
        self.logger = logger

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = None
        content_length = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code, content_length
            if message["type"] == "http.response.start":
                status_code = message["status"]
                content_length = Headers(raw=message.get("headers", [])).get("content-length")
            await send(message)

        url = scope["path"]
        if scope.get("query_string"):
            url = f"{url}?{scope['query_string'].decode('latin-1')}"

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.logger.info(format_dev_line(scope["method"], url, status_code, elapsed_ms, content_length))


class JSONBodyParserMiddleware:
    """Parse ``application/json`` bodies into ``request.state.json``.

    The raw body is replayed downstream, so FastAPI body models keep working.
    Requests with any other content type pass through untouched.
    """

    def __init__(self, app: ASGIApp, limit: int = 100 * 1024):
        self.app = app
        self.limit = limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        media_type, options = parse_content_type(headers)
        if media_type != JSON_MEDIA_TYPE:
            await self.app(scope, receive, send)
            return

        charset = options.get("charset", "utf-8")
        if charset not in ("utf-8", "utf8"):
            raise UnsupportedCharsetError(charset)

        declared = headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.limit:
            raise PayloadTooLargeError(int(declared), self.limit)

        body = await self._read_body(receive)
        scope.setdefault("state", {})["json"] = parse_json_body(body)

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _read_body(self, receive: Receive) -> bytes:
        chunks = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                raise ClientDisconnect()
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.limit:
                raise PayloadTooLargeError(received, self.limit)
            chunks.append(chunk)
            more_body = message.get("more_body", False)
        return b"".join(chunks)


class CatchAllErrorMiddleware:
    """Answer any unhandled error with a generic 500 JSON body.

    The response never depends on the error kind. The stack trace, and the
    status hint of body errors, go to the error log.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            logger.exception(
                "Unhandled error on %s %s (status hint %s)",
                scope["method"],
                scope["path"],
                getattr(exc, "status_code", None),
            )
            if response_started:
                raise
            response = JSONResponse({"error": GENERIC_ERROR_MESSAGE}, status_code=500)
            await response(scope, receive, send)
