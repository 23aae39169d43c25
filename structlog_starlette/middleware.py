"""
Request Logging Middleware
==========================
Emits one structured access log record per HTTP request.

Usage (FastAPI / Starlette):
    import structlog
    from structlog_starlette import Config, RequestLoggingMiddleware

    app.add_middleware(
        RequestLoggingMiddleware,
        logger=structlog.get_logger("http"),
        config=Config(with_request_body=True, with_response_header=True),
    )

Level selection:
    - status >= 500: config.server_error_level, message = error text or reason phrase
    - status >= 400: config.client_error_level, message = error text or reason phrase
    - otherwise:     config.default_level, message = "Success"
"""

import time
import uuid
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Optional, Sequence, Tuple

import structlog
from starlette.datastructures import Headers, MutableHeaders
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .attributes import collect_attributes, route_pattern
from .body import BodyWriter, read_request_body
from .config import REQUEST_ID_HEADER, SUCCESS_MESSAGE, Config
from .context import get_request_context
from .filters import Filter
from .models import ErrorKind, RequestContext

logger = structlog.get_logger(__name__)

DEFAULT_LOGGER_NAME = "http"


def status_text(status: int) -> str:
    """Standard reason phrase, ``""`` for unknown codes."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def select_level(config: Config, status: int, error_message: Optional[str]) -> Tuple[int, str]:
    """Pick the log level and message for a finished request."""
    if status >= 500:
        return config.server_error_level, error_message or status_text(status)
    if status >= 400:
        return config.client_error_level, error_message or status_text(status)
    return config.default_level, SUCCESS_MESSAGE


def http_exception_response(exc: HTTPException) -> Response:
    """Render an HTTPException like Starlette's default handler does."""
    headers = getattr(exc, "headers", None)
    if exc.status_code in (204, 304):
        return Response(status_code=exc.status_code, headers=headers)
    if isinstance(exc.detail, str):
        return PlainTextResponse(exc.detail, status_code=exc.status_code, headers=headers)
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=headers)


class RequestLoggingMiddleware:
    """
    ASGI middleware logging every HTTP request through structlog.

    Captures timing, status, client identity and, when enabled, request
    ID, trace/span IDs, bodies and headers. Sensitive headers are never
    logged. Non-HTTP scopes are passed through untouched. Cancelled
    requests are logged too, before the cancellation propagates.

    An HTTPException raised by a route is rendered by Starlette's own
    exception handling before it reaches this middleware, so the record
    carries the reason phrase ("Not Found") rather than the detail. To log
    the detail, call report_error() from an exception handler:

        async def http_error(request, exc):
            report_error(request, exc)
            return PlainTextResponse(exc.detail, status_code=exc.status_code)
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: Any = None,
        config: Optional[Config] = None,
        filters: Optional[Sequence[Filter]] = None,
    ):
        self.app = app
        self.logger = logger if logger is not None else structlog.get_logger(DEFAULT_LOGGER_NAME)
        config = config or Config()
        if filters:
            config = config.with_filters(*filters)
        self.config = config

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        config = self.config
        start = time.perf_counter()
        context = get_request_context(scope)

        if config.with_request_id:
            context.request_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or None
            if context.request_id is None and config.generate_request_id:
                context.request_id = str(uuid.uuid4())

        if config.with_request_body:
            context.request_body, receive = await read_request_body(
                receive, config.request_body_max_size
            )

        body_writer = None
        if config.with_response_body:
            body_writer = BodyWriter(send, config.response_body_max_size)
            send = body_writer

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                headers = MutableHeaders(scope=message)
                if context.request_id and REQUEST_ID_HEADER not in headers:
                    headers.append(REQUEST_ID_HEADER, context.request_id)
                context.status_code = message["status"]
                context.response_headers = Headers(raw=list(headers.raw))
                context.response_started = True
            await send(message)

        try:
            try:
                await self.app(scope, receive, send_wrapper)
            except BaseException as exc:
                context.error = exc
                if context.response_started or not isinstance(exc, HTTPException):
                    raise
                await http_exception_response(exc)(scope, receive, send_wrapper)
        finally:
            self._log(context, start, body_writer)

    def _log(
        self,
        context: RequestContext,
        start: float,
        body_writer: Optional[BodyWriter],
    ) -> None:
        try:
            self._emit(context, start, body_writer)
        except Exception:
            logger.exception("request_log_failed", method=context.method, path=context.path)

    def _emit(
        self,
        context: RequestContext,
        start: float,
        body_writer: Optional[BodyWriter],
    ) -> None:
        config = self.config
        latency = time.perf_counter() - start
        end = datetime.now(timezone.utc)

        try:
            context.route = route_pattern(context.scope)
        except Exception as e:
            logger.debug("route_pattern_unavailable", error=str(e), path=context.path)

        # No response started: the server error layer answers with a 500
        status = context.status_code if context.status_code is not None else 500
        error_message = None
        handler_error = context.handler_error
        if handler_error is not None:
            if handler_error.kind is ErrorKind.HTTP:
                status = handler_error.status_code
            error_message = handler_error.message
        context.status_code = status

        attributes = collect_attributes(context, config, status, end, latency, body_writer)

        for predicate in config.filters:
            if not predicate(context):
                return

        level, message = select_level(config, status, error_message)
        # Fields are bound, not passed to log(): custom keys may be named event or level
        self.logger.bind(**dict(attributes)).log(level, message)
