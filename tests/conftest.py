"""Shared fixtures and helpers for structlog-starlette tests."""

import pytest
import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.types import ASGIApp, Receive, Scope, Send

from structlog_starlette import Config, RequestLoggingMiddleware


@pytest.fixture
def logs():
    """Every structlog event emitted while the test runs."""
    with structlog.testing.capture_logs() as captured:
        yield captured


def access_records(entries):
    """Only the access log records (module debug events filtered out)."""
    return [e for e in entries if "latency" in e and "status" in e]


def make_app(routes, config=None, **options) -> Starlette:
    return Starlette(
        routes=routes,
        middleware=[
            Middleware(RequestLoggingMiddleware, config=config or Config(), **options),
        ],
    )


class ClientAddress:
    """Pins the socket peer address of every HTTP request."""

    def __init__(self, app: ASGIApp, host: str, port: int = 50000):
        self.app = app
        self.client = (host, port)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            scope["client"] = self.client
        await self.app(scope, receive, send)
