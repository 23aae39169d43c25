"""
Request Context Helpers
=======================
Functions application code uses to enrich the access log of the current request.

Usage:
    from structlog_starlette import add_custom_attributes, get_request_id

    async def show_order(request):
        add_custom_attributes(request, order_id=request.path_params["id"])
        ...
        return JSONResponse({"request_id": get_request_id(request)})
"""

from typing import Any, MutableMapping, Optional, Union

from starlette.requests import HTTPConnection

from .models import RequestContext

CONTEXT_KEY = "structlog_starlette.context"

ContextSource = Union[HTTPConnection, MutableMapping[str, Any]]


def get_request_context(source: ContextSource) -> RequestContext:
    """
    Return the logging context of a request, creating it on first use.

    Args:
        source: A Starlette request/connection or a raw ASGI scope
    """
    scope = source.scope if isinstance(source, HTTPConnection) else source
    state = scope.setdefault("state", {})
    context = state.get(CONTEXT_KEY)
    if context is None:
        context = RequestContext(scope=scope)
        state[CONTEXT_KEY] = context
    return context


def add_custom_attributes(source: ContextSource, **attributes: Any) -> None:
    """Attach extra fields to the access log record of this request."""
    get_request_context(source).custom_attributes.extend(attributes.items())


def get_request_id(source: ContextSource) -> Optional[str]:
    """Request ID adopted from the client or generated by the middleware."""
    return get_request_context(source).request_id


def report_error(source: ContextSource, exc: BaseException) -> None:
    """
    Register ``exc`` as the terminal error of this request.

    For exception handlers that turn an exception into a response, so the
    middleware never sees it raised.
    """
    get_request_context(source).error = exc
