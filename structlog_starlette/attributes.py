"""
Access Log Attributes
=====================
Builds the ordered field list of one access log record.
"""

from datetime import datetime
from typing import Any, Dict, FrozenSet, List, MutableMapping, Optional, Tuple

import structlog
from opentelemetry import trace
from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.routing import Match

from .body import BodyWriter
from .config import FORWARDED_FOR_HEADER, REAL_IP_HEADER, REQUEST_ID_HEADER, Config
from .models import Attribute, RequestContext

logger = structlog.get_logger(__name__)


def parse_forwarded_for(value: str) -> List[str]:
    """Split an X-Forwarded-For chain, e.g. ``"a, b , c"`` -> ``["a", "b", "c"]``."""
    return [ip.strip() for ip in value.split(",")]


def real_ip(request: Request) -> str:
    """Best-effort client IP: proxy headers first, then the socket peer."""
    forwarded = request.headers.get(FORWARDED_FOR_HEADER, "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real = request.headers.get(REAL_IP_HEADER, "")
    if real:
        return real.strip()
    if request.client:
        return request.client.host
    return ""


def route_pattern(scope: MutableMapping[str, Any]) -> str:
    """Path template of the route that handled the request, or ``""``."""
    route = scope.get("route")
    path = getattr(route, "path", None)
    if isinstance(path, str):
        return path

    router = scope.get("router")
    for candidate in getattr(router, "routes", ()):
        match, _ = candidate.matches(scope)
        if match == Match.FULL:
            return getattr(candidate, "path", "")
    return ""


def trace_ids() -> Tuple[str, str]:
    """Trace and span IDs of the active OpenTelemetry span, as hex."""
    span_context = trace.get_current_span().get_span_context()
    return (
        trace.format_trace_id(span_context.trace_id),
        trace.format_span_id(span_context.span_id),
    )


def header_attributes(
    prefix: str,
    headers: Headers,
    hidden: FrozenSet[str],
) -> List[Attribute]:
    """One ``<prefix>.<name>`` field per visible header, values as a list."""
    grouped: Dict[str, List[str]] = {}
    for name, value in headers.items():
        name = name.lower()
        if name in hidden:
            continue
        grouped.setdefault(name, []).append(value)
    return [(f"{prefix}.{name}", values) for name, values in grouped.items()]


def collect_attributes(
    context: RequestContext,
    config: Config,
    status: int,
    end: datetime,
    latency: float,
    body_writer: Optional[BodyWriter] = None,
) -> List[Attribute]:
    """
    Assemble the access log fields in their fixed order.

    Core fields first (time, latency, method, path, route, status, ip,
    user-agent), then the optional ones, then custom attributes.
    """
    request = context.request

    attributes: List[Attribute] = [
        ("time", end.isoformat()),
        ("latency", latency),
        ("method", context.method),
        ("path", context.path),
        ("route", context.route),
        ("status", status),
        ("ip", real_ip(request)),
        ("user-agent", request.headers.get("user-agent", "")),
    ]

    forwarded_for = request.headers.get(FORWARDED_FOR_HEADER, "")
    if forwarded_for:
        attributes.append(("x-forwarded-for", parse_forwarded_for(forwarded_for)))

    if config.with_request_id:
        request_id = (
            request.headers.get(REQUEST_ID_HEADER)
            or context.response_headers.get(REQUEST_ID_HEADER)
            or context.request_id
        )
        if request_id:
            attributes.append(("request-id", request_id))

    if config.with_trace_id or config.with_span_id:
        try:
            trace_id, span_id = trace_ids()
        except Exception as e:
            logger.warning("trace_context_unavailable", error=str(e))
        else:
            if config.with_trace_id:
                attributes.append(("trace-id", trace_id))
            if config.with_span_id:
                attributes.append(("span-id", span_id))

    if config.with_request_body and context.request_body is not None:
        attributes.append(("request.body", context.request_body.decode("utf-8", errors="replace")))
    if config.with_request_header:
        attributes.extend(
            header_attributes("request.header", request.headers, config.hidden_request_headers)
        )

    if config.with_response_body and body_writer is not None:
        attributes.append(("response.body", body_writer.text))
    if config.with_response_header:
        attributes.extend(
            header_attributes("response.header", context.response_headers, config.hidden_response_headers)
        )

    attributes.extend(context.custom_attributes)
    return attributes
