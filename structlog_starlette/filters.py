"""
Access Log Filters
==================
Predicates deciding whether a finished request gets an access log record.

A filter receives the request's RequestContext and returns False to
suppress the record. All configured filters must pass.

Example:
    app.add_middleware(
        RequestLoggingMiddleware,
        filters=[ignore_path("/health", "/metrics"), ignore_method("OPTIONS")],
    )
"""

import re
from typing import Callable, Union

from .models import RequestContext

Filter = Callable[[RequestContext], bool]


def accept(predicate: Filter) -> Filter:
    return predicate


def ignore(predicate: Filter) -> Filter:
    return lambda context: not predicate(context)


# =============================================================================
# Method
# =============================================================================

def accept_method(*methods: str) -> Filter:
    wanted = {m.upper() for m in methods}
    return lambda context: context.method.upper() in wanted


def ignore_method(*methods: str) -> Filter:
    return ignore(accept_method(*methods))


# =============================================================================
# Status
# =============================================================================

def _status(context: RequestContext) -> int:
    return context.status_code or 0


def accept_status(*statuses: int) -> Filter:
    wanted = set(statuses)
    return lambda context: _status(context) in wanted


def ignore_status(*statuses: int) -> Filter:
    return ignore(accept_status(*statuses))


def accept_status_greater_than(status: int) -> Filter:
    return lambda context: _status(context) > status


def accept_status_greater_than_or_equal(status: int) -> Filter:
    return lambda context: _status(context) >= status


def accept_status_less_than(status: int) -> Filter:
    return lambda context: _status(context) < status


def accept_status_less_than_or_equal(status: int) -> Filter:
    return lambda context: _status(context) <= status


def ignore_status_greater_than(status: int) -> Filter:
    return ignore(accept_status_greater_than(status))


def ignore_status_greater_than_or_equal(status: int) -> Filter:
    return ignore(accept_status_greater_than_or_equal(status))


def ignore_status_less_than(status: int) -> Filter:
    return ignore(accept_status_less_than(status))


def ignore_status_less_than_or_equal(status: int) -> Filter:
    return ignore(accept_status_less_than_or_equal(status))


# =============================================================================
# Path
# =============================================================================

def accept_path(*paths: str) -> Filter:
    wanted = set(paths)
    return lambda context: context.path in wanted


def ignore_path(*paths: str) -> Filter:
    return ignore(accept_path(*paths))


def accept_path_contains(*parts: str) -> Filter:
    return lambda context: any(part in context.path for part in parts)


def ignore_path_contains(*parts: str) -> Filter:
    return ignore(accept_path_contains(*parts))


def accept_path_prefix(*prefixes: str) -> Filter:
    return lambda context: context.path.startswith(prefixes)


def ignore_path_prefix(*prefixes: str) -> Filter:
    return ignore(accept_path_prefix(*prefixes))


def accept_path_suffix(*suffixes: str) -> Filter:
    return lambda context: context.path.endswith(suffixes)


def ignore_path_suffix(*suffixes: str) -> Filter:
    return ignore(accept_path_suffix(*suffixes))


def accept_path_match(*patterns: Union[str, re.Pattern]) -> Filter:
    """Accept paths matching any of the regular expressions (``re.search``)."""
    compiled = [re.compile(p) for p in patterns]
    return lambda context: any(p.search(context.path) for p in compiled)


def ignore_path_match(*patterns: Union[str, re.Pattern]) -> Filter:
    return ignore(accept_path_match(*patterns))


# =============================================================================
# Host
# =============================================================================

def accept_host(*hosts: str) -> Filter:
    wanted = {h.lower() for h in hosts}
    return lambda context: context.host.lower() in wanted


def ignore_host(*hosts: str) -> Filter:
    return ignore(accept_host(*hosts))


def accept_host_contains(*parts: str) -> Filter:
    lowered = [p.lower() for p in parts]
    return lambda context: any(part in context.host.lower() for part in lowered)


def ignore_host_contains(*parts: str) -> Filter:
    return ignore(accept_host_contains(*parts))
