"""
Request Logging Configuration
=============================
Configuration constants, environment variables and the per-middleware Config.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, FrozenSet, Iterable, Tuple, Union

# Body capture caps (bytes)
REQUEST_BODY_MAX_SIZE = int(os.getenv("REQUEST_LOG_REQUEST_BODY_MAX_SIZE", str(64 * 1024)))
RESPONSE_BODY_MAX_SIZE = int(os.getenv("REQUEST_LOG_RESPONSE_BODY_MAX_SIZE", str(64 * 1024)))

# Never logged, whatever the header toggles say
HIDDEN_REQUEST_HEADERS: FrozenSet[str] = frozenset({
    "authorization",
    "cookie",
    "set-cookie",
    "x-auth-token",
    "x-csrf-token",
    "x-xsrf-token",
})
HIDDEN_RESPONSE_HEADERS: FrozenSet[str] = frozenset({
    "set-cookie",
})

REQUEST_ID_HEADER = "X-Request-ID"
FORWARDED_FOR_HEADER = "X-Forwarded-For"
REAL_IP_HEADER = "X-Real-IP"

SUCCESS_MESSAGE = "Success"

LEVEL_NAMES: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

TRUTHY = ("1", "true", "yes", "on")

Level = Union[int, str]


class ConfigurationError(ValueError):
    """Raised when the middleware is given an invalid setting."""


def lower_all(names: Iterable[str]) -> FrozenSet[str]:
    return frozenset(name.lower() for name in names)


def parse_level(value: Level) -> int:
    """Normalise a level name or number to a standard logging level."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid log level: {value!r}")
    if isinstance(value, int):
        if value not in LEVEL_NAMES.values():
            raise ConfigurationError(f"Unsupported log level: {value}")
        return value
    try:
        return LEVEL_NAMES[str(value).strip().lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown log level: {value!r}") from None


@dataclass(frozen=True)
class Config:
    """
    Settings for one RequestLoggingMiddleware instance.

    Shared read-only by every request once the middleware is installed.
    Use ``dataclasses.replace`` or ``with_filters`` to derive a new one.
    """
    default_level: Level = logging.INFO
    client_error_level: Level = logging.WARNING
    server_error_level: Level = logging.ERROR

    with_request_id: bool = True
    generate_request_id: bool = True
    with_request_body: bool = False
    with_request_header: bool = False
    with_response_body: bool = False
    with_response_header: bool = False
    with_span_id: bool = False
    with_trace_id: bool = False

    filters: Tuple[Callable[..., bool], ...] = ()

    request_body_max_size: int = REQUEST_BODY_MAX_SIZE
    response_body_max_size: int = RESPONSE_BODY_MAX_SIZE
    hidden_request_headers: FrozenSet[str] = HIDDEN_REQUEST_HEADERS
    hidden_response_headers: FrozenSet[str] = HIDDEN_RESPONSE_HEADERS

    def __post_init__(self):
        # frozen: normalise through object.__setattr__
        for name in ("default_level", "client_error_level", "server_error_level"):
            object.__setattr__(self, name, parse_level(getattr(self, name)))

        for name in ("request_body_max_size", "response_body_max_size"):
            size = getattr(self, name)
            if isinstance(size, bool) or not isinstance(size, int) or size < 0:
                raise ConfigurationError(f"{name} must be a non-negative integer, got {size!r}")

        filters = tuple(self.filters)
        for predicate in filters:
            if not callable(predicate):
                raise ConfigurationError(f"Filter is not callable: {predicate!r}")
        object.__setattr__(self, "filters", filters)

        object.__setattr__(self, "hidden_request_headers", lower_all(self.hidden_request_headers))
        object.__setattr__(self, "hidden_response_headers", lower_all(self.hidden_response_headers))

    def with_filters(self, *filters: Callable[..., bool]) -> "Config":
        """Return a copy with ``filters`` appended to the existing ones."""
        return replace(self, filters=self.filters + tuple(filters))

    @classmethod
    def from_env(cls, prefix: str = "REQUEST_LOG_", **overrides: Any) -> "Config":
        """
        Build a Config from environment variables.

        Every field except ``filters`` and the hidden header sets can be set
        through ``<prefix><FIELD_NAME>``, e.g. ``REQUEST_LOG_WITH_REQUEST_BODY=true``
        or ``REQUEST_LOG_CLIENT_ERROR_LEVEL=info``. Keyword overrides win.
        """
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name in ("filters", "hidden_request_headers", "hidden_response_headers"):
                continue
            raw = os.getenv(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            if f.name.startswith(("with_", "generate_")):
                values[f.name] = raw.strip().lower() in TRUTHY
            elif f.name.endswith("_max_size"):
                try:
                    values[f.name] = int(raw)
                except ValueError:
                    raise ConfigurationError(f"{prefix}{f.name.upper()} must be an integer") from None
            else:
                values[f.name] = raw
        values.update(overrides)
        return cls(**values)

