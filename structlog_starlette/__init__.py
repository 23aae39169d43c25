"""
structlog-starlette
===================
Structured access logging middleware for Starlette and FastAPI.
"""

__version__ = "0.1.0"

# Config
from structlog_starlette.config import (
    Config,
    ConfigurationError,
    HIDDEN_REQUEST_HEADERS,
    HIDDEN_RESPONSE_HEADERS,
    REQUEST_BODY_MAX_SIZE,
    RESPONSE_BODY_MAX_SIZE,
    REQUEST_ID_HEADER,
)

# Models
from structlog_starlette.models import (
    ErrorKind,
    HandlerError,
    RequestContext,
)

# Body capture
from structlog_starlette.body import BodyWriter, read_request_body

# Request context helpers
from structlog_starlette.context import (
    add_custom_attributes,
    get_request_context,
    get_request_id,
    report_error,
)

# Filters
from structlog_starlette.filters import Filter

# Middleware
from structlog_starlette.middleware import RequestLoggingMiddleware

# Logging setup
from structlog_starlette.log_config import setup_logging

__all__ = [
    # Config
    "Config",
    "ConfigurationError",
    "HIDDEN_REQUEST_HEADERS",
    "HIDDEN_RESPONSE_HEADERS",
    "REQUEST_BODY_MAX_SIZE",
    "RESPONSE_BODY_MAX_SIZE",
    "REQUEST_ID_HEADER",
    # Models
    "ErrorKind",
    "HandlerError",
    "RequestContext",
    # Body capture
    "BodyWriter",
    "read_request_body",
    # Request context helpers
    "add_custom_attributes",
    "get_request_context",
    "get_request_id",
    "report_error",
    # Filters
    "Filter",
    # Middleware
    "RequestLoggingMiddleware",
    # Logging setup
    "setup_logging",
]
