"""
Request Logging Models
======================
Data models for the per-request logging state and handler errors.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, MutableMapping, Optional, Tuple

from starlette.datastructures import Headers
from starlette.exceptions import HTTPException
from starlette.requests import Request

Attribute = Tuple[str, Any]


class ErrorKind(str, Enum):
    """How a handler error is reflected in the log record."""
    HTTP = "http"                  # Carries its own status code and message
    UNSTRUCTURED = "unstructured"  # Plain exception


@dataclass(frozen=True)
class HandlerError:
    """A terminal error raised (or reported) while handling a request."""
    kind: ErrorKind
    message: str
    exception: BaseException
    status_code: Optional[int] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "HandlerError":
        if isinstance(exc, HTTPException):
            detail = exc.detail
            message = detail if isinstance(detail, str) else str(exc)
            return cls(ErrorKind.HTTP, message, exc, exc.status_code)
        return cls(ErrorKind.UNSTRUCTURED, str(exc) or type(exc).__name__, exc)


@dataclass
class RequestContext:
    """
    Per-request logging state.

    Lives in the ASGI scope's ``state`` dict for the duration of one request
    and is only touched by the task handling that request.
    """
    scope: MutableMapping[str, Any] = field(repr=False)
    request_id: Optional[str] = None
    request_body: Optional[bytes] = None
    status_code: Optional[int] = None
    response_headers: Headers = field(default_factory=Headers)
    response_started: bool = False
    error: Optional[BaseException] = None
    route: str = ""
    custom_attributes: List[Attribute] = field(default_factory=list)

    @property
    def request(self) -> Request:
        return Request(self.scope)

    @property
    def method(self) -> str:
        return self.scope.get("method", "")

    @property
    def path(self) -> str:
        return self.scope.get("path", "")

    @property
    def host(self) -> str:
        return self.request.headers.get("host", "")

    @property
    def handler_error(self) -> Optional[HandlerError]:
        if self.error is None:
            return None
        return HandlerError.from_exception(self.error)
