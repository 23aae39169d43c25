"""
Body Capture
============
Bounded copies of request and response bodies for the access log.

Neither helper changes what the client or the downstream app sees: the
response writer forwards every message untouched and the request reader
replays every message it consumed.
"""

from collections import deque
from typing import Deque, List, Optional, Tuple

import structlog
from starlette.types import Message, Receive, Send

logger = structlog.get_logger(__name__)


class BodyWriter:
    """
    ASGI ``send`` decorator mirroring response body bytes into a buffer.

    The buffer never grows past ``max_size``; bytes beyond the cap are
    dropped from the copy only, never from the real output.
    """

    def __init__(self, send: Send, max_size: int):
        self._send = send
        self.max_size = max_size
        self._body = bytearray()

    async def __call__(self, message: Message) -> None:
        result = await self._send(message)
        if message["type"] == "http.response.body":
            self.write(message.get("body", b""))
        return result

    def write(self, chunk: bytes) -> int:
        """Copy as much of ``chunk`` as still fits. Returns the bytes kept."""
        remaining = self.max_size - len(self._body)
        if remaining <= 0 or not chunk:
            return 0
        kept = chunk[:remaining]
        self._body.extend(kept)
        return len(kept)

    def __len__(self) -> int:
        return len(self._body)

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    @property
    def text(self) -> str:
        return self._body.decode("utf-8", errors="replace")


class ReplayReceive:
    """Yields already-consumed messages before falling back to ``receive``."""

    def __init__(self, messages: List[Message], receive: Receive):
        self._messages: Deque[Message] = deque(messages)
        self._receive = receive

    async def __call__(self) -> Message:
        if self._messages:
            return self._messages.popleft()
        return await self._receive()


async def read_request_body(
    receive: Receive,
    max_size: int,
) -> Tuple[Optional[bytes], Receive]:
    """
    Drain the request body and return a snapshot plus a replaying receive.

    Args:
        receive: The ASGI receive callable of the current request
        max_size: Maximum number of bytes kept in the snapshot

    Returns:
        ``(snapshot, receive)``. ``snapshot`` is None when the body could not
        be read completely (client went away or the receive call failed).
    """
    messages: List[Message] = []
    body = bytearray()
    complete = False

    try:
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            body.extend(message.get("body", b""))
            if not message.get("more_body", False):
                complete = True
                break
    except Exception as e:
        logger.debug("request_body_read_failed", error=str(e), received=len(body))
        return None, ReplayReceive(messages, receive)

    if not complete:
        logger.debug("request_body_read_failed", error="client disconnected", received=len(body))
        return None, ReplayReceive(messages, receive)

    return bytes(body[:max_size]), ReplayReceive(messages, receive)
