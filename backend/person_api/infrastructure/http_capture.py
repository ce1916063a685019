"""HTTP Capture: non-destructive request/response capture and the outbound logging interceptor.

Invariants:
    - Capturing never edits status code, headers, or body of the exchange
    - Bodies stay readable by the next pipeline stage after capture (httpx caches
      the bytes read via aread(), so the transport and the caller see the same content)
    - Multi-valued headers are rendered once, values joined with ", "
    - One text block per direction, written through the injected LogSink
    - Sink failures are reported on the operational logger and never propagate

Design Decisions:
    - httpx event hooks over a custom transport: hooks run on every attempt, including
      retries, and keep the pooled transport untouched
    - Start time kept in request.extensions: concurrent calls share one interceptor,
      so per-call timing cannot live on the interceptor itself
    - CapturedExchange is shared with the inbound middleware so both directions of
      traffic log in the same shape
"""

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

import httpx

from person_api.core.domain_types import ExchangeDirection

logger = logging.getLogger(__name__)

_START_TIME_KEY = "person_api.capture_started"


class LogSink(Protocol):
    """Anything that accepts a structured text record."""

    def write(self, structured_text: str) -> None: ...


class LoggerSink:
    """Writes capture blocks to a stdlib logger at INFO."""

    def __init__(self, name: str = "person_api.http"):
        self._logger = logging.getLogger(name)

    def write(self, structured_text: str) -> None:
        self._logger.info(structured_text)


@dataclass(frozen=True)
class CapturedExchange:
    """Snapshot of one direction of an HTTP exchange, built once and discarded after logging."""
    direction: ExchangeDirection
    method: str
    path: str
    headers: tuple[tuple[str, str], ...]
    body: str
    status_code: int | None = None
    elapsed_ms: float | None = None

    def render(self) -> str:
        title = "Request" if self.direction is ExchangeDirection.REQUEST else "Response"
        lines = [
            f"=== {title} ===",
            f"method = {self.method.upper()}",
            f"path = {self.path}",
        ]
        if self.status_code is not None:
            lines.append(f"status = {self.status_code}")
        if self.elapsed_ms is not None:
            lines.append(f"elapsed = {self.elapsed_ms:.4f} ms")
        lines.append("-- headers")
        lines.extend(
            f"header = {name}    value = {value}" for name, value in self.headers
        )
        if self.body:
            lines.append("-- body")
            lines.append(f"body = {self.body}")
        return "\n".join(lines)


def join_headers(items: Iterable[tuple[str, str]]) -> tuple[tuple[str, str], ...]:
    """Collapse repeated header names into one entry, keeping first-seen order."""
    joined: dict[str, tuple[str, list[str]]] = {}
    for name, value in items:
        key = name.lower()
        if key not in joined:
            joined[key] = (name, [])
        joined[key][1].append(value)
    return tuple((name, ", ".join(values)) for name, values in joined.values())


def decode_body(content: bytes, limit: int | None = None) -> str:
    """Decode body bytes for logging; truncates the logged copy only."""
    text = content.decode("utf-8", errors="replace")
    if limit is not None and len(text) > limit:
        return f"{text[:limit]}...[truncated]"
    return text


def capture_request(
    request: httpx.Request, body_limit: int | None = None,
) -> CapturedExchange:
    """Capture an outbound request. The body must already be read (aread)."""
    return CapturedExchange(
        direction=ExchangeDirection.REQUEST,
        method=request.method,
        path=str(request.url),
        headers=join_headers(request.headers.multi_items()),
        body=decode_body(request.content, body_limit),
    )


def capture_response(
    response: httpx.Response,
    elapsed_ms: float | None,
    body_limit: int | None = None,
) -> CapturedExchange:
    """Capture an inbound response. The body must already be read (aread)."""
    return CapturedExchange(
        direction=ExchangeDirection.RESPONSE,
        method=response.request.method,
        path=str(response.request.url),
        headers=join_headers(response.headers.multi_items()),
        body=decode_body(response.content, body_limit),
        status_code=response.status_code,
        elapsed_ms=elapsed_ms,
    )


def emit_capture(sink: LogSink, exchange: CapturedExchange) -> None:
    """Write a capture to the sink; a failing sink is reported, never raised."""
    try:
        sink.write(exchange.render())
    except Exception:
        logger.warning(
            "Capture sink failed, dropping %s capture",
            exchange.direction.value,
            extra={"method": exchange.method, "path": exchange.path},
            exc_info=True,
        )


class LoggingInterceptor:
    """httpx event hooks that capture every outbound attempt."""

    def __init__(self, sink: LogSink | None = None, body_limit: int | None = 4096):
        self.sink = sink or LoggerSink()
        self.body_limit = body_limit

    def event_hooks(self) -> dict[str, list]:
        return {"request": [self.on_request], "response": [self.on_response]}

    async def on_request(self, request: httpx.Request) -> None:
        await request.aread()
        request.extensions[_START_TIME_KEY] = time.perf_counter()
        emit_capture(self.sink, capture_request(request, self.body_limit))

    async def on_response(self, response: httpx.Response) -> None:
        await response.aread()
        started = response.request.extensions.get(_START_TIME_KEY)
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else None
        emit_capture(
            self.sink, capture_response(response, elapsed_ms, self.body_limit),
        )
