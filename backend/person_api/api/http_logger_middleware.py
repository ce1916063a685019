"""Inbound HTTP Logger: captures the service's own request/response traffic.

Invariants:
    - Only requests with a non-empty path are captured
    - GET requests: request line and headers captured, body never read
    - Other methods: body buffered, captured, then replayed to the app unchanged
    - Response is buffered, captured, then forwarded byte-for-byte, on every exit path
    - Logging failures never abort the request: reported on the operational logger
    - Each request binds a correlation id (X-Correlation-ID header, else generated)
      for every record logged while it is served, outbound captures included
    - If the app raises before http.response.start, the response block is logged as
      status 500 with an empty body and nothing is forwarded. The 500 the client
      receives is built afterwards by ServerErrorMiddleware, outside this middleware,
      so that block is not a copy of the real response

Design Decisions:
    - Pure ASGI middleware over BaseHTTPMiddleware: full control of the receive/send
      channels, so replayed request bytes and forwarded response bytes are exactly
      what the client sent / the app produced
    - Per-request buffers live in the __call__ frame and are released with it
    - Also emits the one-line request summary (scheme, host, method, path, status, elapsed)
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from person_api.core.domain_types import ExchangeDirection
from person_api.infrastructure.http_capture import (
    CapturedExchange, LogSink, LoggerSink, decode_body, emit_capture, join_headers,
)
from person_api.infrastructure.observability import (
    bind_correlation_id, reset_correlation_id,
)

CORRELATION_HEADER = "x-correlation-id"

logger = logging.getLogger(__name__)


def _decode_headers(raw: list[tuple[bytes, bytes]]) -> tuple[tuple[str, str], ...]:
    return join_headers(
        (name.decode("latin-1"), value.decode("latin-1")) for name, value in raw
    )


class HttpLoggerMiddleware:
    """ASGI middleware wrapping the app with request/response capture."""

    def __init__(
        self,
        app: ASGIApp,
        sink: LogSink | None = None,
        body_limit: int | None = 4096,
    ):
        self.app = app
        self.sink = sink or LoggerSink()
        self.body_limit = body_limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not scope.get("path"):
            await self.app(scope, receive, send)
            return

        headers = {
            name.lower(): value
            for name, value in _decode_headers(scope.get("headers", []))
        }
        token = bind_correlation_id(headers.get(CORRELATION_HEADER))
        try:
            await self._handle(scope, receive, send)
        finally:
            reset_correlation_id(token)

    async def _handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        started = time.perf_counter()
        receive = await self._capture_request(scope, receive)

        response_start: Message | None = None
        response_body = bytearray()

        async def buffered_send(message: Message) -> None:
            nonlocal response_start
            if message["type"] == "http.response.start":
                response_start = message
            elif message["type"] == "http.response.body":
                response_body.extend(message.get("body", b""))
            else:
                await send(message)

        try:
            await self.app(scope, receive, buffered_send)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            body = bytes(response_body)
            self._capture_response(scope, response_start, body, elapsed_ms)
            if response_start is not None:
                await send(response_start)
                await send({
                    "type": "http.response.body", "body": body, "more_body": False,
                })

    async def _capture_request(self, scope: Scope, receive: Receive) -> Receive:
        """Capture the request; returns the receive channel the app must use."""
        method = scope["method"]
        if method == "GET":
            emit_capture(self.sink, CapturedExchange(
                direction=ExchangeDirection.REQUEST,
                method=method,
                path=scope["path"],
                headers=_decode_headers(scope.get("headers", [])),
                body="",
            ))
            return receive

        buffered: list[Message] = []
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request" or not message.get("more_body", False):
                break
        body = b"".join(
            m.get("body", b"") for m in buffered if m["type"] == "http.request"
        )
        emit_capture(self.sink, CapturedExchange(
            direction=ExchangeDirection.REQUEST,
            method=method,
            path=scope["path"],
            headers=_decode_headers(scope.get("headers", [])),
            body=decode_body(body, self.body_limit),
        ))

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        return replay

    def _capture_response(
        self,
        scope: Scope,
        response_start: Message | None,
        body: bytes,
        elapsed_ms: float,
    ) -> None:
        try:
            status = response_start["status"] if response_start else 500
            headers = _decode_headers(
                response_start.get("headers", []) if response_start else [],
            )
            emit_capture(self.sink, CapturedExchange(
                direction=ExchangeDirection.RESPONSE,
                method=scope["method"],
                path=scope["path"],
                headers=headers,
                body=decode_body(body, self.body_limit),
                status_code=status,
                elapsed_ms=elapsed_ms,
            ))
            self._log_summary(scope, status, elapsed_ms)
        except Exception:
            logger.warning("Response capture failed", exc_info=True)

    def _log_summary(self, scope: Scope, status: int, elapsed_ms: float) -> None:
        host = dict(_decode_headers(scope.get("headers", []))).get("host", "-")
        client = scope.get("client")
        logger.info(
            f"{scope.get('scheme', 'http')} {host} {scope['method']} {scope['path']} "
            f"responded {status} in {elapsed_ms:.4f} ms",
            extra={
                "method": scope["method"],
                "path": scope["path"],
                "status_code": status,
                "elapsed_ms": round(elapsed_ms, 4),
                "client_ip": client[0] if client else None,
            },
        )
