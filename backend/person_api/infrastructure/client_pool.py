"""Client Pool: named, preconfigured httpx clients reused across calls.

Invariants:
    - Client names are unique; a rejected registration leaves the original untouched
    - Base address must be an absolute http(s) URL and timeout must be > 0
    - Handles share one httpx.AsyncClient (and its connection pool) per name
    - Registration happens once at startup; acquire() is read-only on the hot path

Design Decisions:
    - One AsyncClient per name over ad-hoc clients per call: connection reuse,
      no per-call socket setup/teardown (ADR: the whole point of named clients)
    - Pool passed explicitly to callers (app.state), no module-level singleton
    - transport parameter exists so tests can plug in httpx.MockTransport
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from urllib.parse import urlparse

import httpx

from person_api.config import Settings
from person_api.core.errors import (
    DuplicateClientNameError,
    InvalidClientConfigError,
    UnknownClientNameError,
)
from person_api.infrastructure.http_capture import LoggingInterceptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedClientConfig:
    """Configuration for one named client; immutable after registration."""
    name: str
    base_address: str
    timeout_seconds: float


@dataclass(frozen=True)
class ClientHandle:
    """Shared, concurrency-safe access to a named client."""
    config: NamedClientConfig
    client: httpx.AsyncClient

    @property
    def name(self) -> str:
        return self.config.name


def _validate(config: NamedClientConfig) -> None:
    if not config.name or not config.name.strip():
        raise InvalidClientConfigError(config.name, "name must be non-empty")
    parsed = urlparse(config.base_address)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidClientConfigError(
            config.name, f"base address '{config.base_address}' is not absolute",
        )
    if config.timeout_seconds <= 0:
        raise InvalidClientConfigError(config.name, "timeout must be positive")


class ClientPool:
    """Owns the named httpx clients for the process lifetime."""

    def __init__(
        self,
        interceptor: LoggingInterceptor | None = None,
        limits: httpx.Limits | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._interceptor = interceptor
        self._limits = limits or httpx.Limits()
        self._transport = transport
        self._handles: dict[str, ClientHandle] = {}

    @property
    def configs(self) -> MappingProxyType:
        """Read-only view of registered configurations by name."""
        return MappingProxyType(
            {name: handle.config for name, handle in self._handles.items()},
        )

    def register(self, config: NamedClientConfig) -> ClientHandle:
        if config.name in self._handles:
            raise DuplicateClientNameError(config.name)
        _validate(config)
        client = httpx.AsyncClient(
            base_url=config.base_address,
            timeout=config.timeout_seconds,
            limits=self._limits,
            transport=self._transport,
            event_hooks=(
                self._interceptor.event_hooks() if self._interceptor else None
            ),
        )
        handle = ClientHandle(config=config, client=client)
        self._handles[config.name] = handle
        logger.info(
            f"Registered named client '{config.name}' -> {config.base_address}",
            extra={"client_name": config.name},
        )
        return handle

    def acquire(self, name: str) -> ClientHandle:
        handle = self._handles.get(name)
        if handle is None:
            raise UnknownClientNameError(name)
        return handle

    async def aclose(self) -> None:
        """Close every named client (call on application shutdown)."""
        for handle in self._handles.values():
            await handle.client.aclose()
        logger.info(f"Closed {len(self._handles)} named client(s)")
        self._handles.clear()


def build_client_pool(
    settings: Settings,
    interceptor: LoggingInterceptor | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ClientPool:
    """Build the pool and register the deployment's named client from settings."""
    pool = ClientPool(
        interceptor=interceptor,
        limits=httpx.Limits(
            max_connections=settings.http_max_connections,
            max_keepalive_connections=settings.http_max_keepalive_connections,
        ),
        transport=transport,
    )
    pool.register(NamedClientConfig(
        name=settings.external_service_client_name,
        base_address=settings.external_service_base_url,
        timeout_seconds=settings.external_service_timeout_seconds,
    ))
    return pool
