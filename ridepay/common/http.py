"""Process-wide HTTP connection pool for outbound gateway calls."""

import httpx

from ridepay.common.config import CommonSettings


def create_http_client(config: CommonSettings, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Build the pooled client shared by every submission in this process.

    Created once at bootstrap and injected into consumers; never construct one
    per request. `transport` lets tests swap in a mock or ASGI transport.
    """

    limits = httpx.Limits(
        max_connections=config.http_max_connections,
        max_keepalive_connections=config.http_max_keepalive_connections,
    )
    return httpx.AsyncClient(
        limits=limits,
        timeout=config.http_timeout_seconds,
        transport=transport,
    )
