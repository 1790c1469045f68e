"""
Outbound HTTP transports for the privacy gateway.

Each transport opens a short-lived httpx.AsyncClient per call. The proxy and
overlay variants only differ in which proxy URL the client is built with:
the rotating pool and the Tor daemon are external services reached through
their proxy endpoints.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

import httpx

from privacy_layer.config import TransportConfig
from privacy_layer.errors import ConfigurationError, TransportError
from privacy_layer.gateway.models import RequestEnvelope
from privacy_layer.gateway.routing import Route

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Uniform request capability shared by every route."""

    async def request(self, envelope: RequestEnvelope, *, timeout: float | None = None) -> Any: ...


class ProxyPool(Protocol):
    """Source of proxy URLs. Rotation strategy belongs to the implementation."""

    def next_proxy(self) -> str: ...


class StaticProxyPool:
    """Round-robins a fixed list of proxy URLs."""

    def __init__(self, urls: Iterable[str]) -> None:
        self.urls = tuple(urls)
        if not self.urls:
            raise ConfigurationError("StaticProxyPool needs at least one proxy URL")
        self._cycle = itertools.cycle(self.urls)

    def next_proxy(self) -> str:
        return next(self._cycle)


def _decode(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    if "json" in resp.headers.get("content-type", ""):
        try:
            return resp.json()
        except ValueError:
            return resp.text
    return resp.text


class DirectTransport:
    """Plain httpx transport, no proxy."""

    route = Route.DIRECT

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        verify: bool = True,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.verify = verify
        self._http_transport = http_transport

    def _proxy_url(self) -> str | None:
        return None

    def _client(self, timeout: float) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {"timeout": timeout, "verify": self.verify}
        proxy = self._proxy_url()
        if proxy:
            kwargs["proxy"] = proxy
        if self._http_transport is not None:
            kwargs["transport"] = self._http_transport
        return httpx.AsyncClient(**kwargs)

    async def request(self, envelope: RequestEnvelope, *, timeout: float | None = None) -> Any:
        logger.debug("%s %s via %s route", envelope.method, envelope.url, self.route)
        try:
            async with self._client(timeout or self.timeout) as client:
                resp = await client.request(
                    envelope.method,
                    envelope.url,
                    json=envelope.payload,
                    headers=envelope.headers,
                )
        except httpx.HTTPError as e:
            raise TransportError(
                f"{envelope.method} {envelope.url} failed: {type(e).__name__}"
            ) from e

        if resp.status_code >= 400:
            raise TransportError(
                f"{envelope.method} {envelope.url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return _decode(resp)


class ProxyTransport(DirectTransport):
    """Sends each request through the next proxy from a pool."""

    route = Route.PROXY

    def __init__(self, pool: ProxyPool, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.pool = pool

    def _proxy_url(self) -> str | None:
        return self.pool.next_proxy()


class OverlayTransport(DirectTransport):
    """Sends requests through the anonymizing overlay's SOCKS endpoint."""

    route = Route.OVERLAY

    def __init__(self, overlay_url: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.overlay_url = overlay_url

    def _proxy_url(self) -> str | None:
        return self.overlay_url


def build_transport(
    route: Route,
    config: TransportConfig | None = None,
    proxy_pool: ProxyPool | None = None,
) -> Transport:
    """Build the default transport for a route."""
    cfg = config or TransportConfig()
    common: dict[str, Any] = {"timeout": cfg.timeout, "verify": cfg.verify}
    if route == Route.OVERLAY:
        return OverlayTransport(cfg.overlay_url, **common)
    if route == Route.PROXY:
        if proxy_pool is None:
            if not cfg.proxy_urls:
                raise ConfigurationError(
                    "Proxy routing needs a proxy pool or PRIVACY_LAYER_PROXY_URLS"
                )
            proxy_pool = StaticProxyPool(cfg.proxy_urls)
        return ProxyTransport(proxy_pool, **common)
    return DirectTransport(**common)
