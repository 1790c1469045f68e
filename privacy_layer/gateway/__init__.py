"""
Privacy gateway — sanitizes, encrypts and routes outbound requests.

Public API:
    PrivacyGateway(config).request(url, method, payload, headers)
    select_route(config)        → Route.DIRECT | Route.PROXY | Route.OVERLAY
    build_transport(route, cfg) → transport for a route
"""

from __future__ import annotations

from privacy_layer.gateway.gateway import TRACKING_FIELDS, PrivacyGateway, strip_tracking
from privacy_layer.gateway.headers import USER_AGENTS, HeaderAnonymizer
from privacy_layer.gateway.models import RequestEnvelope
from privacy_layer.gateway.routing import Route, select_route
from privacy_layer.gateway.transport import (
    DirectTransport,
    OverlayTransport,
    ProxyPool,
    ProxyTransport,
    StaticProxyPool,
    Transport,
    build_transport,
)

__all__ = [
    "PrivacyGateway",
    "RequestEnvelope",
    "Route",
    "select_route",
    "build_transport",
    "Transport",
    "DirectTransport",
    "ProxyTransport",
    "OverlayTransport",
    "ProxyPool",
    "StaticProxyPool",
    "HeaderAnonymizer",
    "USER_AGENTS",
    "TRACKING_FIELDS",
    "strip_tracking",
]
