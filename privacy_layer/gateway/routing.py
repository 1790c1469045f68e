"""
Routing policy — maps a privacy configuration to one transport route.

The route is chosen once per gateway; there is no per-request override.
"""

from __future__ import annotations

from enum import StrEnum

from privacy_layer.config import PrivacyConfig


class Route(StrEnum):
    DIRECT = "direct"
    PROXY = "proxy"
    OVERLAY = "overlay"  # anonymizing overlay network (Tor)


def select_route(config: PrivacyConfig) -> Route:
    """Overlay beats proxy beats direct."""
    if config.route_through_tor:
        return Route.OVERLAY
    if config.anonymize_requests:
        return Route.PROXY
    return Route.DIRECT
