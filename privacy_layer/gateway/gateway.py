"""
Privacy Gateway — the single call boundary for outbound third-party requests.

Per request, each step gated by its PrivacyConfig flag:
  1. mask_pii               — redact sensitive payload fields
  2. encrypt_payloads       — seal the (sanitized) payload in an envelope
  3. prevent_fingerprinting — rotate User-Agent, pin Accept-Language
  4. send through the route chosen once at construction
  5. strip_metadata         — drop tracking fields from mapping responses

Usage:
    gateway = PrivacyGateway(PrivacyConfig(mask_pii=True))
    data = await gateway.request("https://api.example.com/v1/items", "POST", {...})
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from privacy_layer.config import PrivacyConfig, TransportConfig, check_timeout
from privacy_layer.crypto import PayloadCipher
from privacy_layer.errors import ConfigurationError, PrivacyAwareError
from privacy_layer.gateway.headers import HeaderAnonymizer
from privacy_layer.gateway.models import RequestEnvelope
from privacy_layer.gateway.routing import Route, select_route
from privacy_layer.gateway.transport import ProxyPool, Transport, build_transport
from privacy_layer.redaction import PIIRedactor

logger = logging.getLogger(__name__)

TRACKING_FIELDS = frozenset(
    {
        "trackingPixel",
        "tracking_pixel",
        "trackingId",
        "tracking_id",
        "_tracking",
        "_analytics",
    }
)


def strip_tracking(response: Any) -> Any:
    """Return a mapping response without tracking fields; other shapes pass through."""
    if not isinstance(response, Mapping):
        return response
    return {k: v for k, v in response.items() if k not in TRACKING_FIELDS}


class PrivacyGateway:
    """Applies a fixed privacy policy to every outbound request."""

    def __init__(
        self,
        config: PrivacyConfig,
        transport_config: TransportConfig | None = None,
        *,
        cipher: PayloadCipher | None = None,
        proxy_pool: ProxyPool | None = None,
        transports: Mapping[Route, Transport] | None = None,
    ) -> None:
        if not isinstance(config, PrivacyConfig):
            raise ConfigurationError(
                f"PrivacyGateway needs a PrivacyConfig, got {type(config).__name__}"
            )
        self.config = config
        self.transport_config = transport_config or TransportConfig()
        self.redactor = PIIRedactor()
        self.anonymizer = HeaderAnonymizer(config.prevent_fingerprinting)

        if config.encrypt_payloads and cipher is None:
            cipher = PayloadCipher.from_master_key()
        self.cipher = cipher

        self.route = select_route(config)
        if transports and self.route in transports:
            self._transport = transports[self.route]
        else:
            self._transport = build_transport(self.route, self.transport_config, proxy_pool)
        logger.debug("Privacy gateway using %s route", self.route)

    def prepare(
        self,
        url: str,
        method: str,
        payload: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> RequestEnvelope:
        """Apply the pre-send transforms and return the envelope that would be sent."""
        if self.config.mask_pii:
            payload = self.redactor.sanitize(payload)
        if self.config.encrypt_payloads and payload is not None and self.cipher is not None:
            payload = self.cipher.seal(payload)
        return RequestEnvelope(
            url=url,
            method=method,
            payload=payload,
            headers=self.anonymizer.apply(headers),
        )

    async def request(
        self,
        url: str,
        method: str = "GET",
        payload: Any = None,
        headers: Mapping[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send one request through the configured route.

        Raises PrivacyAwareError (chained from the original cause) on any
        transport failure or timeout, and ConfigurationError for a
        non-positive timeout. Cancellation propagates unchanged.
        """
        envelope = self.prepare(url, method, payload, headers)
        limit = self.transport_config.timeout if timeout is None else timeout
        check_timeout("timeout", limit)

        try:
            response = await asyncio.wait_for(
                self._transport.request(envelope, timeout=limit), timeout=limit
            )
        except Exception as e:
            # URL only, never body or headers
            logger.warning("Privacy gateway request failed: %s (%s)", url, type(e).__name__)
            raise PrivacyAwareError(url, e) from e

        if self.config.strip_metadata:
            response = strip_tracking(response)
        return response
