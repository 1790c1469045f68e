"""Shared fixtures for gateway tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from privacy_layer.gateway.models import RequestEnvelope
from privacy_layer.gateway.routing import Route


class RecordingTransport:
    """Transport double: records envelopes, returns a canned response or raises."""

    def __init__(self, response: Any = None, error: BaseException | None = None, delay: float = 0):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: list[RequestEnvelope] = []
        self.timeouts: list[float | None] = []

    async def request(self, envelope: RequestEnvelope, *, timeout: float | None = None) -> Any:
        self.calls.append(envelope)
        self.timeouts.append(timeout)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def make_transport():
    """Factory for RecordingTransport instances."""
    return RecordingTransport


@pytest.fixture
def transports() -> dict[Route, RecordingTransport]:
    """One recording transport per route, all answering {"ok": True}."""
    return {route: RecordingTransport(response={"ok": True}) for route in Route}
