"""Shared fixtures for vault tests."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from privacy_layer.errors import StorageError
from privacy_layer.vault.backend import InMemoryBackend
from privacy_layer.vault.cipher import CredentialCipher
from privacy_layer.vault.vault import SecureVault


class FailingBackend(InMemoryBackend):
    """In-memory backend whose writes always fail."""

    async def write_secret(self, path: str, data: dict[str, Any]) -> None:
        raise StorageError(f"write to {path} refused")


class SlowBackend(InMemoryBackend):
    """In-memory backend whose reads hang."""

    async def read_secret(self, path: str) -> dict[str, Any] | None:
        await asyncio.sleep(5)
        return None


class FakeKV:
    """Minimal KV v2 server, used as an httpx.MockTransport handler."""

    def __init__(self, health_status: int = 200) -> None:
        self.store: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.health_status = health_status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/sys/health":
            return httpx.Response(self.health_status, json={"sealed": self.health_status == 503})
        if path.startswith("/v1/secret/data/"):
            key = path[len("/v1/secret/data/") :]
            if request.method == "POST":
                self.store[key] = json.loads(request.content)["data"]
                return httpx.Response(200, json={"data": {"version": 1}})
            if request.method == "GET":
                if key not in self.store:
                    return httpx.Response(404, json={"errors": []})
                return httpx.Response(200, json={"data": {"data": self.store[key], "metadata": {}}})
        if path.startswith("/v1/secret/metadata/"):
            key = path[len("/v1/secret/metadata/") :]
            if request.method == "DELETE":
                self.store.pop(key, None)
                return httpx.Response(204)
            if request.method == "LIST":
                children: list[str] = []
                for stored in self.store:
                    if stored.startswith(key):
                        rest = stored[len(key) :]
                        child = rest.split("/")[0] + "/" if "/" in rest else rest
                        if child not in children:
                            children.append(child)
                if not children:
                    return httpx.Response(404, json={"errors": []})
                return httpx.Response(200, json={"data": {"keys": sorted(children)}})
        return httpx.Response(405)


@pytest.fixture
def fake_kv() -> FakeKV:
    return FakeKV()


@pytest.fixture
def credential_cipher(payload_cipher) -> CredentialCipher:
    return CredentialCipher(payload_cipher)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def vault(backend, credential_cipher) -> SecureVault:
    return SecureVault(backend, credential_cipher)


@pytest.fixture
def failing_vault(credential_cipher) -> SecureVault:
    return SecureVault(FailingBackend(), credential_cipher)


@pytest.fixture
def slow_vault(credential_cipher) -> SecureVault:
    return SecureVault(SlowBackend(), credential_cipher, timeout=0.01)
