"""
Secret-storage backends for the vault.

SecretBackend is the contract SecureVault needs. Two implementations:
  - InMemoryBackend   — process-local, insertion-ordered (tests, dev)
  - HttpVaultBackend  — HashiCorp-Vault-compatible KV v2 HTTP API via httpx

Backends store whatever record they are given; encryption happens above them.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from privacy_layer.config import VaultConfig
from privacy_layer.errors import ConfigurationError, StorageError

# /v1/sys/health codes for an unsealed, reachable server (active, DR/perf standby)
_HEALTHY_CODES = {200, 429, 472, 473}


@runtime_checkable
class SecretBackend(Protocol):
    async def initialize(self) -> None: ...

    async def write_secret(self, path: str, data: dict[str, Any]) -> None: ...

    async def read_secret(self, path: str) -> dict[str, Any] | None: ...

    async def delete_secret(self, path: str) -> None: ...

    async def list_keys(self, prefix: str) -> list[str]: ...

    async def close(self) -> None: ...


class InMemoryBackend:
    """Dict-backed backend. Enumeration follows insertion order."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    async def initialize(self) -> None:
        return None

    async def write_secret(self, path: str, data: dict[str, Any]) -> None:
        self._data[path] = copy.deepcopy(data)

    async def read_secret(self, path: str) -> dict[str, Any] | None:
        data = self._data.get(path)
        return copy.deepcopy(data) if data is not None else None

    async def delete_secret(self, path: str) -> None:
        self._data.pop(path, None)

    async def list_keys(self, prefix: str) -> list[str]:
        return [key for key in self._data if key.startswith(prefix)]

    async def close(self) -> None:
        return None

    def raw(self, path: str) -> dict[str, Any] | None:
        """Return the at-rest record for a path without copying (for inspection)."""
        return self._data.get(path)


class HttpVaultBackend:
    """Async client for a KV v2 secrets engine."""

    def __init__(
        self,
        config: VaultConfig,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not config.url:
            raise ConfigurationError("HttpVaultBackend needs VaultConfig.url")
        self.config = config
        self.mount = config.mount.strip("/")
        self._client = httpx.AsyncClient(
            base_url=config.url.rstrip("/"),
            headers=config.headers,
            verify=config.ssl_verify,
            timeout=config.timeout,
            transport=http_transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _url(self, kind: str, path: str) -> str:
        # Escape per segment: ?, # and % belong to the secret name
        escaped = "/".join(quote(part, safe="") for part in path.split("/"))
        return f"/v1/{self.mount}/{kind}/{escaped}"

    async def _call(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"Vault {method} {url} failed: {type(e).__name__}") from e

    @staticmethod
    def _check(resp: httpx.Response, method: str, url: str) -> None:
        if resp.status_code >= 400:
            raise StorageError(f"Vault {method} {url} returned HTTP {resp.status_code}")

    async def initialize(self) -> None:
        """GET /v1/sys/health — fail fast if the server is unreachable or sealed."""
        url = "/v1/sys/health"
        resp = await self._call("GET", url)
        if resp.status_code not in _HEALTHY_CODES:
            raise StorageError(f"Vault not ready: GET {url} returned HTTP {resp.status_code}")

    async def write_secret(self, path: str, data: dict[str, Any]) -> None:
        url = self._url("data", path)
        resp = await self._call("POST", url, json={"data": data})
        self._check(resp, "POST", url)

    async def read_secret(self, path: str) -> dict[str, Any] | None:
        url = self._url("data", path)
        resp = await self._call("GET", url)
        if resp.status_code == 404:
            return None
        self._check(resp, "GET", url)
        try:
            body = resp.json()
            return dict(body["data"]["data"])
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Vault GET {url} returned an unexpected body") from e

    async def delete_secret(self, path: str) -> None:
        """Delete metadata and every version. There is no undelete."""
        url = self._url("metadata", path)
        resp = await self._call("DELETE", url)
        if resp.status_code == 404:
            return
        self._check(resp, "DELETE", url)

    async def list_keys(self, prefix: str) -> list[str]:
        url = self._url("metadata", prefix)
        resp = await self._call("LIST", url)
        if resp.status_code == 404:
            return []
        self._check(resp, "LIST", url)
        try:
            keys = resp.json()["data"]["keys"]
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Vault LIST {url} returned an unexpected body") from e
        # Keys ending in "/" are sub-folders, not secrets
        return [prefix + k for k in keys if not k.endswith("/")]
