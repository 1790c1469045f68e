"""Tests for the secret-storage backends."""

from __future__ import annotations

import httpx
import pytest

from privacy_layer.config import VaultConfig
from privacy_layer.errors import ConfigurationError, StorageError
from privacy_layer.vault.backend import HttpVaultBackend, InMemoryBackend, SecretBackend


def _backend(handler, **config) -> HttpVaultBackend:
    cfg = VaultConfig(url="https://vault.local:8200", **config)
    return HttpVaultBackend(cfg, http_transport=httpx.MockTransport(handler))


class TestInMemoryBackend:
    @pytest.mark.asyncio
    async def test_crud(self):
        backend = InMemoryBackend()
        await backend.write_secret("a/1", {"x": 1})
        assert await backend.read_secret("a/1") == {"x": 1}
        await backend.delete_secret("a/1")
        assert await backend.read_secret("a/1") is None

    @pytest.mark.asyncio
    async def test_copies_in_and_out(self):
        backend = InMemoryBackend()
        data = {"x": [1]}
        await backend.write_secret("a", data)
        data["x"].append(2)
        read = await backend.read_secret("a")
        read["x"].append(3)
        assert backend.raw("a") == {"x": [1]}

    @pytest.mark.asyncio
    async def test_list_keeps_insertion_order(self):
        backend = InMemoryBackend()
        for key in ["p/c", "p/a", "q/z", "p/b"]:
            await backend.write_secret(key, {})
        assert await backend.list_keys("p/") == ["p/c", "p/a", "p/b"]

    @pytest.mark.asyncio
    async def test_delete_absent_is_noop(self):
        await InMemoryBackend().delete_secret("missing")

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryBackend(), SecretBackend)


class TestHttpVaultBackend:
    def test_requires_url(self):
        with pytest.raises(ConfigurationError, match="url"):
            HttpVaultBackend(VaultConfig())

    @pytest.mark.asyncio
    async def test_write_read_delete(self, fake_kv):
        backend = _backend(fake_kv)
        await backend.write_secret("app/credentials/s/u/1", {"format": 1, "fields": {}})
        assert await backend.read_secret("app/credentials/s/u/1") == {"format": 1, "fields": {}}
        await backend.delete_secret("app/credentials/s/u/1")
        assert await backend.read_secret("app/credentials/s/u/1") is None
        await backend.close()

    @pytest.mark.asyncio
    async def test_sends_token_and_namespace(self, fake_kv):
        backend = _backend(fake_kv, token="s.root", namespace="team-a")
        await backend.read_secret("x")
        sent = fake_kv.requests[0]
        assert sent.headers["X-Vault-Token"] == "s.root"
        assert sent.headers["X-Vault-Namespace"] == "team-a"
        await backend.close()

    @pytest.mark.asyncio
    async def test_custom_mount(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(404)

        backend = _backend(handler, mount="kv")
        assert await backend.read_secret("a/b") is None
        assert seen == ["/v1/kv/data/a/b"]
        await backend.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "segment, escaped",
        [("u1?list=true", "u1%3Flist%3Dtrue"), ("u1#frag", "u1%23frag"), ("50%", "50%25")],
    )
    async def test_escapes_reserved_characters(self, fake_kv, segment, escaped):
        backend = _backend(fake_kv)
        path = f"app/credentials/openai/{segment}/x"
        await backend.write_secret(path, {"v": 1})

        sent = fake_kv.requests[-1].url
        assert sent.raw_path == f"/v1/secret/data/app/credentials/openai/{escaped}/x".encode()
        assert sent.query == b""
        assert sent.fragment == ""
        assert list(fake_kv.store) == [path]
        assert await backend.read_secret(path) == {"v": 1}
        assert await backend.read_secret("app/credentials/openai/u1/x") is None
        await backend.close()

    @pytest.mark.asyncio
    async def test_list_keys_skips_folders(self, fake_kv):
        backend = _backend(fake_kv)
        await backend.write_secret("p/credentials/s/u/a1", {})
        await backend.write_secret("p/credentials/s/u/a2", {})
        await backend.write_secret("p/credentials/s/u/nested/x", {})
        keys = await backend.list_keys("p/credentials/s/u/")
        assert keys == ["p/credentials/s/u/a1", "p/credentials/s/u/a2"]
        assert fake_kv.requests[-1].method == "LIST"
        await backend.close()

    @pytest.mark.asyncio
    async def test_list_missing_prefix_is_empty(self, fake_kv):
        backend = _backend(fake_kv)
        assert await backend.list_keys("p/credentials/s/u/") == []
        await backend.close()

    @pytest.mark.asyncio
    async def test_delete_absent_is_noop(self):
        backend = _backend(lambda r: httpx.Response(404))
        await backend.delete_secret("missing")
        await backend.close()

    @pytest.mark.asyncio
    async def test_server_error_is_storage_error(self):
        backend = _backend(lambda r: httpx.Response(500, json={"errors": ["sk-in-body"]}))
        with pytest.raises(StorageError, match="HTTP 500") as exc_info:
            await backend.write_secret("a", {"apiKey": "sk-1"})
        assert "sk-1" not in str(exc_info.value)
        await backend.close()

    @pytest.mark.asyncio
    async def test_network_error_is_storage_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        backend = _backend(handler)
        with pytest.raises(StorageError) as exc_info:
            await backend.read_secret("a")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        await backend.close()

    @pytest.mark.asyncio
    async def test_unexpected_body(self):
        backend = _backend(lambda r: httpx.Response(200, json={"nope": 1}))
        with pytest.raises(StorageError, match="unexpected"):
            await backend.read_secret("a")
        await backend.close()

    @pytest.mark.asyncio
    async def test_initialize_healthy(self, fake_kv):
        backend = _backend(fake_kv)
        await backend.initialize()
        await backend.close()

    @pytest.mark.asyncio
    async def test_initialize_sealed(self, fake_kv):
        fake_kv.health_status = 503
        backend = _backend(fake_kv)
        with pytest.raises(StorageError, match="not ready"):
            await backend.initialize()
        await backend.close()
