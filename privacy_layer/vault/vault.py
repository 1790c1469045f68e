"""
SecureVault — per-service, per-user credential store, encrypted at rest.

Credentials live at <prefix>credentials/<service>/<user>/<id>. Sensitive
fields are encrypted by CredentialCipher before they reach the backend.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Mapping
from typing import Any, TypeVar

from privacy_layer.config import VaultConfig
from privacy_layer.crypto import PayloadCipher, get_master_key
from privacy_layer.errors import NotFoundError, StorageError
from privacy_layer.vault.backend import HttpVaultBackend, SecretBackend
from privacy_layer.vault.cipher import CredentialCipher
from privacy_layer.vault.models import Credential
from privacy_layer.vault.paths import CredentialPathBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T")


def generate_credential_id() -> str:
    """Random 128-bit id (uuid4, OS CSPRNG)."""
    return uuid.uuid4().hex


class SecureVault:
    def __init__(
        self,
        backend: SecretBackend,
        cipher: CredentialCipher,
        *,
        path_builder: CredentialPathBuilder | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.backend = backend
        self.cipher = cipher
        self.paths = path_builder or CredentialPathBuilder()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: VaultConfig, master_key: bytes | None = None) -> SecureVault:
        """Build a vault talking to a KV v2 server, keyed by the on-disk master key by default."""
        key = master_key if master_key is not None else get_master_key()
        return cls(
            HttpVaultBackend(config),
            CredentialCipher(PayloadCipher(key)),
            path_builder=CredentialPathBuilder(config.key_prefix),
            timeout=config.timeout,
        )

    async def _bounded(self, op: str, path: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except TimeoutError as e:
            raise StorageError(f"Vault {op} {path} timed out after {self.timeout}s") from e

    async def initialize(self) -> None:
        await self._bounded("initialize", "", self.backend.initialize())

    async def close(self) -> None:
        await self.backend.close()

    async def store_credential(
        self,
        service_name: str,
        user_id: str,
        fields: Mapping[str, Any],
    ) -> str:
        """Encrypt and store a new credential. Returns its generated id.

        Raises StorageError if the backend write fails; no id is returned then.
        """
        credential = Credential(
            service_name=service_name,
            user_id=user_id,
            credential_id=generate_credential_id(),
            fields=dict(fields),
        )
        path = self.paths.path(credential.service_name, credential.user_id, credential.credential_id)
        record = self.cipher.encrypt_fields(credential.fields)
        await self._bounded("write", path, self.backend.write_secret(path, record))
        logger.debug(
            "Stored credential %s for %s/%s", credential.credential_id, service_name, user_id
        )
        return credential.credential_id

    async def get_credential(
        self,
        service_name: str,
        user_id: str,
        credential_id: str,
    ) -> dict[str, Any]:
        """Read and decrypt a credential. Raises NotFoundError if absent."""
        path = self.paths.path(service_name, user_id, credential_id)
        record = await self._bounded("read", path, self.backend.read_secret(path))
        if record is None:
            raise NotFoundError(path)
        return self.cipher.decrypt_fields(record)

    async def delete_credential(
        self,
        service_name: str,
        user_id: str,
        credential_id: str,
    ) -> None:
        """Permanently remove a credential. Deleting an absent credential is a no-op."""
        path = self.paths.path(service_name, user_id, credential_id)
        await self._bounded("delete", path, self.backend.delete_secret(path))
        logger.debug("Deleted credential %s for %s/%s", credential_id, service_name, user_id)

    async def list_credentials(self, service_name: str, user_id: str) -> list[str]:
        """List credential ids for exactly one (service, user), in backend order. No decryption."""
        prefix = self.paths.user_prefix(service_name, user_id)
        keys = await self._bounded("list", prefix, self.backend.list_keys(prefix))
        ids = []
        for key in keys:
            credential_id = self.paths.credential_id(key, service_name, user_id)
            if credential_id is not None:
                ids.append(credential_id)
        return ids
