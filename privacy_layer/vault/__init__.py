"""
Secure Vault — encrypted-at-rest credential store, namespaced per (service, user).

Public API:
    vault = SecureVault(backend, CredentialCipher(PayloadCipher(key)))
    await vault.store_credential(service, user, fields)   → credential id
    await vault.get_credential(service, user, id)         → decrypted fields
    await vault.delete_credential(service, user, id)      → hard delete
    await vault.list_credentials(service, user)           → ids (not values)
"""

from __future__ import annotations

from privacy_layer.vault.backend import HttpVaultBackend, InMemoryBackend, SecretBackend
from privacy_layer.vault.cipher import CredentialCipher
from privacy_layer.vault.models import Credential
from privacy_layer.vault.paths import CredentialPathBuilder
from privacy_layer.vault.vault import SecureVault, generate_credential_id

__all__ = [
    "SecureVault",
    "SecretBackend",
    "InMemoryBackend",
    "HttpVaultBackend",
    "CredentialCipher",
    "CredentialPathBuilder",
    "Credential",
    "generate_credential_id",
]
