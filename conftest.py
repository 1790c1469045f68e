"""
Root-level shared test fixtures.

Inherited by the gateway and vault suites as well as tests/.
"""

from __future__ import annotations

import secrets

import pytest

from privacy_layer.config import reset_config
from privacy_layer.crypto import PayloadCipher, reset_key_cache


@pytest.fixture
def master_key() -> bytes:
    """Fresh random 32-byte key."""
    return secrets.token_bytes(32)


@pytest.fixture
def payload_cipher(master_key: bytes) -> PayloadCipher:
    return PayloadCipher(master_key)


@pytest.fixture(autouse=True)
def _isolate_singletons():
    """Clear the cached config and master key around every test."""
    reset_config()
    reset_key_cache()
    yield
    reset_config()
    reset_key_cache()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove PRIVACY_LAYER_* env vars that leak between tests."""
    import os

    for key in list(os.environ):
        if key.startswith("PRIVACY_LAYER_"):
            monkeypatch.delenv(key, raising=False)
