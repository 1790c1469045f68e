"""
AES-256-GCM encryption for outbound payloads and stored credentials.

Master key is a 32-byte random key stored at $WORKSPACE/.vault-key (chmod 600).
Each ciphertext gets a unique 12-byte nonce prepended; text tokens are the
url-safe base64 of nonce + ciphertext + tag.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import secrets
import stat
from pathlib import Path
from typing import Any

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from privacy_layer.errors import ConfigurationError

logger = logging.getLogger(__name__)

ALGORITHM = "AES-256-GCM"
ENVELOPE_KEY = "__encrypted"
KEY_SIZE = 32
KEY_FILENAME = ".vault-key"

_NONCE_SIZE = 12
_TAG_SIZE = 16

_key_cache: dict[Path, bytes] = {}


def master_key_path(workspace: Path | str | None = None) -> Path:
    """Location of the key file; the workspace defaults to PRIVACY_LAYER_WORKSPACE."""
    if workspace is None:
        from privacy_layer.config import get_config

        workspace = get_config().workspace
    return Path(workspace).expanduser() / KEY_FILENAME


def init_master_key(workspace: Path | str | None = None) -> Path:
    """Create the key file (owner read/write only) unless one already exists."""
    key_path = master_key_path(workspace)
    if not key_path.exists():
        key_path.parent.mkdir(parents=True, exist_ok=True)
        key_path.write_bytes(secrets.token_bytes(KEY_SIZE))
        key_path.chmod(stat.S_IRUSR | stat.S_IWUSR)
        logger.info("Created master key at %s", key_path)
    return key_path


def get_master_key(workspace: Path | str | None = None) -> bytes:
    """Read the master key for a workspace, once per key path.

    Raises ConfigurationError when the file is missing or not KEY_SIZE bytes.
    """
    key_path = master_key_path(workspace)
    if key_path in _key_cache:
        return _key_cache[key_path]
    try:
        key = key_path.read_bytes()
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"No master key at {key_path}; "
            "call init_master_key() or set PRIVACY_LAYER_WORKSPACE"
        ) from e
    if len(key) != KEY_SIZE:
        raise ConfigurationError(
            f"Master key at {key_path} must be {KEY_SIZE} bytes, got {len(key)}"
        )
    _key_cache[key_path] = key
    return key


def reset_key_cache() -> None:
    _key_cache.clear()


class PayloadCipher:
    """Text-in, text-out AES-256-GCM cipher bound to one master key."""

    def __init__(self, master_key: bytes) -> None:
        if len(master_key) != KEY_SIZE:
            raise ValueError(f"Master key must be {KEY_SIZE} bytes, got {len(master_key)}")
        self._aead = AESGCM(master_key)

    @classmethod
    def from_master_key(cls, workspace: Path | str | None = None) -> PayloadCipher:
        """Build a cipher from the on-disk master key."""
        return cls(get_master_key(workspace))

    def encrypt_bytes(self, plaintext: bytes) -> bytes:
        """Return nonce + ciphertext + tag, with a fresh nonce per call."""
        nonce = secrets.token_bytes(_NONCE_SIZE)
        return nonce + self._aead.encrypt(nonce, plaintext, None)

    def decrypt_bytes(self, data: bytes) -> bytes:
        if len(data) < _NONCE_SIZE + _TAG_SIZE:
            raise ValueError("Encrypted data too short")
        return self._aead.decrypt(data[:_NONCE_SIZE], data[_NONCE_SIZE:], None)

    def encrypt(self, plaintext: str) -> str:
        sealed = self.encrypt_bytes(plaintext.encode("utf-8"))
        return base64.urlsafe_b64encode(sealed).decode("ascii")

    def decrypt(self, token: str) -> str:
        try:
            data = base64.urlsafe_b64decode(token.encode("ascii"))
        except (binascii.Error, UnicodeEncodeError) as e:
            raise ValueError("Ciphertext is not valid base64") from e
        return self.decrypt_bytes(data).decode("utf-8")

    def seal(self, payload: Any) -> dict[str, str]:
        """Wrap a JSON-serializable payload into an encrypted envelope."""
        return {
            ENVELOPE_KEY: self.encrypt(json.dumps(payload, ensure_ascii=False)),
            "alg": ALGORITHM,
        }

    def unseal(self, envelope: dict[str, Any]) -> Any:
        """Reverse of seal()."""
        if envelope.get("alg") != ALGORITHM or ENVELOPE_KEY not in envelope:
            raise ValueError("Not an encrypted payload envelope")
        return json.loads(self.decrypt(envelope[ENVELOPE_KEY]))
