"""
Centralized configuration for the privacy layer.

All configuration is loaded from environment variables with sensible defaults
and validated once, at construction. Every config object is frozen.

Usage:
    from privacy_layer.config import get_config
    cfg = get_config()
    print(cfg.privacy.mask_pii)     # False
    print(cfg.vault.key_prefix)     # "privacy-layer/"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from urllib.parse import urlparse

from privacy_layer.errors import ConfigurationError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class PrivacyConfig:
    """Privacy policy flags for a gateway. Fixed for the gateway's lifetime."""

    anonymize_requests: bool = False
    route_through_tor: bool = False
    strip_metadata: bool = False
    mask_pii: bool = False
    encrypt_payloads: bool = False
    prevent_fingerprinting: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, bool):
                raise ConfigurationError(
                    f"PrivacyConfig.{f.name} must be a bool, got {type(value).__name__}"
                )


@dataclass(frozen=True)
class TransportConfig:
    """Outbound transport parameters."""

    timeout: float = 30.0
    overlay_url: str = "socks5h://127.0.0.1:9050"
    proxy_urls: tuple[str, ...] = ()
    verify: bool = True

    def __post_init__(self) -> None:
        check_timeout("TransportConfig.timeout", self.timeout)
        scheme = urlparse(self.overlay_url).scheme
        if scheme not in ("socks5", "socks5h"):
            raise ConfigurationError(
                f"TransportConfig.overlay_url must be a socks5:// or socks5h:// URL, "
                f"got scheme {scheme!r}"
            )
        for url in self.proxy_urls:
            if "://" not in url:
                raise ConfigurationError(f"Proxy URL has no scheme: {url!r}")


@dataclass(frozen=True)
class VaultConfig:
    """Secret-storage server connection parameters."""

    url: str = ""
    token: str | None = None
    namespace: str | None = None
    ssl_verify: bool = True
    mount: str = "secret"
    key_prefix: str = "privacy-layer/"
    timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.url and urlparse(self.url).scheme not in ("http", "https"):
            raise ConfigurationError(f"VaultConfig.url must be http(s), got {self.url!r}")
        if not self.mount or "/" in self.mount.strip("/"):
            raise ConfigurationError(f"VaultConfig.mount must be a single segment, got {self.mount!r}")
        if self.key_prefix and not self.key_prefix.endswith("/"):
            raise ConfigurationError("VaultConfig.key_prefix must end with '/'")
        check_timeout("VaultConfig.timeout", self.timeout)

    @property
    def headers(self) -> dict[str, str]:
        """Return auth/namespace headers for the vault HTTP API."""
        h: dict[str, str] = {}
        if self.token:
            h["X-Vault-Token"] = self.token
        if self.namespace:
            h["X-Vault-Namespace"] = self.namespace
        return h


@dataclass(frozen=True)
class Settings:
    """Top-level privacy-layer configuration."""

    workspace: Path = field(default_factory=lambda: Path.home() / ".privacy-layer")
    privacy: PrivacyConfig = field(default_factory=PrivacyConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    vault: VaultConfig = field(default_factory=VaultConfig)


def check_timeout(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive number, got {value!r}")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


# Singleton
_config: Settings | None = None


def get_config() -> Settings:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Settings:
    """Load configuration from environment variables."""
    workspace = Path(os.environ.get("PRIVACY_LAYER_WORKSPACE", Path.home() / ".privacy-layer"))

    privacy = PrivacyConfig(
        anonymize_requests=_env_bool("PRIVACY_LAYER_ANONYMIZE_REQUESTS"),
        route_through_tor=_env_bool("PRIVACY_LAYER_ROUTE_THROUGH_TOR"),
        strip_metadata=_env_bool("PRIVACY_LAYER_STRIP_METADATA"),
        mask_pii=_env_bool("PRIVACY_LAYER_MASK_PII"),
        encrypt_payloads=_env_bool("PRIVACY_LAYER_ENCRYPT_PAYLOADS"),
        prevent_fingerprinting=_env_bool("PRIVACY_LAYER_PREVENT_FINGERPRINTING"),
    )

    proxy_env = os.environ.get("PRIVACY_LAYER_PROXY_URLS", "")
    transport = TransportConfig(
        timeout=_env_float("PRIVACY_LAYER_TIMEOUT", 30.0),
        overlay_url=os.environ.get("PRIVACY_LAYER_OVERLAY_URL", "socks5h://127.0.0.1:9050"),
        proxy_urls=tuple(u.strip() for u in proxy_env.split(",") if u.strip()),
    )

    vault = VaultConfig(
        url=os.environ.get("PRIVACY_LAYER_VAULT_URL", ""),
        token=os.environ.get("PRIVACY_LAYER_VAULT_TOKEN") or None,
        namespace=os.environ.get("PRIVACY_LAYER_VAULT_NAMESPACE") or None,
        ssl_verify=_env_bool("PRIVACY_LAYER_VAULT_SSL_VERIFY", True),
        mount=os.environ.get("PRIVACY_LAYER_VAULT_MOUNT", "secret"),
        key_prefix=os.environ.get("PRIVACY_LAYER_VAULT_PREFIX", "privacy-layer/"),
        timeout=_env_float("PRIVACY_LAYER_VAULT_TIMEOUT", 10.0),
    )

    return Settings(workspace=workspace, privacy=privacy, transport=transport, vault=vault)


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
