"""
Error taxonomy for the privacy layer.

Messages never carry request bodies, headers or secret values, only the
URL or vault path needed to locate the failure.
"""

from __future__ import annotations


class PrivacyLayerError(Exception):
    """Base class for all privacy-layer errors."""


class ConfigurationError(PrivacyLayerError):
    """Invalid construction options or environment configuration."""


class TransportError(PrivacyLayerError):
    """Network or HTTP failure at the outbound transport boundary."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageError(PrivacyLayerError):
    """Secret-storage backend failure."""


class NotFoundError(PrivacyLayerError):
    """No credential stored at the derived vault path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No credential at {path}")
        self.path = path


class PrivacyAwareError(PrivacyLayerError):
    """Gateway-level wrapper around a transport failure."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"Request to {url} failed ({type(cause).__name__})")
        self.url = url
        self.cause = cause
