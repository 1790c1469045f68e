"""Deterministic vault path derivation: prefix/credentials/<service>/<user>/<id>."""

from __future__ import annotations

DEFAULT_PREFIX = "privacy-layer/"

_DOT_SEGMENTS = frozenset({".", ".."})


class CredentialPathBuilder:
    """Pure mapping from (service, user, credential id) to a vault path."""

    def __init__(self, key_prefix: str = DEFAULT_PREFIX) -> None:
        if key_prefix and not key_prefix.endswith("/"):
            raise ValueError("key_prefix must end with '/'")
        self.key_prefix = key_prefix

    @staticmethod
    def _segment(name: str, value: str) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError(f"{name} must be a non-empty string")
        if "/" in value:
            raise ValueError(f"{name} must not contain '/': {value!r}")
        if value in _DOT_SEGMENTS:
            raise ValueError(f"{name} must not be a dot segment: {value!r}")
        return value

    def user_prefix(self, service_name: str, user_id: str) -> str:
        """Prefix shared by every credential of one (service, user) pair, trailing '/'."""
        service = self._segment("service_name", service_name)
        user = self._segment("user_id", user_id)
        return f"{self.key_prefix}credentials/{service}/{user}/"

    def path(self, service_name: str, user_id: str, credential_id: str) -> str:
        cred = self._segment("credential_id", credential_id)
        return self.user_prefix(service_name, user_id) + cred

    def credential_id(self, path: str, service_name: str, user_id: str) -> str | None:
        """Extract the credential id from a path under (service, user), or None."""
        prefix = self.user_prefix(service_name, user_id)
        if not path.startswith(prefix):
            return None
        rest = path[len(prefix) :]
        if not rest or "/" in rest:
            return None
        return rest
