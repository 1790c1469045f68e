"""
Sensitive-field detection and PII redaction for payloads and free text.

A field is sensitive when its name contains (case-insensitive) any of the
SENSITIVE_KEY_PARTS. The same predicate drives payload redaction in the
gateway and selective encryption in the vault. Free text is redacted by
regex: emails and phone numbers by default, or caller-supplied patterns.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

REDACTED = "[REDACTED]"

SENSITIVE_KEY_PARTS: tuple[str, ...] = (
    "password",
    "token",
    "secret",
    "key",
    "apikey",
    "api_key",
)

# Emails, then phone numbers with an optional country code
DEFAULT_TEXT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"[A-Za-z0-9._-]+@[A-Za-z0-9._-]+\.[A-Za-z0-9_-]+"),
    re.compile(r"(?:\+\d{1,3}[\s-]?)?\(?\d{3}\)?[\s-]?\d{3}[\s-]?\d{4}"),
)


def is_sensitive_key(name: str, extra_parts: Iterable[str] = ()) -> bool:
    """Return True if a field name looks like it holds secret material."""
    lowered = name.lower()
    return any(part in lowered for part in (*SENSITIVE_KEY_PARTS, *extra_parts))


class PIIRedactor:
    """Replaces sensitive top-level fields of a mapping, or PII in text, with REDACTED."""

    def __init__(self, extra_parts: Iterable[str] = ()) -> None:
        self.extra_parts = tuple(p.lower() for p in extra_parts)

    def is_sensitive(self, name: str) -> bool:
        return is_sensitive_key(name, self.extra_parts)

    def sanitize(self, data: Any) -> Any:
        """Return a redacted copy of a mapping; anything else is returned unchanged.

        Only one level of keys is inspected. The input is never mutated.
        """
        if not isinstance(data, Mapping):
            return data
        return {
            key: REDACTED if isinstance(key, str) and self.is_sensitive(key) else value
            for key, value in data.items()
        }

    def redact_text(
        self,
        text: str,
        patterns: Iterable[str | re.Pattern[str]] | None = None,
    ) -> str:
        """Replace every match of the patterns in free text with REDACTED.

        Defaults to DEFAULT_TEXT_PATTERNS (emails, phone numbers). Supplied
        patterns replace the defaults rather than extending them.
        """
        compiled = DEFAULT_TEXT_PATTERNS if patterns is None else tuple(
            re.compile(p) for p in patterns
        )
        for pattern in compiled:
            text = pattern.sub(REDACTED, text)
        return text
