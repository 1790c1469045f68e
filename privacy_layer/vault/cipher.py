"""
Field-selective encryption for credential records.

Every stored field carries an explicit marker, so read-time decryption
touches exactly the fields that write-time encryption produced:

    {"format": 1,
     "fields": {"apiKey": {"encrypted": true,  "value": "<token>"},
                "label":  {"encrypted": false, "value": "work"}}}

Sensitive values are JSON-encoded before encryption so non-string values
come back with their original type.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from privacy_layer.crypto import PayloadCipher
from privacy_layer.redaction import is_sensitive_key

RECORD_FORMAT = 1


class CredentialCipher:
    def __init__(self, cipher: PayloadCipher) -> None:
        self.cipher = cipher

    def encrypt_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Build the at-rest record; sensitive fields are encrypted."""
        stored: dict[str, dict[str, Any]] = {}
        for name, value in fields.items():
            if is_sensitive_key(name):
                token = self.cipher.encrypt(json.dumps(value, ensure_ascii=False))
                stored[name] = {"encrypted": True, "value": token}
            else:
                stored[name] = {"encrypted": False, "value": value}
        return {"format": RECORD_FORMAT, "fields": stored}

    def decrypt_fields(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Reverse of encrypt_fields(). Only fields marked encrypted are decrypted."""
        if record.get("format") != RECORD_FORMAT or not isinstance(record.get("fields"), dict):
            raise ValueError(f"Unsupported credential record format: {record.get('format')!r}")
        result: dict[str, Any] = {}
        for name, entry in record["fields"].items():
            if entry.get("encrypted"):
                result[name] = json.loads(self.cipher.decrypt(entry["value"]))
            else:
                result[name] = entry.get("value")
        return result
