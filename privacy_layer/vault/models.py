"""Vault data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Credential(BaseModel):
    """A stored third-party credential (plaintext view, never persisted as is)."""

    service_name: str
    user_id: str
    credential_id: str
    fields: dict[str, Any] = Field(default_factory=dict)
