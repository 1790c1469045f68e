"""Gateway data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RequestEnvelope(BaseModel):
    """One outbound request as handed to a transport (after all privacy transforms)."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = "GET"
    payload: Any = None
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("method")
    @classmethod
    def _upper_method(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("method must not be empty")
        return v

    @field_validator("url")
    @classmethod
    def _check_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must be absolute http(s)")
        return v
