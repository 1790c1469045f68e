"""Fingerprint-resistant request header normalization."""

from __future__ import annotations

import random
from collections.abc import Mapping

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:128.0) Gecko/20100101 Firefox/128.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_5) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.5 Safari/605.1.15",
)

ACCEPT_LANGUAGE = "en-US"

_OVERRIDDEN = ("user-agent", "accept-language")


class HeaderAnonymizer:
    """Overwrites User-Agent and Accept-Language when enabled.

    All other headers, authorization included, pass through.
    """

    def __init__(self, enabled: bool, rng: random.Random | None = None) -> None:
        self.enabled = enabled
        self._rng = rng or random.Random()

    def apply(self, headers: Mapping[str, str] | None) -> dict[str, str]:
        result = dict(headers or {})
        if not self.enabled:
            return result
        for name in [h for h in result if h.lower() in _OVERRIDDEN]:
            del result[name]
        result["User-Agent"] = self._rng.choice(USER_AGENTS)
        result["Accept-Language"] = ACCEPT_LANGUAGE
        return result
