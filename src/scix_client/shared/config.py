"""
Client configuration.

Read once at client construction and never mutated afterwards, so it can be
shared between tasks without locking.

Environment Variables:
    SCIX_API_TOKEN: API token (falls back to ADS_API_TOKEN)
    SCIX_API_URL: Base URL override (default: https://api.adsabs.harvard.edu/v1)
    SCIX_RATE_LIMIT: Requests per second for the local budget (default: 5)
    SCIX_TIMEOUT: Request timeout in seconds (default: 30)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import httpx

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.adsabs.harvard.edu/v1"
DEFAULT_RATE_LIMIT = 5.0
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "scix-client/0.1.0"

TOKEN_ENV_VARS = ("SCIX_API_TOKEN", "ADS_API_TOKEN")


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Immutable client settings."""

    token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    rate_limit: float = DEFAULT_RATE_LIMIT
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", validate_base_url(self.base_url))
        if self.rate_limit <= 0:
            raise ConfigurationError(f"rate limit must be positive, got {self.rate_limit!r}")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout!r}")
        if self.token is not None and not self.token.strip():
            object.__setattr__(self, "token", None)

    @property
    def has_token(self) -> bool:
        return self.token is not None

    @classmethod
    def from_env(cls, token: str | None = None, base_url: str | None = None) -> ClientConfig:
        """
        Build configuration from the environment.

        Explicit arguments take priority over environment variables.
        """
        resolved_token = token or _first_env(TOKEN_ENV_VARS)
        resolved_url = base_url or os.environ.get("SCIX_API_URL", "").strip() or DEFAULT_BASE_URL
        return cls(
            token=resolved_token,
            base_url=resolved_url,
            rate_limit=_float_env("SCIX_RATE_LIMIT", DEFAULT_RATE_LIMIT),
            timeout=_float_env("SCIX_TIMEOUT", DEFAULT_TIMEOUT),
        )


def validate_base_url(url: str) -> str:
    """Check that *url* is an absolute http(s) URL; return it without trailing slash."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigurationError(f"malformed base URL {url!r}: {e}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(f"base URL must be an absolute http(s) URL, got {url!r}")
    return url.rstrip("/")


def _first_env(names: tuple[str, ...]) -> str | None:
    for name in names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
