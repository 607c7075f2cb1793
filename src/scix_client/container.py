"""
Application DI Container (dependency-injector).

Owns the process-wide ``RateLimiter`` and the ``SciXClient`` built on it,
so every front end (CLI, MCP server, library users) shares one budget.

Usage::

    from scix_client.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict({
        "token": "my-token",
        "base_url": "https://api.adsabs.harvard.edu/v1",
        "rate_limit": 5,
    })

    client = container.client()

    # In tests, override any provider:
    container.client.override(providers.Object(mock_client))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from scix_client.shared.config import DEFAULT_BASE_URL, DEFAULT_RATE_LIMIT, DEFAULT_TIMEOUT, ClientConfig

logger = logging.getLogger(__name__)


def _create_client_config(
    token: str | None,
    base_url: str | None,
    rate_limit: float | None,
    timeout: float | None,
) -> ClientConfig:
    return ClientConfig(
        token=token or None,
        base_url=base_url or DEFAULT_BASE_URL,
        rate_limit=float(rate_limit or DEFAULT_RATE_LIMIT),
        timeout=float(timeout or DEFAULT_TIMEOUT),
    )


def _create_rate_limiter(client_config: ClientConfig) -> object:
    """Lazy factory for RateLimiter: capacity equals the per-second rate."""
    from scix_client.shared.rate_limiter import RateLimiter

    logger.debug(f"Creating rate limiter: {client_config.rate_limit:g} requests/s")
    return RateLimiter(capacity=client_config.rate_limit, per=1.0)


def _create_client(client_config: ClientConfig, rate_limiter: object) -> object:
    """Lazy factory for SciXClient (avoids top-level import)."""
    from scix_client.infrastructure.scix import SciXClient

    return SciXClient(client_config, rate_limiter)


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the SciX client.

    Providers:
    - ``client_config``: frozen ``ClientConfig`` built from ``config``
    - ``rate_limiter``: the single shared token bucket
    - ``client``: ``SciXClient`` borrowing ``rate_limiter``
    """

    config = providers.Configuration()

    client_config = providers.Singleton(
        _create_client_config,
        token=config.token,
        base_url=config.base_url,
        rate_limit=config.rate_limit,
        timeout=config.timeout,
    )

    rate_limiter = providers.Singleton(
        _create_rate_limiter,
        client_config=client_config,
    )

    client = providers.Singleton(
        _create_client,
        client_config=client_config,
        rate_limiter=rate_limiter,
    )


def create_container(token: str | None = None, base_url: str | None = None) -> ApplicationContainer:
    """Build a container configured from the environment; arguments override it."""
    env = ClientConfig.from_env(token=token, base_url=base_url)
    container = ApplicationContainer()
    container.config.from_dict(
        {
            "token": env.token,
            "base_url": env.base_url,
            "rate_limit": env.rate_limit,
            "timeout": env.timeout,
        }
    )
    return container


__all__ = ["ApplicationContainer", "create_container"]
