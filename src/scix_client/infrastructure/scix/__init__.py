"""
SciX Module - Typed operations on the SciX / NASA ADS API.

Module Structure:
    parse.py      - Response parsing (papers, authors, arXiv ids)
    search.py     - Search, bigquery, citation graph, single paper
    export.py     - Citation export
    metrics.py    - Metrics, networks, citation helper
    resolve.py    - Object, reference and link resolution
    libraries.py  - Personal libraries, permissions, notes, set operations

Usage:
    from scix_client.infrastructure.scix import SciXClient

    async with SciXClient.from_env() as client:
        results = await client.search('author:"Einstein" year:1905', rows=5)
"""

from __future__ import annotations

from scix_client.infrastructure.http.client import SciXBase
from scix_client.shared.config import ClientConfig
from scix_client.shared.rate_limiter import RateLimiter

from .export import ExportMixin
from .libraries import LibrariesMixin
from .metrics import MetricsMixin
from .parse import DEFAULT_SEARCH_FIELDS, RICH_FIELDS, extract_arxiv_id
from .resolve import ResolveMixin
from .search import SearchMixin


class SciXClient(
    SearchMixin,
    ExportMixin,
    MetricsMixin,
    ResolveMixin,
    LibrariesMixin,
    SciXBase,
):
    """
    Complete SciX API interface combining all operation mixins.

    The rate limiter is passed in so several clients can share one budget;
    ``from_env`` creates a private one when none is given.

    Example:
        >>> client = SciXClient(ClientConfig(token="..."), RateLimiter(capacity=5))
        >>> paper = await client.get_paper("1905AnP...322..891E")
    """

    @classmethod
    def from_env(
        cls,
        token: str | None = None,
        base_url: str | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> SciXClient:
        config = ClientConfig.from_env(token=token, base_url=base_url)
        return cls(config, rate_limiter or RateLimiter(capacity=config.rate_limit))


__all__ = [
    "DEFAULT_SEARCH_FIELDS",
    "RICH_FIELDS",
    "ExportMixin",
    "LibrariesMixin",
    "MetricsMixin",
    "ResolveMixin",
    "SciXClient",
    "SearchMixin",
    "extract_arxiv_id",
]
