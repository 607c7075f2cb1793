"""
SciX Client - Async client for the SciX / NASA ADS literature API

Search papers, export citations, compute metrics, resolve references and
objects, and manage personal libraries. Every request goes through one
shared token-bucket rate limiter that also honours the server's rate-limit
headers.

Usage:
    from scix_client import SciXClient, QueryBuilder

    async with SciXClient.from_env() as client:
        query = QueryBuilder().author("Einstein").year(1905).build()
        results = await client.search(query, rows=5)

        for paper in results:
            print(f"{paper.bibcode}: {paper.title}")

Features:
    - Search, bigquery and citation graph traversal
    - Export in 17 citation formats
    - Metrics, author/paper networks, citation helper
    - Reference, object and link resolution
    - Library management, permissions, notes and set operations
    - MCP server (``scix-mcp``) and CLI (``scix``)
"""

__version__ = "0.1.0"

from .application.query import QueryBuilder, QueryValidator, validate_query
from .domain.models import (
    Author,
    ExportFormat,
    Library,
    LibraryDetail,
    LinkType,
    Metrics,
    NetworkType,
    Paper,
    PdfLink,
    Permission,
    ResolvedReference,
    SearchResponse,
    SetOperation,
    Sort,
    SortDirection,
)
from .infrastructure.scix import SciXClient
from .shared.config import ClientConfig
from .shared.exceptions import (
    APIError,
    AuthRequiredError,
    ConfigurationError,
    InvalidParameterError,
    InvalidQueryError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
    SciXError,
)
from .shared.rate_limiter import RateLimiter

__all__ = [
    "__version__",
    # Client
    "SciXClient",
    "ClientConfig",
    "RateLimiter",
    # Query tooling
    "QueryBuilder",
    "QueryValidator",
    "validate_query",
    # Results and enums
    "Author",
    "ExportFormat",
    "Library",
    "LibraryDetail",
    "LinkType",
    "Metrics",
    "NetworkType",
    "Paper",
    "PdfLink",
    "Permission",
    "ResolvedReference",
    "SearchResponse",
    "SetOperation",
    "Sort",
    "SortDirection",
    # Errors
    "SciXError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "NetworkError",
    "AuthRequiredError",
    "ParseError",
    "InvalidQueryError",
    "InvalidParameterError",
    "ConfigurationError",
]
