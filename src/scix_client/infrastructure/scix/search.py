"""
Search Mixin - Search and discovery endpoints.

Covers: search, paginated search, bigquery, references, citations,
similar, coreads and single-paper lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from scix_client.application.query import validate_query
from scix_client.domain.models import Paper, SearchResponse, Sort
from scix_client.infrastructure.http.client import ApiRequest
from scix_client.shared.exceptions import InvalidParameterError, NotFoundError

from .parse import DEFAULT_SEARCH_FIELDS, RICH_FIELDS, parse_search_response, require_bibcodes

logger = logging.getLogger(__name__)

DEFAULT_SORT = "date desc"

# Largest page the search endpoint serves.
MAX_ROWS_PER_PAGE = 2000


class SearchMixin:
    """
    Mixin providing search functionality.

    Methods:
        search: Query with default fields and sort
        search_with_options: Full control over fields, sort, pagination
        search_all: Merge pages until max_results is reached
        bigquery: Search within a known set of bibcodes
        references / citations / similar / coreads: Graph lookups
        get_paper: Single paper with rich metadata
    """

    async def search(self, query: str, rows: int = 10) -> SearchResponse:
        """Search with the default field list, newest first."""
        return await self.search_with_options(query, rows=rows)

    async def search_with_options(
        self,
        query: str,
        fields: str = DEFAULT_SEARCH_FIELDS,
        sort: Sort | str | None = None,
        rows: int = 10,
        start: int = 0,
    ) -> SearchResponse:
        """
        Search with full control over fields, sort, and pagination.

        Args:
            query: Query in SciX syntax, e.g. ``author:"Einstein" year:1905``
            fields: Comma-separated list of fields to return
            sort: ``Sort`` or text such as ``"citation_count desc"``
            rows: Page size
            start: Offset of the first result

        Raises:
            InvalidQueryError: the query is structurally malformed (no request sent)
        """
        validate_query(query)
        if rows < 0:
            raise InvalidParameterError("rows", "must be non-negative")
        if start < 0:
            raise InvalidParameterError("start", "must be non-negative")

        request = ApiRequest.get(
            "/search/query",
            [
                ("q", query),
                ("fl", fields),
                ("rows", rows),
                ("start", start),
                ("sort", str(sort) if sort else DEFAULT_SORT),
            ],
        )
        return await self.execute(request, parse_search_response)

    async def search_all(
        self,
        query: str,
        max_results: int = 1000,
        fields: str = DEFAULT_SEARCH_FIELDS,
        sort: Sort | str | None = None,
        page_size: int = 200,
    ) -> SearchResponse:
        """
        Fetch consecutive pages and merge them, up to ``max_results`` papers.

        Each page is a separate rate-limited request.
        """
        page_size = max(1, min(page_size, MAX_ROWS_PER_PAGE))
        merged = SearchResponse()
        start = 0

        while len(merged.papers) < max_results:
            rows = min(page_size, max_results - len(merged.papers))
            page = await self.search_with_options(query, fields=fields, sort=sort, rows=rows, start=start)
            merged.num_found = page.num_found
            merged.papers.extend(page.papers)
            # Untitled documents are dropped during parsing, so advance by
            # the requested page size rather than the number parsed.
            start += rows
            if not page.papers or start >= page.num_found:
                break

        logger.debug(f"search_all: {len(merged.papers)} of {merged.num_found} for {query!r}")
        return merged

    async def bigquery(
        self,
        bibcodes: Sequence[str],
        query: str | None = None,
        fields: str | None = None,
        sort: Sort | str | None = None,
        rows: int | None = None,
    ) -> SearchResponse:
        """Search within a known set of bibcodes, optionally filtered by *query*."""
        codes = require_bibcodes(bibcodes)
        q = validate_query(query) if query is not None else "*:*"
        fl = fields or DEFAULT_SEARCH_FIELDS
        sort_text = str(sort) if sort else DEFAULT_SORT
        body = {
            "bibcodes": codes,
            "query": f"q={q}&fl={fl}&rows={rows if rows is not None else len(codes)}&sort={sort_text}",
        }
        return await self.execute(ApiRequest.post("/search/bigquery", body), parse_search_response)

    async def references(self, bibcode: str, rows: int = 25) -> SearchResponse:
        """Papers referenced by *bibcode*."""
        return await self.search(f"references(bibcode:{bibcode})", rows)

    async def citations(self, bibcode: str, rows: int = 25) -> SearchResponse:
        """Papers citing *bibcode*."""
        return await self.search(f"citations(bibcode:{bibcode})", rows)

    async def similar(self, bibcode: str, rows: int = 10) -> SearchResponse:
        """Content-similar papers."""
        return await self.search(f"similar(bibcode:{bibcode})", rows)

    async def coreads(self, bibcode: str, rows: int = 10) -> SearchResponse:
        """Papers read by the same audience."""
        return await self.search(f"trending(bibcode:{bibcode})", rows)

    async def get_paper(self, bibcode: str) -> Paper:
        """
        Fetch one paper with rich metadata (reads, keywords, affiliations).

        *bibcode* is matched against all identifiers, so a DOI or arXiv id
        works too.

        Raises:
            NotFoundError: no document has this bibcode
        """
        bibcode = bibcode.strip()
        if not bibcode:
            raise InvalidParameterError("bibcode", "must not be empty")
        response = await self.search_with_options(f"identifier:{bibcode}", fields=RICH_FIELDS, rows=1)
        if not response.papers:
            raise NotFoundError("Paper", bibcode)
        return response.papers[0]
