"""
SciX API response parsing.

Turns raw JSON documents from ``/search/query`` and ``/search/bigquery``
into ``Paper`` / ``SearchResponse`` objects. Documents without a title are
dropped. Structural problems (missing ``response`` / ``docs``) raise
``ParseError``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

import httpx

from scix_client.domain.models import Author, Paper, PdfLink, SearchResponse
from scix_client.shared.exceptions import InvalidParameterError, ParseError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_FIELDS = "bibcode,title,author,year,pub,abstract,doi,identifier,doctype,esources,citation_count,property"

# Used by get_paper: adds reads, volume/page, keywords and affiliations.
RICH_FIELDS = DEFAULT_SEARCH_FIELDS + ",read_count,volume,page,keyword,aff"

# New-style arXiv id: YYMM.NNNN or YYMM.NNNNN, optional version.
_BARE_ARXIV_RE = re.compile(r"^\d{4}\.\d{4,5}(v\d+)?$")


def extract_arxiv_id(identifiers: Iterable[str]) -> str | None:
    """
    Find the arXiv id in an ADS identifier list.

    Accepts ``arXiv:``-prefixed ids (old and new style) and bare new-style
    ids. DOIs such as ``10.48550/arXiv.xxx`` and bibcodes never match.
    """
    for identifier in identifiers:
        if identifier.startswith("arXiv:"):
            return identifier[len("arXiv:") :]
        if _BARE_ARXIV_RE.match(identifier):
            return identifier
    return None


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _parse_year(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip()[:4])
    except ValueError:
        return None


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return max(0, int(value))


def document_to_paper(doc: dict[str, Any]) -> Paper | None:
    """Convert one API document to a ``Paper``; ``None`` when it has no title."""
    bibcode = doc["bibcode"]
    title = _first(doc.get("title")) or ""
    if not title:
        logger.debug(f"Skipping untitled document {bibcode}")
        return None

    identifiers = _as_list(doc.get("identifier"))
    doi = _first(doc.get("doi"))
    arxiv_id = extract_arxiv_id(identifiers)
    esources = _as_list(doc.get("esources"))

    return Paper(
        bibcode=bibcode,
        title=title,
        authors=[Author.from_ads_format(name) for name in _as_list(doc.get("author"))],
        year=_parse_year(doc.get("year")),
        publication=doc.get("pub"),
        abstract=doc.get("abstract"),
        doi=doi,
        arxiv_id=arxiv_id,
        identifiers=identifiers,
        esources=esources,
        citation_count=_optional_int(doc.get("citation_count")),
        read_count=_optional_int(doc.get("read_count")),
        doctype=doc.get("doctype"),
        properties=_as_list(doc.get("property")),
        keywords=_as_list(doc.get("keyword")),
        affiliations=_as_list(doc.get("aff")),
        volume=doc.get("volume"),
        page=_first(doc.get("page")),
        pdf_links=PdfLink.from_esources(esources, doi, arxiv_id, bibcode),
    )


def parse_search_payload(payload: Any) -> SearchResponse:
    """Parse a decoded search response body."""
    if not isinstance(payload, dict) or not isinstance(payload.get("response"), dict):
        raise ParseError("missing 'response' object", source="search")
    body = payload["response"]
    docs = body.get("docs")
    if not isinstance(docs, list):
        raise ParseError("missing 'docs' list", source="search")

    papers = [paper for doc in docs if (paper := document_to_paper(doc)) is not None]
    return SearchResponse(papers=papers, num_found=int(body.get("numFound") or 0))


def parse_search_response(response: httpx.Response) -> SearchResponse:
    return parse_search_payload(response.json())


def parse_export_response(response: httpx.Response) -> str:
    payload = response.json()
    if not isinstance(payload, dict) or not isinstance(payload.get("export"), str):
        raise ParseError("missing 'export' text", source="export")
    return payload["export"]


def require_bibcodes(bibcodes: Iterable[str], param: str = "bibcodes") -> list[str]:
    """Strip blanks; raise ``InvalidParameterError`` when nothing is left."""
    if isinstance(bibcodes, str):
        bibcodes = [bibcodes]
    cleaned = [b.strip() for b in bibcodes if b and b.strip()]
    if not cleaned:
        raise InvalidParameterError(param, "at least one bibcode is required")
    return cleaned
