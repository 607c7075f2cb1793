"""
MCP Resources - Static query-language reference text.

Resources:
- scix://fields
- scix://syntax
"""

from __future__ import annotations

from dataclasses import dataclass

from mcp.types import Resource

from scix_client.shared.exceptions import InvalidParameterError

FIELDS_REFERENCE = """SciX Searchable Fields
======================

Common search fields:
  author       - Author name (e.g., author:"Einstein, A.")
  first_author - First author only
  title        - Title words
  abs          - Abstract words
  year         - Publication year (e.g., year:2023 or year:[2020 TO 2023])
  bibcode      - ADS bibcode
  doi          - Digital Object Identifier
  identifier   - Any identifier (DOI, arXiv, bibcode)
  bibstem      - Journal abbreviation (e.g., bibstem:ApJ)
  object       - Astronomical object name
  orcid        - Author ORCID
  keyword      - Keywords
  full         - Full text search
  property     - Paper properties (refereed, openaccess, etc.)
  doctype      - Document type (article, inproceedings, etc.)

Common returnable fields:
  bibcode, title, author, year, pub, abstract, doi, identifier,
  doctype, esources, citation_count, reference, property, aff,
  orcid_pub, keyword, volume, page, read_count
"""

SYNTAX_REFERENCE = """SciX Query Syntax Guide
=======================

Field queries:
  author:"Einstein"           - Author search
  title:"dark matter"         - Title search
  year:2023                   - Exact year
  year:[2020 TO 2023]         - Year range

Boolean operators:
  term1 AND term2             - Both terms
  term1 OR term2              - Either term
  NOT term                    - Exclude term
  (term1 OR term2) AND term3  - Grouping

Functional operators:
  citations(bibcode:XXX)      - Papers citing XXX
  references(bibcode:XXX)     - Papers referenced by XXX
  similar(bibcode:XXX)        - Content-similar papers
  trending(bibcode:XXX)       - Trending co-reads
  reviews(bibcode:XXX)        - Review articles

Wildcards:
  author:"Eins*"              - Prefix matching
  title:galax?                - Single character wildcard

Properties:
  property:refereed           - Refereed papers only
  property:openaccess         - Open access papers
  property:nonarticle         - Non-article documents

Sort options:
  date desc                   - Newest first (default)
  citation_count desc         - Most cited first
  score desc                  - Best match first
  read_count desc             - Most read first
"""


@dataclass(frozen=True)
class StaticResource:
    uri: str
    name: str
    description: str
    text: str
    mime_type: str = "text/plain"

    def to_mcp_resource(self) -> Resource:
        return Resource(uri=self.uri, name=self.name, description=self.description, mimeType=self.mime_type)


RESOURCES: tuple[StaticResource, ...] = (
    StaticResource(
        "scix://fields",
        "SciX Searchable Fields",
        "List of searchable and returnable fields in ADS",
        FIELDS_REFERENCE,
    ),
    StaticResource(
        "scix://syntax",
        "SciX Query Syntax",
        "Guide to ADS query syntax",
        SYNTAX_REFERENCE,
    ),
)

# URL normalisation must not alter the custom-scheme URIs.
RESOURCE_LIST_PAYLOAD = [
    {**r.to_mcp_resource().model_dump(by_alias=True, exclude_none=True, mode="json"), "uri": r.uri} for r in RESOURCES
]


def read_resource(uri: str) -> dict:
    """
    ``resources/read`` result for *uri*.

    Raises:
        InvalidParameterError: unknown URI
    """
    for resource in RESOURCES:
        if resource.uri == uri:
            return {"contents": [{"uri": resource.uri, "mimeType": resource.mime_type, "text": resource.text}]}
    raise InvalidParameterError("uri", f"Unknown resource: {uri}")
