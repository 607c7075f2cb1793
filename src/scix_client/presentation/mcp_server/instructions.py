"""
MCP Server Instructions - Usage guide returned from ``initialize``.
"""

from __future__ import annotations

SERVER_INSTRUCTIONS = """
SciX MCP Server - search and manage the SciX / NASA ADS astrophysics literature.

Start with scix_search. Queries use ADS syntax:
  author:"Einstein" year:1905
  title:"dark matter" AND property:refereed
  citations(bibcode:2019ApJ...882L..24A)

Results list bibcodes; pass them to:
  scix_get_paper          full metadata, abstract and PDF links for one paper
  scix_export             BibTeX, RIS, AASTeX and 14 other citation formats
  scix_metrics            h-index, citation and read statistics
  scix_network            author collaboration or paper citation networks
  scix_citation_helper    papers often co-cited with a set you already have
  scix_bigquery           filter a known list of bibcodes with a query

Resolution:
  scix_object_search      astronomical object names (M31, Crab Nebula)
  scix_resolve_reference  free-text citations to bibcodes
  scix_resolve_links      full text, data and related links for a paper

Libraries (require a token with library access):
  scix_library            list/get/create/edit/delete, permissions, transfer
  scix_library_documents  add/remove papers, notes, set operations, add_by_query

Library changes are applied once and not retried; check the result before
repeating a call. Read scix://fields and scix://syntax for query help.
Rate limits are enforced locally; a rate-limited error reports how long to wait.
""".strip()
