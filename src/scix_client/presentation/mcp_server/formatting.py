"""
Text formatting of typed results for MCP tool output.

Search results and single papers are rendered as Markdown for agents; all
other results are pretty-printed JSON.
"""

from __future__ import annotations

import json
from typing import Any

from scix_client.domain.models import Paper, SearchResponse


def to_json_text(value: Any) -> str:
    """Pretty JSON for any domain object, list of them, or plain JSON value."""
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    elif isinstance(value, list):
        value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
    return json.dumps(value, indent=2, ensure_ascii=False)


def _short_authors(paper: Paper) -> str:
    if len(paper.authors) > 3:
        return f"{paper.authors[0].family_name} et al."
    return ", ".join(a.family_name for a in paper.authors)


def format_search_results(results: SearchResponse, start: int = 0) -> str:
    """Numbered result list with a pagination hint when more results exist."""
    lines = [f"Found {results.num_found} results:", ""]
    for offset, paper in enumerate(results.papers, start=start + 1):
        year = paper.year if paper.year is not None else ""
        lines.append(f"{offset}. {paper.title} ({year})")
        lines.append(f"   {_short_authors(paper)}")
        lines.append(f"   Bibcode: {paper.bibcode}")
        if paper.doi:
            lines.append(f"   DOI: {paper.doi}")
        if paper.citation_count is not None:
            lines.append(f"   Citations: {paper.citation_count}")
        lines.append("")

    shown = start + len(results.papers)
    if results.num_found > shown:
        lines.append(f"*Use start={shown} to see more results*")
        lines.append("")
    return "\n".join(lines)


def format_paper(paper: Paper) -> str:
    """Detailed Markdown view of one paper."""
    if len(paper.authors) > 10:
        authors = "; ".join(a.name for a in paper.authors[:5])
        authors = f"{authors} ... and {len(paper.authors) - 5} more"
    else:
        authors = "; ".join(a.name for a in paper.authors)

    out = [f"# {paper.title}", ""]
    out.append(f"**Authors:** {authors}")
    out.append(f"**Year:** {paper.year if paper.year is not None else ''}")
    if paper.publication:
        out.append(f"**Publication:** {paper.publication}")
    if paper.volume:
        volume = paper.volume if not paper.page else f"{paper.volume}, {paper.page}"
        out.append(f"**Volume:** {volume}")
    if paper.doctype:
        out.append(f"**Type:** {paper.doctype}")
    out.append(f"**Bibcode:** {paper.bibcode}")
    if paper.doi:
        out.append(f"**DOI:** {paper.doi}")
    if paper.arxiv_id:
        out.append(f"**arXiv:** {paper.arxiv_id}")
    if paper.citation_count is not None:
        out.append(f"**Citations:** {paper.citation_count}")
    if paper.read_count is not None:
        out.append(f"**Reads:** {paper.read_count}")
    if paper.properties:
        out.append(f"**Properties:** {', '.join(paper.properties)}")
    if paper.keywords:
        out.append(f"**Keywords:** {', '.join(paper.keywords)}")

    affiliations = [a for a in dict.fromkeys(paper.affiliations) if a and a != "-"]
    if affiliations:
        out.append("")
        out.append("**Affiliations:**")
        out.extend(f"- {a}" for a in affiliations[:10])

    if paper.abstract:
        out.append("")
        out.append("**Abstract:**")
        out.append(paper.abstract)

    if paper.pdf_links:
        out.append("")
        out.append("**Links:**")
        out.extend(f"- [{link.label}]({link.url})" for link in paper.pdf_links)

    out.append("")
    out.append(f"**ADS:** {paper.url}")
    out.append("")
    return "\n".join(out)
