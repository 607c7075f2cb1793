"""Tests for tool output formatting."""

from __future__ import annotations

import json

from scix_client.domain.models import Author, Library, Paper, PdfLink, PdfLinkType, SearchResponse
from scix_client.presentation.mcp_server.formatting import format_paper, format_search_results, to_json_text


def _paper(bibcode: str = "2019ApJ...882L..24A", **kwargs) -> Paper:
    kwargs.setdefault("title", "First M87 Event Horizon Telescope Results")
    return Paper(bibcode=bibcode, **kwargs)


class TestSearchResults:
    def test_numbered_list(self):
        results = SearchResponse(
            papers=[
                _paper(
                    year=2019,
                    authors=[Author.from_ads_format("Akiyama, Kazunori")],
                    doi="10.3847/2041-8213/ab0ec7",
                    citation_count=3000,
                )
            ],
            num_found=1,
        )

        text = format_search_results(results)

        assert text.startswith("Found 1 results:")
        assert "1. First M87 Event Horizon Telescope Results (2019)" in text
        assert "   Akiyama" in text
        assert "   DOI: 10.3847/2041-8213/ab0ec7" in text
        assert "   Citations: 3000" in text
        assert "start=" not in text

    def test_many_authors_abbreviated(self):
        authors = [Author.from_ads_format(f"Author{i}, A") for i in range(5)]
        text = format_search_results(SearchResponse(papers=[_paper(authors=authors)], num_found=1))
        assert "Author0 et al." in text

    def test_pagination_hint(self):
        results = SearchResponse(papers=[_paper("A"), _paper("B")], num_found=10)
        text = format_search_results(results, start=4)
        assert "5. " in text
        assert "6. " in text
        assert "*Use start=6 to see more results*" in text

    def test_missing_year_blank(self):
        text = format_search_results(SearchResponse(papers=[_paper(title="Untitled")], num_found=1))
        assert "1. Untitled ()" in text


class TestPaper:
    def test_fields(self):
        paper = _paper(
            year=2019,
            authors=[Author.from_ads_format("Akiyama, Kazunori")],
            publication="ApJL",
            volume="875",
            page="L1",
            arxiv_id="1906.11238",
            affiliations=["MIT", "MIT", "-"],
            abstract="We present the first image.",
            pdf_links=[PdfLink("https://arxiv.org/pdf/1906.11238", PdfLinkType.ARXIV, "arXiv PDF")],
        )

        text = format_paper(paper)

        assert text.startswith("# First M87")
        assert "**Authors:** Akiyama, Kazunori" in text
        assert "**Volume:** 875, L1" in text
        assert "**arXiv:** 1906.11238" in text
        assert text.count("- MIT") == 1
        assert "- -" not in text
        assert "We present the first image." in text
        assert "- [arXiv PDF](https://arxiv.org/pdf/1906.11238)" in text
        assert "**ADS:** https://scixplorer.org/abs/2019ApJ...882L..24A" in text

    def test_long_author_list_truncated(self):
        authors = [Author.from_ads_format(f"Author{i}, A") for i in range(12)]
        text = format_paper(_paper(authors=authors))
        assert "... and 7 more" in text


class TestJsonText:
    def test_domain_object(self):
        assert json.loads(to_json_text(Library(id="L1")))["id"] == "L1"

    def test_list_of_objects(self):
        data = json.loads(to_json_text([Library(id="L1"), {"raw": True}]))
        assert data[0]["id"] == "L1"
        assert data[1] == {"raw": True}

    def test_plain_value(self):
        assert json.loads(to_json_text({"a": [1, 2]})) == {"a": [1, 2]}
