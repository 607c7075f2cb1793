"""Tests for domain models and closed enumerations."""

from __future__ import annotations

import pytest

from scix_client.domain.models import (
    Author,
    ExportFormat,
    Library,
    LinkType,
    Metrics,
    NetworkType,
    Paper,
    PdfLink,
    PdfLinkType,
    Permission,
    ResolvedReference,
    SearchResponse,
    SetOperation,
    Sort,
    SortDirection,
)


class TestEnums:
    def test_export_formats_complete(self):
        assert len(ExportFormat) == 17
        assert ExportFormat.from_str_loose("BibTeX") is ExportFormat.BIBTEX
        assert ExportFormat.from_str_loose(" RIS ") is ExportFormat.RIS
        assert ExportFormat.from_str_loose("docx") is None
        assert ExportFormat.from_str_loose(None) is None

    def test_wire_values(self):
        assert str(ExportFormat.BIBTEX_ABS) == "bibtexabs"
        assert Permission.choices() == ["owner", "admin", "write", "read"]
        assert LinkType.choices() == ["esource", "data", "citation", "reference", "coreads"]
        assert NetworkType.from_str_loose("Paper") is NetworkType.PAPER

    def test_set_operation_sources(self):
        assert SetOperation.EMPTY.needs_sources is False
        for op in (SetOperation.UNION, SetOperation.INTERSECTION, SetOperation.DIFFERENCE, SetOperation.COPY):
            assert op.needs_sources is True


class TestSort:
    def test_default(self):
        assert str(Sort()) == "date desc"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("citation_count desc", "citation_count desc"),
            ("date asc", "date asc"),
            ("score", "score desc"),
            ("read_count ASC", "read_count asc"),
            ("", "date desc"),
            (None, "date desc"),
        ],
    )
    def test_parse(self, text, expected):
        assert str(Sort.parse(text)) == expected

    def test_factories(self):
        assert Sort.citation_count_desc() == Sort("citation_count", SortDirection.DESC)
        assert str(Sort.score_desc()) == "score desc"
        assert Sort.date_desc() == Sort()


class TestAuthor:
    def test_ads_format(self):
        a = Author.from_ads_format("Einstein, Albert")
        assert a.family_name == "Einstein"
        assert a.given_name == "Albert"
        assert a.display_name == "Albert Einstein"
        assert a.bibtex_name == "Einstein, Albert"

    def test_first_last(self):
        a = Author.from_ads_format("Albert Einstein")
        assert a.family_name == "Einstein"
        assert a.given_name == "Albert"

    def test_single_name(self):
        a = Author.from_ads_format("Planck Collaboration")
        assert a.family_name == "Collaboration"
        a = Author.from_ads_format("Euclid")
        assert a.family_name == "Euclid"
        assert a.given_name is None
        assert a.display_name == "Euclid"


class TestPdfLinks:
    def test_publisher_only_once(self):
        links = PdfLink.from_esources(["PUB_PDF", "PUB_HTML"], "10.1/x", None, "B")
        assert [link.link_type for link in links] == [PdfLinkType.PUBLISHER]
        assert links[0].url == "https://doi.org/10.1/x"

    def test_ads_scan(self):
        links = PdfLink.from_esources(["ADS_SCAN"], None, None, "1929PNAS...15..168H")
        assert links[0].link_type is PdfLinkType.ADS_SCAN
        assert links[0].url.endswith("/1929PNAS...15..168H")

    def test_fallbacks_without_esources(self):
        links = PdfLink.from_esources([], "10.1/x", "2301.12345", "B")
        assert [link.link_type for link in links] == [PdfLinkType.ARXIV, PdfLinkType.PUBLISHER]


class TestSerialization:
    def test_paper_to_dict(self):
        paper = Paper(bibcode="B", title="T", authors=[Author.from_ads_format("Doe, J")])
        d = paper.to_dict()
        assert d["bibcode"] == "B"
        assert d["authors"] == [{"name": "Doe, J", "family_name": "Doe", "given_name": "J"}]
        assert d["url"] == "https://scixplorer.org/abs/B"

    def test_search_response(self):
        resp = SearchResponse(papers=[Paper(bibcode="A", title="x"), Paper(bibcode="B", title="y")], num_found=10)
        assert resp.bibcodes == ["A", "B"]
        assert [p.bibcode for p in resp] == ["A", "B"]
        assert resp.to_dict()["num_found"] == 10

    def test_enum_serialized_as_value(self):
        link = PdfLink(url="u", link_type=PdfLinkType.ARXIV, label="arXiv PDF")
        assert link.to_dict()["link_type"] == "arxiv"


class TestMetrics:
    def test_flat_sections(self):
        m = Metrics.from_api(
            {
                "basic stats": {"number of papers": 2, "total number of reads": 100},
                "basic stats refereed": {"number of papers": 1},
                "citation stats": {"total number of citations": 50, "number of self-citations": 3},
                "indicators": {"h": 2, "g": 2, "i10": 1, "m": 0.5},
                "skipped bibcodes": ["Z"],
            }
        )
        assert m.basic_stats.total.number_of_papers == 2
        assert m.basic_stats.total.total_number_of_reads == 100
        assert m.basic_stats.refereed.number_of_papers == 1
        assert m.citation_stats.total.total_number_of_citations == 50
        assert m.citation_stats.total.number_of_self_citations == 3
        assert m.citation_stats.refereed is None
        assert m.h_index == 2
        assert m.indicators.m == 0.5
        assert m.skipped_bibcodes == ["Z"]

    def test_nested_sections(self):
        m = Metrics.from_api({"basic_stats": {"total": {"number_of_papers": 5}, "refereed": {"number_of_papers": 4}}})
        assert m.basic_stats.total.number_of_papers == 5
        assert m.basic_stats.refereed.number_of_papers == 4

    def test_unknown_keys_ignored(self):
        m = Metrics.from_api({"histograms": {}, "indicators": {"h": 7, "unknown": 1}})
        assert m.h_index == 7

    def test_empty(self):
        m = Metrics.from_api({})
        assert m.h_index is None
        assert m.basic_stats.total is None

    def test_non_object_rejected(self):
        with pytest.raises(TypeError):
            Metrics.from_api([])


class TestLibraries:
    def test_from_api(self):
        lib = Library.from_api(
            {"id": "abc", "name": "Reading", "num_documents": "3", "public": True, "owner": "me"}
        )
        assert lib.id == "abc"
        assert lib.num_documents == 3
        assert lib.public is True
        assert lib.description == ""

    def test_id_override(self):
        assert Library.from_api({"name": "x"}, library_id="given").id == "given"

    def test_resolved_reference(self):
        assert ResolvedReference("ref", "B").resolved
        assert not ResolvedReference("ref").resolved
