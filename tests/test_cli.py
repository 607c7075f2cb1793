"""Tests for the ``scix`` command-line interface."""

from __future__ import annotations

import io
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from scix_client.domain.models import Author, ExportFormat, Library, Paper, ResolvedReference, SearchResponse, Sort
from scix_client.infrastructure.scix import DEFAULT_SEARCH_FIELDS, SciXClient
from scix_client.presentation import cli
from scix_client.shared.exceptions import InvalidQueryError, NotFoundError, RateLimitError


@pytest.fixture
def mock_client():
    return AsyncMock(spec=SciXClient)


async def run(argv: list[str], client) -> str:
    out = io.StringIO()
    await cli.run_command(cli.build_parser().parse_args(argv), client, out)
    return out.getvalue()


def _results() -> SearchResponse:
    return SearchResponse(
        papers=[
            Paper(
                bibcode="1905AnP...322..891E",
                title="Zur Elektrodynamik bewegter Körper",
                authors=[Author.from_ads_format("Einstein, A.")],
                year=1905,
                citation_count=1500,
            )
        ],
        num_found=1,
    )


class TestParser:
    def test_search_defaults(self):
        args = cli.build_parser().parse_args(["search", "black holes"])
        assert args.command == "search"
        assert args.rows == 10
        assert args.start == 0
        assert args.output == "table"

    def test_global_options(self):
        args = cli.build_parser().parse_args(["--token", "t", "-o", "json", "cites", "B", "-n", "5"])
        assert args.token == "t"
        assert args.output == "json"
        assert args.rows == 5

    def test_refs_default_rows(self):
        assert cli.build_parser().parse_args(["refs", "B"]).rows == 25
        assert cli.build_parser().parse_args(["similar", "B"]).rows == 10

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_library_subcommands(self):
        args = cli.build_parser().parse_args(["libraries", "create", "Reading", "-d", "desc", "--public"])
        assert args.library_action == "create"
        assert args.name == "Reading"
        assert args.public is True


class TestRunCommand:
    async def test_search_table(self, mock_client):
        mock_client.search_with_options.return_value = _results()

        output = await run(["search", "author:Einstein", "-s", "citation_count desc"], mock_client)

        lines = output.splitlines()
        assert lines[0] == "Found 1 results:"
        assert lines[1].split() == ["Bibcode", "Year", "First", "Author", "Title", "Cites"]
        assert "1905AnP...322..891E" in lines[3]
        assert "Einstein" in lines[3]
        mock_client.search_with_options.assert_awaited_once_with(
            "author:Einstein",
            fields=DEFAULT_SEARCH_FIELDS,
            sort=Sort.citation_count_desc(),
            rows=10,
            start=0,
        )

    async def test_search_json(self, mock_client):
        mock_client.search_with_options.return_value = _results()
        data = json.loads(await run(["-o", "json", "search", "x"], mock_client))
        assert data["num_found"] == 1
        assert data["papers"][0]["bibcode"] == "1905AnP...322..891E"

    def test_long_titles_truncated(self):
        paper = Paper(bibcode="B", title="x" * 100)
        out = io.StringIO()
        cli.print_papers_table([paper], out)
        assert "x" * 57 + "..." in out.getvalue()
        assert "x" * 58 not in out.getvalue()

    async def test_export(self, mock_client):
        mock_client.export.return_value = "TY  - JOUR"
        assert await run(["export", "A", "B", "-f", "ris"], mock_client) == "TY  - JOUR\n"
        mock_client.export.assert_awaited_once_with(["A", "B"], ExportFormat.RIS)

    async def test_cites(self, mock_client):
        mock_client.citations.return_value = _results()
        output = await run(["cites", "B", "-n", "3"], mock_client)
        assert output.startswith("Citations of B:")
        mock_client.citations.assert_awaited_once_with("B", 3)

    async def test_resolve(self, mock_client):
        mock_client.resolve_references.return_value = [
            ResolvedReference("Einstein 1905", "1905AnP...322..891E"),
            ResolvedReference("nonsense"),
        ]
        output = await run(["resolve", "Einstein 1905", "nonsense"], mock_client)
        assert output.splitlines() == ["Einstein 1905 -> 1905AnP...322..891E", "nonsense -> (not found)"]

    async def test_links(self, mock_client):
        mock_client.resolve_links.return_value = {"links": {"count": 0}}
        await run(["links", "B", "-t", "data"], mock_client)
        mock_client.resolve_links.assert_awaited_once_with("B", "data")

    async def test_libraries_list(self, mock_client):
        mock_client.list_libraries.return_value = [Library(id="abc", name="Reading", num_documents=3)]
        lines = (await run(["libraries", "list"], mock_client)).splitlines()
        assert lines[0].split() == ["ID", "Name", "Documents", "Public"]
        assert lines[2].split() == ["abc", "Reading", "3", "false"]

    async def test_libraries_create(self, mock_client):
        mock_client.create_library.return_value = Library(id="new", name="Reading")
        output = await run(["libraries", "create", "Reading"], mock_client)
        assert output == "Created library: Reading (new)\n"
        mock_client.create_library.assert_awaited_once_with("Reading", description="", public=False)

    async def test_libraries_delete(self, mock_client):
        assert await run(["libraries", "delete", "abc"], mock_client) == "Deleted library: abc\n"


class TestMain:
    @pytest.fixture
    def patched(self, monkeypatch, mock_client):
        monkeypatch.setattr(cli, "create_container", lambda token=None: SimpleNamespace(client=lambda: mock_client))
        return mock_client

    def test_success(self, patched, capsys):
        patched.resolve_objects.return_value = {"M31": "..."}
        assert cli.main(["objects", "M31"]) == 0
        assert json.loads(capsys.readouterr().out) == {"M31": "..."}

    def test_validation_error_is_usage(self, patched, capsys):
        patched.search_with_options.side_effect = InvalidQueryError("(", "Unbalanced parentheses")
        assert cli.main(["search", "("]) == cli.EXIT_USAGE
        err = capsys.readouterr().err
        assert "**Error**: " in err
        assert "Unbalanced parentheses" in err
        assert "**Suggestion**: " in err
        assert "**Example**: " in err

    def test_rate_limit_shows_retry_after(self, patched, capsys):
        patched.metrics.side_effect = RateLimitError(30.0)
        assert cli.main(["metrics", "A"]) == cli.EXIT_ERROR
        assert "Retry after 30.0 seconds" in capsys.readouterr().err

    def test_api_error(self, patched, capsys):
        patched.get_library.side_effect = NotFoundError("Library", "abc")
        assert cli.main(["libraries", "get", "abc"]) == cli.EXIT_ERROR
        assert "Not found" in capsys.readouterr().err

    def test_configuration_error(self, monkeypatch, capsys):
        monkeypatch.setenv("SCIX_API_URL", "nope")
        assert cli.main(["search", "x"]) == cli.EXIT_USAGE
        assert "Configuration error" in capsys.readouterr().err
