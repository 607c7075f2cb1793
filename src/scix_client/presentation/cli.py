"""
SciX command-line interface.

Usage:
    scix search 'author:"Einstein" year:1905' --rows 5
    scix export 1905AnP...322..891E --format ris
    scix cites 2019ApJ...882L..24A --output json
    scix libraries list
    scix serve

Every sub-command shares one rate-limited client built from the
environment; ``--token`` overrides ``SCIX_API_TOKEN`` / ``ADS_API_TOKEN``.
Results go to stdout, logs and errors to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TextIO

from scix_client import __version__
from scix_client.container import create_container
from scix_client.domain.models import ExportFormat, LinkType, Paper, Sort
from scix_client.infrastructure.scix import DEFAULT_SEARCH_FIELDS, SciXClient
from scix_client.shared.exceptions import ConfigurationError, SciXError, ValidationError

from .mcp_server.formatting import to_json_text
from .mcp_server.server import configure_logging, run_server

logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_USAGE = 2

_TITLE_WIDTH = 60


# =============================================================================
# Parser
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scix", description="Search the SciX / NASA ADS literature database")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--token", help="API token (overrides SCIX_API_TOKEN / ADS_API_TOKEN)")
    parser.add_argument(
        "--output",
        "-o",
        choices=("table", "json"),
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument("--log-level", help="Logging level (default: SCIX_LOG_LEVEL or WARNING)")

    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search the SciX database")
    search.add_argument("query", help="Search query (SciX/ADS syntax)")
    search.add_argument("-n", "--rows", type=int, default=10, help="Maximum results to return")
    search.add_argument("--start", type=int, default=0, help="Offset of the first result")
    search.add_argument("-s", "--sort", help='Sort order, e.g. "date desc" or "citation_count desc"')
    search.add_argument("-f", "--fields", help="Fields to return (comma-separated)")

    export = sub.add_parser("export", help="Export papers in a citation format")
    export.add_argument("bibcodes", nargs="+")
    export.add_argument(
        "-f",
        "--format",
        default="bibtex",
        help=f"Export format: {', '.join(ExportFormat.choices())}",
    )

    for name, help_text, rows in (
        ("refs", "Show papers referenced by a paper", 25),
        ("cites", "Show papers that cite a paper", 25),
        ("similar", "Show papers similar to a paper", 10),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("bibcode")
        cmd.add_argument("-n", "--rows", type=int, default=rows)

    metrics = sub.add_parser("metrics", help="Citation metrics for papers")
    metrics.add_argument("bibcodes", nargs="+")

    resolve = sub.add_parser("resolve", help="Resolve free-text references to bibcodes")
    resolve.add_argument("references", nargs="+")

    objects = sub.add_parser("objects", help="Resolve astronomical object names")
    objects.add_argument("objects", nargs="+", help="Object names (M31, NGC 1234, etc.)")

    links = sub.add_parser("links", help="Resolve links for a paper")
    links.add_argument("bibcode")
    links.add_argument("-t", "--type", dest="link_type", help=f"Link type: {', '.join(LinkType.choices())}")

    libraries = sub.add_parser("libraries", help="Manage SciX libraries")
    lib_sub = libraries.add_subparsers(dest="library_action", required=True)
    lib_sub.add_parser("list", help="List all libraries")
    lib_get = lib_sub.add_parser("get", help="Show a library and its documents")
    lib_get.add_argument("id")
    lib_create = lib_sub.add_parser("create", help="Create a new library")
    lib_create.add_argument("name")
    lib_create.add_argument("-d", "--description", default="")
    lib_create.add_argument("--public", action="store_true")
    lib_delete = lib_sub.add_parser("delete", help="Delete a library")
    lib_delete.add_argument("id")

    sub.add_parser("serve", help="Start the MCP server on stdio")
    return parser


# =============================================================================
# Output helpers
# =============================================================================


def _truncate(text: str, width: int = _TITLE_WIDTH) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def print_papers_table(papers: list[Paper], out: TextIO) -> None:
    rows = [("Bibcode", "Year", "First Author", "Title", "Cites")]
    for paper in papers:
        first = paper.first_author
        rows.append(
            (
                paper.bibcode,
                str(paper.year) if paper.year is not None else "",
                first.family_name if first else "-",
                _truncate(paper.title),
                str(paper.citation_count) if paper.citation_count is not None else "",
            )
        )
    _print_table(rows, out)


def _print_table(rows: list[tuple[str, ...]], out: TextIO) -> None:
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for n, row in enumerate(rows):
        out.write("  ".join(cell.ljust(w) for cell, w in zip(row, widths, strict=True)).rstrip() + "\n")
        if n == 0:
            out.write("  ".join("-" * w for w in widths) + "\n")


# =============================================================================
# Commands
# =============================================================================


async def run_command(args: argparse.Namespace, client: SciXClient, out: TextIO) -> None:
    """Execute one parsed command against *client*, writing results to *out*."""
    as_json = args.output == "json"

    match args.command:
        case "search":
            results = await client.search_with_options(
                args.query,
                fields=args.fields or DEFAULT_SEARCH_FIELDS,
                sort=Sort.parse(args.sort) if args.sort else None,
                rows=args.rows,
                start=args.start,
            )
            if as_json:
                out.write(to_json_text(results) + "\n")
            else:
                out.write(f"Found {results.num_found} results:\n")
                print_papers_table(results.papers, out)

        case "export":
            fmt = ExportFormat.from_str_loose(args.format) or ExportFormat.BIBTEX
            out.write(await client.export(args.bibcodes, fmt) + "\n")

        case "refs" | "cites" | "similar":
            fetch, heading = {
                "refs": (client.references, "References for"),
                "cites": (client.citations, "Citations of"),
                "similar": (client.similar, "Similar to"),
            }[args.command]
            results = await fetch(args.bibcode, args.rows)
            if as_json:
                out.write(to_json_text(results) + "\n")
            else:
                out.write(f"{heading} {args.bibcode}:\n")
                print_papers_table(results.papers, out)

        case "metrics":
            out.write(to_json_text(await client.metrics(args.bibcodes)) + "\n")

        case "resolve":
            resolved = await client.resolve_references(args.references)
            if as_json:
                out.write(to_json_text(resolved) + "\n")
            else:
                for ref in resolved:
                    out.write(f"{ref.reference} -> {ref.bibcode or '(not found)'}\n")

        case "objects":
            out.write(to_json_text(await client.resolve_objects(args.objects)) + "\n")

        case "links":
            out.write(to_json_text(await client.resolve_links(args.bibcode, args.link_type)) + "\n")

        case "libraries":
            await _run_library_command(args, client, out, as_json)

        case "serve":
            await run_server(client)

        case _:
            raise ValueError(f"Unknown command: {args.command}")


async def _run_library_command(args: argparse.Namespace, client: SciXClient, out: TextIO, as_json: bool) -> None:
    match args.library_action:
        case "list":
            libraries = await client.list_libraries()
            if as_json:
                out.write(to_json_text(libraries) + "\n")
            else:
                rows = [("ID", "Name", "Documents", "Public")]
                rows.extend((lib.id, lib.name, str(lib.num_documents), str(lib.public).lower()) for lib in libraries)
                _print_table(rows, out)
        case "get":
            out.write(to_json_text(await client.get_library(args.id)) + "\n")
        case "create":
            library = await client.create_library(args.name, description=args.description, public=args.public)
            out.write(f"Created library: {library.name} ({library.id})\n")
        case "delete":
            await client.delete_library(args.id)
            out.write(f"Deleted library: {args.id}\n")
        case _:
            raise ValueError(f"Unknown library action: {args.library_action}")


async def _main_async(args: argparse.Namespace, client: SciXClient) -> None:
    if args.command == "serve":
        # run_server owns the client and closes it at EOF.
        await run_command(args, client, sys.stdout)
        return
    async with client:
        await run_command(args, client, sys.stdout)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        configure_logging(args.log_level)
    else:
        # Keep command output readable: only warnings unless asked otherwise.
        configure_logging(args.log_level, default="WARNING")

    try:
        client = create_container(token=args.token).client()
        asyncio.run(_main_async(args, client))
    except SciXError as e:
        print(e.to_agent_message(), file=sys.stderr)
        return EXIT_USAGE if isinstance(e, ValidationError | ConfigurationError) else EXIT_ERROR
    except KeyboardInterrupt:
        return EXIT_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
