"""
SciX MCP Server

A Model Context Protocol server for the SciX / NASA ADS literature API,
speaking newline-delimited JSON-RPC 2.0 over stdin/stdout.

Architecture:
- protocol.py: JSON-RPC envelopes and session states
- dispatcher.py: request routing and the stdio loop
- tool_registry.py: tool descriptors and argument validation
- tools.py: tool handlers over SciXClient
- resources.py: static query-language reference text
- container: DI container (dependency-injector) for client lifecycle

Logs go to stderr; stdout carries protocol messages only.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import BinaryIO, TextIO

from scix_client.container import create_container
from scix_client.infrastructure.scix import SciXClient
from scix_client.shared.exceptions import ConfigurationError

from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None, default: str = "INFO") -> None:
    """Send logs to stderr at *level*, else ``SCIX_LOG_LEVEL``, else *default*."""
    name = (level or os.environ.get("SCIX_LOG_LEVEL", "").strip() or default).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


async def run_server(
    client: SciXClient,
    instream: BinaryIO | None = None,
    outstream: TextIO | None = None,
) -> None:
    """Serve JSON-RPC on the given streams (stdin/stdout by default) until EOF."""
    dispatcher = Dispatcher(client)
    try:
        await dispatcher.serve(instream or sys.stdin.buffer, outstream or sys.stdout)
    finally:
        await client.close()


def main(token: str | None = None) -> int:
    """Run the MCP server."""
    configure_logging()

    try:
        container = create_container(token=token)
        client = container.client()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if not client.config.has_token:
        # Stay up so the host can list tools; API calls report the problem.
        logger.warning("No API token configured; set SCIX_API_TOKEN (or ADS_API_TOKEN)")

    try:
        asyncio.run(run_server(client))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
