"""
SciX MCP Server

Usage as standalone server:
    scix-mcp
    python -m scix_client.presentation.mcp_server

Or in mcp.json:
    {
        "servers": {
            "scix": {
                "type": "stdio",
                "command": "scix-mcp",
                "env": {"SCIX_API_TOKEN": "..."}
            }
        }
    }

Usage for integration:
    from scix_client import SciXClient
    from scix_client.presentation.mcp_server import Dispatcher

    dispatcher = Dispatcher(SciXClient.from_env())
    reply = await dispatcher.handle_line(line)
"""

from __future__ import annotations

from .dispatcher import Dispatcher
from .server import main, run_server

__all__ = ["Dispatcher", "main", "run_server"]
