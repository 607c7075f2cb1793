"""
Allow running MCP server as module: python -m scix_client.presentation.mcp_server
"""

from __future__ import annotations

import sys

from .server import main

if __name__ == "__main__":
    sys.exit(main())
