"""
Presentation Layer - User Interfaces

Contains:
- mcp_server: Model Context Protocol server over stdio
- cli: ``scix`` command-line tool
"""
