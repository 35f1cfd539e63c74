"""
MCP server for bledesk.

Lets an LLM read the desk height, move it to a height or a saved favorite,
and manage favorites through Model Context Protocol tools.
"""

from desk_mcp.server import mcp, run_server

__all__ = ["mcp", "run_server"]
