"""MCP server wiring (FastMCP)."""
