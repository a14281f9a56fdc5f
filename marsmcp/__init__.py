"""marsmcp: MCP tools for the USDA AMS Market News (MARS) API."""

__version__ = "0.1.0"
