"""FastMCP server exposing the MARS tools.

Every tool is a thin wrapper around ToolService.call_tool; the docstrings
below are what the agent reads to decide when to call each tool.

Logging goes to stderr because in stdio mode stdout carries the MCP
JSON-RPC stream.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from fastmcp import FastMCP

from marsmcp.core.services.tool_service import ToolResult, ToolService
from marsmcp.domain.models.common import ToolName

logger = logging.getLogger(__name__)

SERVER_NAME = "mars-mcp-server"
TRANSPORTS = ("stdio", "http")

ParamValue = Union[str, int, float, bool, List[Union[str, int, float, bool]], None]


def create_server(tool_service: ToolService, name: str = SERVER_NAME) -> FastMCP:
    """Builds a FastMCP server with every MARS tool registered."""
    mcp = FastMCP(name)

    async def _call(tool_name: str, args: Dict[str, Any]) -> ToolResult:
        result = await tool_service.call_tool(ToolName(tool_name), args)
        logger.debug(f"{tool_name} -> ok={result.get('ok')}")
        return result

    @mcp.tool()
    async def mars_get(path: str, params: Optional[Dict[str, ParamValue]] = None) -> dict:
        """Fetch data from the MARS API using a path and optional query params.

        Args:
            path: API path relative to the base URL (e.g. "/reports/1280").
            params: Query parameters. List values become repeated keys;
                parameter names are case-sensitive (e.g. "allSections").
        """
        return await _call("mars_get", {"path": path, "params": params})

    @mcp.tool()
    async def mars_health() -> dict:
        """Confirm the configured MARS base URL."""
        return await _call("mars_health", {})

    @mcp.tool()
    async def mars_list_reports() -> dict:
        """List the market reports published through MARS (slug ids and titles).

        Call this first to find the slug_id needed by mars_get_report.
        """
        return await _call("mars_list_reports", {})

    @mcp.tool()
    async def mars_get_report(
        slug_id: str,
        q: Optional[str] = None,
        sort: Optional[str] = None,
        all_sections: bool = False,
        corrections_only: bool = False,
        any_changes_since: Optional[str] = None,
        last_days: Optional[int] = None,
        last_reports: Optional[int] = None,
        ds_id: Optional[str] = None,
    ) -> dict:
        """Fetch the records of one market report by slug id.

        Args:
            slug_id: Report slug id from mars_list_reports.
            q: Filter expression, e.g. "commodity=Feeder Cattle".
            sort: Sort field; prefix with "-" for descending.
            all_sections: Return every section of the report.
            corrections_only: Only return corrected records.
            any_changes_since: Only records changed since this date (MM/DD/YYYY).
            last_days: Limit to reports from the last N days.
            last_reports: Limit to the last N reports.
            ds_id: Dataset id, for reports split into several datasets.
        """
        return await _call("mars_get_report", {
            "slug_id": slug_id,
            "q": q,
            "sort": sort,
            "all_sections": all_sections,
            "corrections_only": corrections_only,
            "any_changes_since": any_changes_since,
            "last_days": last_days,
            "last_reports": last_reports,
            "ds_id": ds_id,
        })

    @mcp.tool()
    async def mars_list_offices() -> dict:
        """List the Market News field offices."""
        return await _call("mars_list_offices", {})

    @mcp.tool()
    async def mars_list_commodities() -> dict:
        """List the commodities covered by Market News reports."""
        return await _call("mars_list_commodities", {})

    @mcp.tool()
    async def mars_list_market_types() -> dict:
        """List the market types (e.g. auction, terminal, shipping point)."""
        return await _call("mars_list_market_types", {})

    return mcp


def run_server(mcp: FastMCP, transport: str = "stdio", host: str = "127.0.0.1", port: int = 3000) -> None:
    """Runs the server until interrupted (blocking)."""
    if transport not in TRANSPORTS:
        raise ValueError(f"Unsupported transport: {transport!r}. Choose one of {TRANSPORTS}.")
    if transport == "stdio":
        logger.info("MARS MCP server running in stdio mode")
        mcp.run()
    else:
        logger.info(f"MARS MCP server listening on http://{host}:{port}")
        mcp.run(transport="http", host=host, port=port)
