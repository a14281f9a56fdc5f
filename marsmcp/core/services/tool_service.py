"""Application service dispatching MCP tool calls to the market data source.

Each tool maps its arguments to a path + query, calls the data source and
returns a JSON-serializable dict. Upstream failures come back as structured
error dicts instead of exceptions, so the agent can reason about them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional
from urllib.parse import quote

from marsmcp.domain.interfaces.market_data import MarketDataSource
from marsmcp.domain.models.common import ApiPath, QueryParams, ToolName
from marsmcp.domain.models.mars import MarsError, MarsResponse
from marsmcp.infrastructure.mars.url import ReportQuery

logger = logging.getLogger(__name__)

ToolResult = Dict[str, Any]

_SCALAR_SCHEMA = [{"type": "string"}, {"type": "number"}, {"type": "boolean"}]

_REPORT_FILTER_PROPERTIES = {
    "q": {"type": "string", "description": "Filter expression, e.g. 'commodity=Feeder Cattle'."},
    "sort": {"type": "string", "description": "Sort field, prefix with '-' for descending (e.g. '-report_date')."},
    "all_sections": {"type": "boolean", "description": "Return every section of the report."},
    "corrections_only": {"type": "boolean", "description": "Only return corrected records."},
    "any_changes_since": {"type": "string", "description": "Only records changed since this date (MM/DD/YYYY)."},
    "last_days": {"type": "integer", "minimum": 0, "description": "Limit to reports published in the last N days."},
    "last_reports": {"type": "integer", "minimum": 0, "description": "Limit to the last N reports."},
    "ds_id": {"type": "string", "description": "Dataset id, for reports published as more than one dataset."},
}


class ToolError(Exception):
    """Raised for unknown tools or invalid tool arguments."""
    pass


@dataclass
class ToolDefinition:
    """Name, description and JSON input schema of an MCP tool."""
    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}


TOOL_DEFINITIONS: List[ToolDefinition] = [
    ToolDefinition(
        name="mars_get",
        description="Fetch data from the MARS API using a path and optional query params.",
        input_schema={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "API path relative to the base URL."},
                "params": {
                    "type": "object",
                    "additionalProperties": {
                        "anyOf": _SCALAR_SCHEMA + [{"type": "array", "items": {"anyOf": _SCALAR_SCHEMA}}],
                    },
                },
            },
            "required": ["path"],
        },
    ),
    ToolDefinition(
        name="mars_health",
        description="Confirm the configured MARS base URL.",
    ),
    ToolDefinition(
        name="mars_list_reports",
        description="List the market reports published through MARS (slug ids and titles).",
    ),
    ToolDefinition(
        name="mars_get_report",
        description="Fetch the records of one market report by slug id, with optional filters.",
        input_schema={
            "type": "object",
            "properties": {
                "slug_id": {"type": "string", "description": "Report slug id, e.g. '1280'."},
                **_REPORT_FILTER_PROPERTIES,
            },
            "required": ["slug_id"],
        },
    ),
    ToolDefinition(
        name="mars_list_offices",
        description="List the Market News field offices.",
    ),
    ToolDefinition(
        name="mars_list_commodities",
        description="List the commodities covered by Market News reports.",
    ),
    ToolDefinition(
        name="mars_list_market_types",
        description="List the market types (e.g. auction, terminal, shipping point).",
    ),
]


def _require_str(args: Mapping[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ToolError(f"Argument '{key}' must be a non-empty string.")
    return value.strip()


def _optional_int(args: Mapping[str, Any], key: str) -> Optional[int]:
    value = args.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ToolError(f"Argument '{key}' must be a non-negative integer.")
    return value


def _optional_str(args: Mapping[str, Any], key: str) -> Optional[str]:
    value = args.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ToolError(f"Argument '{key}' must be a string.")
    return value


def _validate_params(params: Any) -> QueryParams:
    if params is None:
        return {}
    if not isinstance(params, Mapping):
        raise ToolError("Argument 'params' must be an object.")
    for key, value in params.items():
        items = value if isinstance(value, (list, tuple)) else [value]
        for item in items:
            if item is not None and not isinstance(item, (str, int, float, bool)):
                raise ToolError(f"Parameter '{key}' must be a scalar or a list of scalars.")
    return dict(params)


class ToolService:
    """Executes tool calls against a MarketDataSource."""

    def __init__(self, data_source: MarketDataSource):
        self.data_source = data_source
        self._handlers: Dict[str, Callable[[Mapping[str, Any]], Awaitable[ToolResult]]] = {
            "mars_get": self._mars_get,
            "mars_health": self._mars_health,
            "mars_list_reports": lambda args: self._fetch(ApiPath("/reports")),
            "mars_get_report": self._mars_get_report,
            "mars_list_offices": lambda args: self._fetch(ApiPath("/offices")),
            "mars_list_commodities": lambda args: self._fetch(ApiPath("/commodities")),
            "mars_list_market_types": lambda args: self._fetch(ApiPath("/marketTypes")),
        }

    async def call_tool(self, name: ToolName, args: Optional[Mapping[str, Any]] = None) -> ToolResult:
        """Runs a tool by name.

        Returns:
            ``{"ok": True, "status_code": ..., "data": ...}`` on success, or
            ``{"ok": False, "error": {...}}`` when the upstream call failed.

        Raises:
            ToolError: Unknown tool name or invalid arguments.
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise ToolError(f"Unknown tool: {name}")
        logger.info(f"Tool call: {name} args={dict(args or {})}")
        return await handler(args or {})

    async def _fetch(self, path: ApiPath, query: Optional[QueryParams] = None) -> ToolResult:
        try:
            response: MarsResponse = await self.data_source.fetch(path, query)
        except MarsError as e:
            logger.info(f"Tool call returned error: {e}")
            return {"ok": False, "error": e.to_dict()}
        return {"ok": True, "status_code": response.status_code, "data": response.data}

    async def _mars_get(self, args: Mapping[str, Any]) -> ToolResult:
        path = _require_str(args, "path")
        return await self._fetch(ApiPath(path), _validate_params(args.get("params")))

    async def _mars_health(self, args: Mapping[str, Any]) -> ToolResult:
        return {"ok": True, "message": "MARS client ready", "base_url": self.data_source.base_url}

    async def _mars_get_report(self, args: Mapping[str, Any]) -> ToolResult:
        slug_id = _require_str(args, "slug_id")
        query = ReportQuery(
            q=args.get("q"),
            sort=args.get("sort"),
            all_sections=bool(args.get("all_sections", False)),
            corrections_only=bool(args.get("corrections_only", False)),
            any_changes_since=args.get("any_changes_since"),
            last_days=_optional_int(args, "last_days"),
            last_reports=_optional_int(args, "last_reports"),
            ds_id=_optional_str(args, "ds_id"),
        )
        return await self._fetch(ApiPath(f"/reports/{quote(slug_id, safe='')}"), query.to_params())
