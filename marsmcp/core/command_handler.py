"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the ToolService, the MCP server or the console display. Every
command builds its own MarsClient from the configuration it is given.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from marsmcp.core.services.tool_service import TOOL_DEFINITIONS, ToolService
from marsmcp.domain.interfaces.user_interface import UserInterface
from marsmcp.domain.models.common import QueryParams, ToolName
from marsmcp.infrastructure.mars.client import MarsClient
from marsmcp.infrastructure.mars.config import MarsConfig
from marsmcp.infrastructure.mcp.server import create_server, run_server

logger = logging.getLogger(__name__)

ClientFactory = Callable[[MarsConfig], MarsClient]

MISSING_KEY_MESSAGE = "Missing MARS API key. Set MARS_API_KEY or mars.api_key in ~/.mars-mcp/config.yaml."


def parse_params(pairs: Optional[List[str]]) -> QueryParams:
    """Parses 'key=value' strings; a repeated key collects its values in order.

    Raises:
        ValueError: If an entry has no '=' or an empty key.
    """
    params: Dict[str, object] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid parameter {pair!r}, expected key=value.")
        if key in params:
            existing = params[key]
            params[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            params[key] = value
    return params


def mask_secret(secret: Optional[str]) -> Optional[str]:
    if not secret:
        return None
    return "****" + secret[-4:] if len(secret) > 8 else "****"


class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        config: MarsConfig,
        ui: UserInterface,
        client_factory: ClientFactory = MarsClient,
    ):
        self.config = config
        self.ui = ui
        self.client_factory = client_factory

    def _require_api_key(self) -> bool:
        if self.config.api_key:
            return True
        logger.error("MARS API key is not configured.")
        self.ui.display_error(MISSING_KEY_MESSAGE)
        return False

    async def handle_get(self, path: str, params: QueryParams) -> int:
        """Handles the 'get' command. Returns the process exit code."""
        if not self._require_api_key():
            return 1
        logger.info(f"Handling 'get' command for path: {path}")
        async with self.client_factory(self.config) as client:
            result = await ToolService(client).call_tool(ToolName("mars_get"), {"path": path, "params": params})

        if not result["ok"]:
            error = result["error"]
            status = f" (HTTP {error['http_status']})" if error.get("http_status") is not None else ""
            self.ui.display_error(f"{error['kind']}: {error['message']}{status}")
            if error.get("details") is not None:
                self.ui.display_json(error["details"], title="Upstream details")
            return 1

        self.ui.display_json(result["data"])
        return 0

    def handle_tools(self) -> int:
        """Handles the 'tools' command."""
        rows = [[tool.name, tool.description] for tool in TOOL_DEFINITIONS]
        self.ui.display_table("MARS MCP tools", ["Tool", "Description"], rows)
        return 0

    def handle_config(self) -> int:
        """Handles the 'config' command. The credential is masked."""
        self.ui.display_mapping("Effective configuration", {
            "base_url": self.config.base_url,
            "api_key": mask_secret(self.config.api_key),
            "auth_scheme": self.config.auth_scheme,
            "timeout_s": self.config.timeout_s,
            "max_retries": self.config.max_retries,
            "retry_base_delay_s": self.config.retry_base_delay_s,
            "retry_max_delay_s": self.config.retry_max_delay_s,
            "concurrency": self.config.concurrency,
        })
        return 0

    def handle_serve(self, transport: str, host: str, port: int) -> int:
        """Handles the 'serve' command (blocks until the server stops)."""
        if not self._require_api_key():
            return 1
        client = self.client_factory(self.config)
        try:
            mcp = create_server(ToolService(client))
            run_server(mcp, transport=transport, host=host, port=port)
        finally:
            # run_server has left its event loop by now
            asyncio.run(client.aclose())
        return 0
