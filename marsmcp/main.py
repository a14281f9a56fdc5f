"""Main entry point for the marsmcp application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
Dependencies are built per command; there is no process-wide client.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Coroutine, Dict, List, Optional

import typer
from typing_extensions import Annotated

from marsmcp import __version__
from marsmcp.core.command_handler import CommandHandler, parse_params
from marsmcp.infrastructure.cli.display import ConsoleDisplay
from marsmcp.infrastructure.config.settings import (
    ConfigurationError, get_config, load_configuration, load_mars_config,
)
from marsmcp.infrastructure.mars.client import MarsClient
from marsmcp.infrastructure.mcp.server import TRANSPORTS
from marsmcp.infrastructure.monitoring.logger_setup import parse_level, setup_logging

logger = logging.getLogger(__name__)


# --- Dependency Injection (Manual) ---

def create_dependencies(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Creates and wires up the dependencies for one command.

    This acts as the Composition Root.

    Raises:
        ConfigurationError: If the configuration cannot be loaded.
    """
    # 1. Load Configuration First
    load_configuration(config_file=config_file, force=True)
    setup_logging(
        log_level=parse_level(get_config("LOG_LEVEL", "INFO")),
        log_file=get_config("LOG_FILE"),
    )

    # 2. Instantiate Infrastructure Adapters & Services
    dependencies: Dict[str, Any] = {}
    dependencies["ui"] = ConsoleDisplay()
    dependencies["config"] = load_mars_config()

    # 3. Instantiate Command Handler
    dependencies["command_handler"] = CommandHandler(
        config=dependencies["config"],
        ui=dependencies["ui"],
        client_factory=MarsClient,
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


def _handler(config_file: Optional[Path]) -> CommandHandler:
    try:
        return create_dependencies(config_file)["command_handler"]
    except ConfigurationError as e:
        ConsoleDisplay().display_error(f"Configuration error: {e}")
        raise typer.Exit(code=1)


def run_async(coro: Coroutine[Any, Any, int]) -> int:
    """Runs an async command handler from a sync Typer command."""
    return asyncio.run(coro)


# --- Typer App Definition ---
app = typer.Typer(
    name="marsmcp",
    help="MCP tools for the USDA AMS Market News (MARS) API.",
    add_completion=False,
)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a YAML config file (default: ~/.mars-mcp/config.yaml)."),
]


@app.command()
def serve(
    transport: Annotated[str, typer.Option("--transport", "-t", help="MCP transport: 'stdio' or 'http'.")] = "stdio",
    host: Annotated[str, typer.Option(help="Bind address for the http transport.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port for the http transport.")] = 3000,
    config: ConfigOption = None,
):
    """Run the MCP server."""
    if transport not in TRANSPORTS:
        raise typer.BadParameter(f"Choose one of: {', '.join(TRANSPORTS)}", param_hint="--transport")
    handler = _handler(config)
    raise typer.Exit(code=handler.handle_serve(transport, host, port))


@app.command()
def get(
    path: Annotated[str, typer.Argument(help="API path relative to the base URL, e.g. /reports.")],
    param: Annotated[
        Optional[List[str]],
        typer.Option("--param", "-p", help="Query parameter as key=value. Repeat for multiple values."),
    ] = None,
    config: ConfigOption = None,
):
    """Fetch one path from the MARS API and print the JSON payload."""
    try:
        params = parse_params(param)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--param")
    handler = _handler(config)
    raise typer.Exit(code=run_async(handler.handle_get(path, params)))


@app.command()
def tools(config: ConfigOption = None):
    """List the MCP tools exposed by the server."""
    handler = _handler(config)
    raise typer.Exit(code=handler.handle_tools())


@app.command(name="config")
def config_command(config: ConfigOption = None):
    """Show the effective configuration (API key masked)."""
    handler = _handler(config)
    raise typer.Exit(code=handler.handle_config())


@app.command()
def version():
    """Print the package version."""
    typer.echo(__version__)


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
