"""CLI commands that run or describe the MCP server."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.config import Config, get_config
from tandoor_mcp.server import configure_logging, create_server
from tandoor_mcp.session import Session
from tandoor_mcp.tools import TandoorTools
from tandoor_mcp.utils.errors import ConfigurationError, TandoorError, handle_error
from tandoor_mcp.utils.output import OutputFormat, print_output

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _build_tools(config: Config) -> tuple[TandoorClient, Session, TandoorTools]:
    session = Session(credentials=config.credentials)
    client = TandoorClient(config, session)
    return client, session, TandoorTools(client, config.policy)


def startup_authenticate(config: Config, client: TandoorClient, session: Session) -> None:
    """Obtain the process token once, before serving.

    An injected TANDOOR_AUTH_TOKEN is cached as-is and no authentication
    request is made.
    """
    if config.auth_token:
        session.inject_token(config.auth_token)
        return

    logger.info(f"Authenticating with Tandoor at {client.base_url}")
    client.login()
    logger.info("Successfully authenticated with Tandoor")


def serve(ctx: typer.Context) -> None:
    """Authenticate once, then serve the Tandoor tools over MCP stdio."""
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    try:
        config = get_config()
        config.validate_auth_path()
    except ConfigurationError as e:
        handle_error(e)
        raise typer.Exit(1)

    configure_logging("DEBUG" if verbose else config.settings.log_level)
    client, session, tools = _build_tools(config)

    try:
        try:
            startup_authenticate(config, client, session)
        except TandoorError as e:
            logger.error(f"Failed to authenticate with Tandoor: {e.message}")
            console.print(
                "[red]Startup authentication failed.[/red] Tandoor allows ~10 attempts per day; "
                "repeated failures are likely rate-limiting. Set TANDOOR_AUTH_TOKEN to skip this step."
            )
            handle_error(e)
            raise typer.Exit(1)

        probe = tools.get_keywords()
        if probe.get("error"):
            logger.warning(f"API access test failed: {probe['message']}")
            logger.warning("Server will start but tool calls may fail")
        else:
            logger.info("API access test successful")

        logger.info("Starting Tandoor MCP server on stdio")
        create_server(tools).run()
    finally:
        client.close()


def list_tools(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """List the tools the server exposes. Makes no network calls."""
    try:
        config = get_config()
    except ConfigurationError as e:
        handle_error(e)
        raise typer.Exit(1)

    client, _, tools = _build_tools(config)
    try:
        registered = asyncio.run(create_server(tools).list_tools())
    finally:
        client.close()

    rows = [
        {"name": t.name, "description": (t.description or "").strip().split("\n")[0]}
        for t in registered
    ]
    print_output(rows, output, title="Tools")
