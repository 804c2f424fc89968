"""Tandoor MCP: entry point.

Serves a Tandoor recipe manager as Model Context Protocol tools, and
provides helpers for managing the API token.
"""

from __future__ import annotations

import typer

from tandoor_mcp.commands.auth_cmd import app as auth_app
from tandoor_mcp.commands.serve_cmd import list_tools, serve
from tandoor_mcp.server import configure_logging

app = typer.Typer(
    name="tandoor-mcp",
    help="MCP server exposing the Tandoor recipe manager to agents.",
    no_args_is_help=True,
)

app.add_typer(auth_app, name="auth")
app.command("serve")(serve)
app.command("tools")(list_tools)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Tandoor MCP: recipes, shopping lists, meal plans and pantry for agents."""
    ctx.obj = {"verbose": verbose}
    if verbose:
        configure_logging("DEBUG")


if __name__ == "__main__":
    app()
