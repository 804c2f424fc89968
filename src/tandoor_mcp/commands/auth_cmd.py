"""CLI commands for obtaining and inspecting Tandoor API tokens."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from tandoor_mcp.client import TandoorClient
from tandoor_mcp.config import get_config
from tandoor_mcp.session import Session
from tandoor_mcp.utils.errors import TandoorError, handle_error
from tandoor_mcp.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="auth", help="Obtain and inspect Tandoor API tokens.")


def _build_client() -> TandoorClient:
    config = get_config()
    session = Session(credentials=config.credentials, token=config.auth_token)
    return TandoorClient(config, session)


@app.command()
def login(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Exchange TANDOOR_USERNAME/TANDOOR_PASSWORD for a token and print it.

    Each call uses one of Tandoor's ~10 daily authentication attempts. Put the
    printed token in TANDOOR_AUTH_TOKEN to skip authentication on startup.
    """
    try:
        client = _build_client()
    except TandoorError as e:
        handle_error(e)
        raise typer.Exit(1)

    try:
        console.print(f"Authenticating against [bold]{client.base_url}[/bold]...", style="yellow")
        console.print("[dim]This uses one of the ~10 daily authentication attempts.[/dim]")
        token = client.login()
        result = {
            "status": "authenticated",
            "base_url": client.base_url,
            "token": token,
            "env": f"TANDOOR_AUTH_TOKEN={token}",
        }
        print_output(result, output, title="Authentication")
    except TandoorError as e:
        console.print("[red]Authentication failed.[/red] Repeated failures usually mean the rate limit was hit.")
        handle_error(e)
        raise typer.Exit(1)
    finally:
        client.close()


@app.command()
def status(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show which credential path is configured. Makes no network calls."""
    try:
        client = _build_client()
    except TandoorError as e:
        handle_error(e)
        raise typer.Exit(1)

    token_status = client.guard.status()
    result = {
        "base_url": client.base_url,
        "has_token": token_status.has_token,
        "token_preview": token_status.token_preview or "N/A",
        "has_credentials": token_status.has_credentials,
        "auth_attempts": token_status.auth_attempts,
        "auth_failures": token_status.auth_failures,
    }
    print_output(result, output, title="Token Status")
    client.close()
