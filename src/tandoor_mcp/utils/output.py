"""Output formatting for the CLI commands.

JSON goes to stdout for scripting; tables are rendered on stderr so they
never mix with machine-readable output.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console(stderr=True)

Rows = list[dict[str, Any]] | dict[str, Any]


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def print_output(
    data: Rows,
    fmt: OutputFormat = OutputFormat.TABLE,
    columns: list[str] | None = None,
    title: str | None = None,
) -> None:
    """Print command results.

    Args:
        data: A single record (rendered as field/value pairs) or a list of rows.
        fmt: table or json.
        columns: Columns to show for row lists. None = keys of the first row.
        title: Optional table title.
    """
    if fmt == OutputFormat.JSON:
        print_json(data)
    elif isinstance(data, dict):
        print_record(data, title)
    else:
        print_table(data, columns, title)


def print_json(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def print_record(record: dict[str, Any], title: str | None = None) -> None:
    """Render one record as a two-column field/value table on stderr."""
    table = Table(title=title, show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value", overflow="fold")
    for key, value in record.items():
        table.add_row(key, _cell(value))
    console.print(table)


def print_table(rows: list[dict[str, Any]], columns: list[str] | None = None, title: str | None = None) -> None:
    """Render rows as a Rich table on stderr."""
    if not rows:
        console.print("[dim]No results.[/dim]")
        return

    columns = columns or list(rows[0])
    table = Table(title=title)
    for col in columns:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*[_cell(row.get(col)) for col in columns])
    console.print(table)
