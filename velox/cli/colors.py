"""
Velox CLI — Terminal output helpers.

Colouring goes through ``click.style`` so ``click.echo`` strips it when
stdout is not a terminal.
"""

from __future__ import annotations

from typing import Sequence

import click

CHECK = "✓"
CROSS = "✗"
RULE = "─"


def _say(message: str, colour: str, *, err: bool = False) -> None:
    click.echo(click.style(message, fg=colour), err=err)


def success(message: str) -> None:
    _say(message, "green")


def error(message: str) -> None:
    """Errors go to stderr."""
    _say(message, "red", err=True)


def warning(message: str) -> None:
    _say(message, "yellow")


def info(message: str) -> None:
    _say(message, "cyan")


def kv(key: str, value: object, *, width: int = 20) -> None:
    """One ``label: value`` line, values lined up in a column."""
    label = f"{key}:".ljust(width)
    click.echo("  " + click.style(label, bold=True) + click.style(str(value), fg="cyan"))


def table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
    """Left-aligned columns sized to their widest cell, with a rule under the header."""
    cells = [[str(c) for c in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in cells:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(cell))

    def line(values: Sequence[str]) -> str:
        padded = [v.ljust(w) for v, w in zip(values, widths)]
        return "  " + "  ".join(padded).rstrip()

    click.echo(click.style(line(list(headers)), bold=True))
    click.echo(click.style(line([RULE * w for w in widths]), dim=True))
    for row in cells:
        click.echo(line(row))
