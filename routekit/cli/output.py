"""
Styled output helpers built on Click.

click.echo strips the colors when output is not a terminal.
"""

from typing import Optional, Sequence

import click

_CHECK = "\u2713"     # ✓
_CROSS = "\u2717"     # ✗
_L_H = "\u2500"       # ─


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red, to stderr."""
    click.echo(click.style(message, fg="red"), err=True)


def kv(
    key: str,
    value: str,
    *,
    key_width: int = 14,
    indent: int = 2,
    key_fg: str = "white",
    val_fg: str = "cyan",
) -> None:
    """
    Print an aligned key-value pair.

        style:        path
        regex:        /?/show/(?P<v0>[^/,;?<>]+)
    """
    prefix = " " * indent
    k = click.style(f"{key}:", fg=key_fg)
    v = click.style(str(value), fg=val_fg)
    padding = " " * max(1, key_width - len(key) - 1)
    click.echo(f"{prefix}{k}{padding}{v}")


def table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    col_widths: Optional[Sequence[int]] = None,
    header_fg: str = "cyan",
    indent: int = 2,
) -> None:
    """
    Print a minimal aligned table.

        Name      Method    Host              Path
        ───────── ───────── ───────────────── ─────────────
        home      ANY       *                 /
    """
    prefix = " " * indent

    if col_widths is None:
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row[:len(headers)]):
                widths[i] = max(widths[i], len(str(cell)))
        widths = [w + 2 for w in widths]
    else:
        widths = list(col_widths)

    hdr = "".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    click.echo(f"{prefix}{click.style(hdr, fg=header_fg, bold=True)}")
    click.echo(f"{prefix}{click.style(''.join(_L_H * w for w in widths), dim=True)}")

    for row in rows:
        line = "".join(
            str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
            for i, cell in enumerate(row)
        )
        click.echo(f"{prefix}{line}")
