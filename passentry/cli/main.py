"""Command-line interface for passentry.

All commands operate on record bodies that are already decrypted, read from a
file or from stdin (``-``).
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from passentry import __version__
from passentry.core.config import AppConfig, load_config
from passentry.core.entry import PasswordEntry
from passentry.core.errors import PassEntryError
from passentry.utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="passentry",
    help="Inspect and update decrypted password-store records",
    add_completion=False,
)

# stdout carries record bodies, so diagnostics go to stderr
console = Console()
err_console = Console(stderr=True)

_SECRET_RE = re.compile(r"(secret=)[^&\s]+")
_MASK = "••••••••"


def _read_body(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def _load_entry(cfg: AppConfig, path: str) -> PasswordEntry:
    try:
        data = _read_body(path)
    except OSError as e:
        err_console.print(f"[red]Error reading {path}: {e}[/red]")
        raise typer.Exit(1) from e

    try:
        return PasswordEntry.from_bytes(
            data,
            encoding=cfg.entry.encoding,
            username_fields=cfg.entry.username_fields,
        )
    except PassEntryError as e:
        err_console.print(f"[red]Corrupt record {path}: {e}[/red]")
        logger.debug("Parse failure", exc_info=True)
        raise typer.Exit(1) from e


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
) -> None:
    """passentry - pass record parser."""
    ctx.ensure_object(dict)
    cfg = load_config(config_file)
    ctx.obj["config"] = cfg

    try:
        setup_logging(cfg, level_name=log_level, console=err_console)
    except ValueError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(2) from e


@app.command()
def version() -> None:
    """Show version information."""
    import platform

    table = Table(title="passentry Version Information")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    table.add_row("Version", __version__)
    table.add_row("Python", platform.python_version())
    table.add_row("Platform", platform.platform())

    console.print(table)


@app.command()
def config(
    ctx: typer.Context,
    show: bool = typer.Option(
        False,
        "--show",
        "-s",
        help="Show current configuration",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        "-i",
        help="Create a default configuration file",
    ),
) -> None:
    """Manage configuration."""
    cfg = ctx.obj["config"]

    if init:
        config_path = cfg.general.config_file or cfg.default_config_path

        if config_path.exists():
            console.print(f"[yellow]Config file already exists:[/yellow] {config_path}")
            overwrite = typer.confirm("Overwrite existing config?")
            if not overwrite:
                console.print("[dim]Config creation cancelled[/dim]")
                raise typer.Exit(0)

        try:
            cfg.save_to_file(config_path)
        except ImportError:
            console.print("[red]Error: tomli_w not installed[/red]")
            console.print("[dim]Install with: pip install tomli-w[/dim]")
            raise typer.Exit(1)

        console.print(f"[green]✓ Config file created:[/green] {config_path}")
        return

    if show:
        table = Table(title="passentry Configuration")
        table.add_column("Setting", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")

        table.add_row("Config File", str(cfg.general.config_file or "Not set"))
        table.add_row("Log Level", cfg.general.log_level)
        table.add_row("Log File", str(cfg.general.log_file or "Not set"))
        table.add_row("Encoding", cfg.entry.encoding)
        table.add_row("Username Fields", ", ".join(cfg.entry.username_fields))

        console.print(table)
    else:
        console.print(
            f"[yellow]Configuration file:[/yellow] {cfg.general.config_file or 'Not set'}"
        )
        console.print("\n[dim]Use --show to display full configuration[/dim]")
        console.print("[dim]Use --init to create a default config file[/dim]")


@app.command()
def show(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Decrypted record file, or '-' for stdin"),
    reveal: bool = typer.Option(
        False,
        "--reveal",
        "-r",
        help="Show the password and OTP secrets in clear text",
    ),
) -> None:
    """Show the fields parsed from a record."""
    cfg = ctx.obj["config"]
    entry = _load_entry(cfg, path)

    def secret(value: Optional[str]) -> Text:
        if value is None:
            return Text("-")
        return Text(value) if reveal else Text(_MASK)

    table = Table(title="Password Entry", show_lines=True)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    table.add_row("Password", secret(entry.password))
    table.add_row("Username", Text(entry.username) if entry.has_username() else "-")
    table.add_row("TOTP", "✓" if entry.has_totp() else "✗")
    if entry.has_totp():
        table.add_row("TOTP Secret", secret(entry.totp_secret))
    table.add_row("HOTP", "✓" if entry.has_hotp() else "✗")
    if entry.hotp_counter is not None:
        table.add_row("HOTP Secret", secret(entry.hotp_secret))
        table.add_row("HOTP Counter", str(entry.hotp_counter))

    if entry.has_extra_content():
        extra = entry.extra_content
        if not reveal:
            extra = _SECRET_RE.sub(rf"\g<1>{_MASK}", extra)
        table.add_row("Extra Content", Text(extra.rstrip("\n")), style="dim")

    console.print(table)


@app.command("increment-hotp")
def increment_hotp(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Decrypted record file, or '-' for stdin"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the updated record to this file instead of stdout",
        dir_okay=False,
    ),
    in_place: bool = typer.Option(
        False,
        "--in-place",
        help="Overwrite the input file with the updated record",
    ),
) -> None:
    """Increment the HOTP counter of a record and write the updated body."""
    cfg = ctx.obj["config"]

    if in_place and (path == "-" or output is not None):
        err_console.print("[red]Error: --in-place needs a file path and no --output[/red]")
        raise typer.Exit(2)

    entry = _load_entry(cfg, path)
    entry.increment_hotp()

    if not entry.hotp_is_incremented():
        err_console.print(f"[yellow]No HOTP line in {path}, nothing to increment[/yellow]")
        raise typer.Exit(1)

    body = entry.to_text()
    target = Path(path) if in_place else output

    if target is None:
        typer.echo(body, nl=False)
        return

    try:
        target.write_bytes(body.encode(cfg.entry.encoding))
    except OSError as e:
        err_console.print(f"[red]Error writing {target}: {e}[/red]")
        raise typer.Exit(1) from e

    err_console.print(f"[green]✓ HOTP counter updated:[/green] {target}")
