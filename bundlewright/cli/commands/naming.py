"""``bundlewright platforms|name|parse`` — normalization and naming helpers."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from bundlewright.core.hasher import parse_hash128
from bundlewright.core.naming import DEFAULT_EXTENSION, file_name, parse_file_name
from bundlewright.core.platforms import normalize, supported_raw_targets
from bundlewright.errors import BundleError

console = Console()


def platforms_cmd() -> None:
    """Show how raw build targets normalize onto platform keys."""
    table = Table(title="Platform Normalization")
    table.add_column("Build target", style="cyan")
    table.add_column("Platform key", style="green")
    for raw, key in supported_raw_targets().items():
        table.add_row(raw, key.value)
    console.print(table)


def name_cmd(
    name: str = typer.Argument(..., help="Artifact name."),
    target: str = typer.Argument(..., help="Build target or platform key."),
    content_hash: str = typer.Argument(..., help="128-bit content hash (32 hex chars)."),
    extension: str = typer.Option(DEFAULT_EXTENSION, "--extension", "-e", help="File extension."),
) -> None:
    """Print the staged file name for one platform build of an artifact."""
    try:
        result = file_name(name, normalize(target), parse_hash128(content_hash), extension=extension)
    except BundleError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(result, highlight=False)


def parse_cmd(
    staged_name: str = typer.Argument(..., help="Staged artifact file name."),
    extension: str = typer.Option(DEFAULT_EXTENSION, "--extension", "-e", help="File extension."),
) -> None:
    """Decode a staged file name into name, platform and hash."""
    try:
        parsed = parse_file_name(staged_name, extension=extension)
    except BundleError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(f"[bold]Name:[/bold]     {parsed.name}", highlight=False)
    console.print(f"[bold]Platform:[/bold] {parsed.platform.value}", highlight=False)
    console.print(f"[bold]Hash:[/bold]     {parsed.content_hash}", highlight=False)
