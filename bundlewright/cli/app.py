"""Main Typer application — imports and registers all CLI commands.

Entry point: ``bundlewright`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from bundlewright.cli.commands.merge import merge_cmd
from bundlewright.cli.commands.naming import name_cmd, parse_cmd, platforms_cmd
from bundlewright.cli.commands.reconcile import reconcile_cmd
from bundlewright.config import BundleSettings

app = typer.Typer(
    name="bundlewright",
    help="Bundlewright: cross-platform bundle naming, merging and publication checks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="platforms", help="Show the build target normalization table.")(platforms_cmd)
app.command(name="name", help="Print the staged file name for an artifact build.")(name_cmd)
app.command(name="parse", help="Decode a staged artifact file name.")(parse_cmd)
app.command(name="merge", help="Merge per-platform manifests into descriptions.")(merge_cmd)
app.command(name="reconcile", help="Find staged artifacts missing from the remote store.")(reconcile_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, "--log-level", help="Logging level (default from settings)."),
) -> None:
    """Configure logging before any subcommand runs."""
    level = (log_level or BundleSettings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
