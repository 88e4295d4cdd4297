"""``bundlewright reconcile`` — find staged artifacts missing remotely.

Collects the staging area, HEAD-probes every file against the remote
store, and copies the ones that are confirmed missing into the upload
area. Files whose status could not be determined are listed and make the
command exit with code 1; they are never copied for upload by default.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from bundlewright.bridge.http_probe import HttpExistenceProbe
from bundlewright.cli.summary import print_errors, reconciliation_table
from bundlewright.config import BundleSettings
from bundlewright.core.reconciler import Reconciler
from bundlewright.core.staging import collect_staged, prepare_upload
from bundlewright.models.reconcile import ReconciliationResult, RetryPolicy
from bundlewright.models.staging import StagedArtifactFile

console = Console()


async def _reconcile(
    staged: list[StagedArtifactFile],
    base_uri: str,
    policy: RetryPolicy,
    timeout: float,
) -> ReconciliationResult:
    async with HttpExistenceProbe(base_uri, timeout=timeout) as probe:
        return await Reconciler(probe, policy).reconcile_async(staged)


def reconcile_cmd(
    base_uri: str = typer.Option(None, "--base-uri", "-u", help="Public address of the remote store."),
    staging: Path = typer.Option(None, "--staging", "-s", help="Staging directory."),
    upload: Path = typer.Option(None, "--upload", help="Upload directory (reset on each run)."),
    max_retries: int = typer.Option(None, "--max-retries", help="Retries per indeterminate probe."),
    retry_delay: float = typer.Option(None, "--retry-delay", help="Seconds between retries."),
    concurrency: int = typer.Option(None, "--concurrency", "-c", help="Maximum probes in flight."),
) -> None:
    """Determine which staged artifacts still need to be uploaded."""
    settings = BundleSettings()
    base_uri = base_uri or settings.base_uri
    if not base_uri:
        console.print("[bold red]No base URI given[/bold red] (use --base-uri or BUNDLEWRIGHT_BASE_URI).")
        raise typer.Exit(code=2)

    layout = settings.layout()
    staging = staging or layout.staging
    upload = upload or layout.upload
    defaults = settings.retry_policy()
    policy = RetryPolicy(
        max_retries=defaults.max_retries if max_retries is None else max_retries,
        retry_delay_seconds=defaults.retry_delay_seconds if retry_delay is None else retry_delay,
        max_concurrency=defaults.max_concurrency if concurrency is None else concurrency,
    )

    if not staging.is_dir():
        console.print(f"[bold red]Staging directory not found:[/bold red] {staging}")
        raise typer.Exit(code=1)

    staged, naming_errors = collect_staged(staging, extension=settings.file_extension)
    console.print(f"[bold cyan]Checking {len(staged)} staged artifact(s) against {base_uri}...[/bold cyan]")

    result = asyncio.run(_reconcile(staged, base_uri, policy, settings.probe_timeout_seconds))
    copied = prepare_upload(result.needs_upload, upload)

    console.print(reconciliation_table(result))
    print_errors(console, naming_errors, title="Unrecognized staged files")
    print_errors(console, result.errors, title="Unresolved artifacts")
    console.print(f"[green]{len(copied)} artifact(s) copied to {upload}[/green]")

    if result.errors:
        raise typer.Exit(code=1)
