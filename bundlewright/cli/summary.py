"""Rich rendering for merge and reconciliation summaries."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from bundlewright.core.merge import DependencyDivergence
from bundlewright.errors import ProbeIndeterminateError, summarize_errors
from bundlewright.models.descriptions import ArtifactDescription
from bundlewright.models.reconcile import ReconciliationResult


def descriptions_table(descriptions: Sequence[ArtifactDescription]) -> Table:
    table = Table(title="Artifact Descriptions")
    table.add_column("Name", style="cyan")
    table.add_column("Platforms")
    table.add_column("Dependencies", style="dim")
    for description in descriptions:
        platforms = ", ".join(p.value for p in description.platforms) or "[yellow]none[/yellow]"
        table.add_row(description.name, platforms, ", ".join(sorted(description.dependencies)))
    return table


def print_divergences(console: Console, divergences: Sequence[DependencyDivergence]) -> None:
    for divergence in divergences:
        console.print(f"[yellow]warning:[/yellow] {divergence.summary()}")


def print_errors(console: Console, errors: Sequence[BaseException], *, title: str = "Errors") -> None:
    if not errors:
        return
    table = Table(title=title, title_style="bold red")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Error", style="red")
    for index, line in enumerate(summarize_errors(errors), start=1):
        table.add_row(str(index), line)
    console.print(table)


def reconciliation_table(result: ReconciliationResult) -> Table:
    table = Table(title="Reconciliation")
    table.add_column("Artifact file", style="cyan")
    table.add_column("Status", justify="center")
    for staged in result.needs_upload:
        table.add_row(staged.file_name(), "[green]upload[/green]")
    for staged in result.found:
        table.add_row(staged.file_name(), "[dim]published[/dim]")
    for error in result.errors:
        if isinstance(error, ProbeIndeterminateError):
            table.add_row(error.staged.file_name(), "[bold red]unresolved[/bold red]")
        else:
            table.add_row(error.summary(), "[bold red]rejected[/bold red]")
    for staged in result.pending:
        table.add_row(staged.file_name(), "[yellow]pending[/yellow]")
    return table
