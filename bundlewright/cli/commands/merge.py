"""``bundlewright merge`` — merge per-platform manifests into descriptions.

Each argument is ``TARGET=path/to/manifest.json``. Targets are normalized,
so ``StandaloneWindows64=win.json`` merges as ``WindowsPlayer``.
Unsupported targets, unreadable manifests and targets that resolve to the
same platform are reported and skipped.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import typer
from rich.console import Console

from bundlewright.cli.summary import descriptions_table, print_divergences, print_errors
from bundlewright.core.codec import dumps_descriptions
from bundlewright.core.merge import BuildManifest, StaticManifest, merge_report
from bundlewright.errors import BundleError, DescriptionDecodeError, DuplicatePlatformError

console = Console()


def merge_cmd(
    manifests: list[str] = typer.Argument(
        ...,
        help="Manifests as TARGET=PATH, one per platform.",
    ),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the description list here instead of stdout.",
    ),
) -> None:
    """Merge per-platform build manifests into one description per artifact."""
    loaded: dict[str, BuildManifest] = {}
    errors: list[BaseException] = []
    seen: Counter[str] = Counter()

    for pair in manifests:
        target, sep, path = pair.partition("=")
        if not sep or not path:
            errors.append(DescriptionDecodeError(f"expected TARGET=PATH, got {pair!r}"))
            continue
        seen[target] += 1
        try:
            loaded[target] = StaticManifest.load(Path(path))
        except BundleError as exc:
            errors.append(exc)
        except (OSError, ValueError) as exc:
            errors.append(DescriptionDecodeError(f"cannot load {path}: {exc}"))

    for target, count in seen.items():
        if count > 1:
            loaded.pop(target, None)
            errors.append(DuplicatePlatformError(target, [target] * count))

    report = merge_report(loaded)
    problems = [*errors, *report.errors]
    if not report.descriptions and problems:
        print_errors(console, problems)
        console.print("[bold red]No manifests could be merged.[/bold red]")
        raise typer.Exit(code=1)

    text = dumps_descriptions(report.descriptions)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        console.print(descriptions_table(report.descriptions))
        console.print(f"[green]Wrote {len(report.descriptions)} description(s) to {output}[/green]")
    else:
        console.print_json(text)

    print_divergences(console, report.divergences)
    print_errors(console, problems)
