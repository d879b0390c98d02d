"""
prequery check - Validate the job configuration without running anything.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from prequery.cli.common import InputArgument, ManifestOption, RootOption, TypstOption, load_project
from prequery.exceptions import JobConfigurationError
from prequery.processors.registry import configure_jobs

console = Console()


def check(
    input: Path = InputArgument,
    root: Path | None = RootOption,
    typst: str = TypstOption,
    manifest: Path | None = ManifestOption,
) -> None:
    """
    Configure every job and list them, without querying the document.
    """
    context, jobs_manifest = load_project(input, root, typst, manifest)

    try:
        preprocessors = configure_jobs(jobs_manifest.jobs, context=context)
    except JobConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    table = Table(title="Jobs", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Selector")
    table.add_column("Field", style="dim")
    table.add_column("One", style="dim")

    for job, preprocessor in zip(jobs_manifest.jobs, preprocessors, strict=True):
        query = preprocessor.query
        table.add_row(preprocessor.name, job.kind, query.selector, query.field or "-", str(query.one).lower())

    console.print(table)
    console.print(f"[green]{len(preprocessors)} job(s) configured[/green]")
