"""
Options and helpers shared by the CLI commands.
"""

from pathlib import Path

import typer

from prequery.config.loader import load_manifest
from prequery.config.types import Manifest
from prequery.core.context import RunContext
from prequery.exceptions import ManifestError
from prequery.utils.logging import get_logger

logger = get_logger("prequery.cli")

InputArgument = typer.Argument(..., help="The Typst document to query", exists=True, dir_okay=False)
RootOption = typer.Option(None, "--root", help="Project root (default: the document's directory)")
TypstOption = typer.Option("typst", "--typst", envvar="TYPST", help="The typst executable used for queries")
ManifestOption = typer.Option(None, "--manifest", help="typst.toml to read jobs from (default: search upwards)")


def load_project(input: Path, root: Path | None, typst: str, manifest: Path | None) -> tuple[RunContext, Manifest]:
    """
    Build the run context and read the job manifest, exiting on errors.
    """
    context = RunContext(input=input, root=root, typst=typst, manifest=manifest)
    try:
        manifest_path = context.resolve_manifest()
        logger.debug(f"reading jobs from {manifest_path}")
        return context, load_manifest(manifest_path)
    except ManifestError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
