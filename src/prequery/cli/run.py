"""
prequery run - Execute all configured jobs.
"""

import asyncio
from pathlib import Path

import typer

from prequery.cli.common import InputArgument, ManifestOption, RootOption, TypstOption, load_project
from prequery.core.executor import run_all
from prequery.exceptions import JobConfigurationError
from prequery.processors.registry import configure_jobs
from prequery.utils.logging import get_logger, setup_logging

logger = get_logger("prequery.cli.run")


def run(
    input: Path = InputArgument,
    root: Path | None = RootOption,
    typst: str = TypstOption,
    manifest: Path | None = ManifestOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to this file"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
) -> None:
    """
    Query the document and execute every job in its manifest.

    Exits with status 1 if any job is misconfigured or fails.
    """
    setup_logging(level="DEBUG" if verbose else "INFO", log_file=log_file, json_format=json_logs)

    context, jobs_manifest = load_project(input, root, typst, manifest)
    if not jobs_manifest.jobs:
        logger.warning("no jobs configured")
        return

    try:
        preprocessors = configure_jobs(jobs_manifest.jobs, context=context)
    except JobConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if not asyncio.run(run_all(preprocessors)):
        typer.echo("Error: at least one job failed", err=True)
        raise typer.Exit(1)
