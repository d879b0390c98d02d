"""
Manifest loading.

Reads the `[tool.prequery]` section of a Typst package manifest (`typst.toml`).
Usually that section consists of multiple `[[tool.prequery.jobs]]` entries:

    [[tool.prequery.jobs]]
    name = "download"
    kind = "web-resource"
    query.selector = "<web-resource>"
    overwrite = false
"""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import aiofiles

from prequery.config.types import FieldSetting, Job, Manifest, QueryConfig
from prequery.exceptions import ManifestError

JOB_KEYS = ("name", "kind", "query")


def parse_manifest(content: str, source: str | Path = "typst.toml") -> Manifest:
    """
    Parse the prequery section from the contents of a typst.toml file.

    Args:
        content: The TOML text
        source: File name used in error messages

    Raises:
        ManifestError: If the TOML is invalid or the section is missing or malformed
    """
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(
            f"Error parsing {source}:\n"
            f"  {e}\n"
            f"  Suggestion: Check TOML syntax, ensure strings are quoted and tables are unique"
        ) from e

    tool = data.get("tool")
    if tool is None:
        raise ManifestError(f"{source} does not contain `tool` section")
    if not isinstance(tool, dict):
        raise ManifestError(f"{source} contains `tool` key, but it's not a table")

    section = tool.get("prequery")
    if section is None:
        raise ManifestError(f"{source} does not contain `tool.prequery` section")
    if not isinstance(section, dict):
        raise ManifestError(f"{source} contains `tool.prequery` key, but it's not a table")

    jobs = section.get("jobs")
    if not isinstance(jobs, list):
        raise ManifestError(
            f"{source} contains `tool.prequery` key, but it's not a valid preprocessor configuration: "
            f"`jobs` must be an array of tables"
        )

    return Manifest(jobs=[_parse_job(job, index, source) for index, job in enumerate(jobs)])


def load_manifest(path: Path) -> Manifest:
    """
    Read and parse the prequery section of the given typst.toml file.

    Raises:
        ManifestError: If the file cannot be read or parsed
    """
    if not path.exists():
        raise ManifestError(f"Manifest file not found: {path}")
    if not path.is_file():
        raise ManifestError(f"Manifest path is not a file: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    return parse_manifest(content, source=path)


async def read_manifest(path: Path) -> Manifest:
    """Async variant of load_manifest(); reads the file through aiofiles."""
    try:
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest file not found: {path}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    return parse_manifest(content, source=path)


def _parse_job(data: Any, index: int, source: str | Path) -> Job:
    where = f"{source}: job #{index + 1}"
    if not isinstance(data, dict):
        raise ManifestError(f"{where} is not a table")

    name = data.get("name")
    if not isinstance(name, str):
        raise ManifestError(f"{where} requires a string `name`")
    where = f"{source}: job '{name}'"

    kind = data.get("kind")
    if not isinstance(kind, str):
        raise ManifestError(f"{where} requires a string `kind`")

    if "query" not in data:
        raise ManifestError(f"{where} requires a `query` table")
    query = _parse_query(data["query"], where)

    # Everything else belongs to the preprocessor kind
    config = {key: value for key, value in data.items() if key not in JOB_KEYS}
    return Job(name=name, kind=kind, query=query, config=config)


def _parse_query(data: Any, where: str) -> QueryConfig:
    if not isinstance(data, Mapping):
        raise ManifestError(f"{where}: `query` must be a table")

    selector = data.get("selector")
    if selector is not None and not isinstance(selector, str):
        raise ManifestError(f"{where}: `query.selector` must be a string")

    try:
        field = FieldSetting.from_value(data.get("field"))
    except ValueError as e:
        raise ManifestError(f"{where}: `query.field`: {e}") from e

    one = data.get("one")
    if one is not None and not isinstance(one, bool):
        raise ManifestError(f"{where}: `query.one` must be a boolean")

    inputs = data.get("inputs", {})
    if not isinstance(inputs, Mapping) or not all(isinstance(v, str) for v in inputs.values()):
        raise ManifestError(f"{where}: `query.inputs` must be a table of strings")

    return QueryConfig(selector=selector, field=field, one=one, inputs=dict(inputs))
