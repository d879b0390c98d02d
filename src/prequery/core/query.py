"""
Executing `typst query` commands.

A Query is always fully resolved: it is produced by a QueryBuilder that merges
the user's QueryConfig over the defaults of a preprocessor kind.
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from prequery.config.types import FieldMode, FieldSetting, QueryConfig
from prequery.core.context import RunContext
from prequery.exceptions import (
    MissingFieldError,
    MissingOneError,
    MissingSelectorError,
    QueryDecodeError,
    QueryFailedError,
    QueryIOError,
)
from prequery.utils.logging import get_logger

logger = get_logger("prequery.core.query")

T = TypeVar("T")

# Always passed to the queried document; users cannot override it
FALLBACK_INPUT = "prequery-fallback"


@dataclass(frozen=True)
class Query:
    """
    A query that can be run against a Typst document.

    Attributes:
        selector: The selector to be queried, e.g. `<label>`
        field: The field (`--field`) to be queried, or None to query whole elements
        one: Whether only one (`--one`) query result is expected and returned
        inputs: Additional `--input` values, passed in mapping order
    """

    selector: str
    field: str | None
    one: bool
    inputs: dict[str, str] = dataclasses.field(default_factory=dict)

    @staticmethod
    def builder() -> QueryBuilder:
        return QueryBuilder()

    def command(self, context: RunContext) -> list[str]:
        """Build the `typst query` command line for executing this query."""
        cmd = [context.typst, "query"]
        if context.root is not None:
            cmd += ["--root", str(context.root)]
        if self.field is not None:
            cmd += ["--field", self.field]
        if self.one:
            cmd.append("--one")
        for key, value in self.inputs.items():
            if key == FALLBACK_INPUT:
                logger.warning(f"ignoring input `{key}={value}`: `{FALLBACK_INPUT}` is always `true` during queries")
                continue
            cmd += ["--input", f"{key}={value}"]
        cmd += ["--input", f"{FALLBACK_INPUT}=true"]
        cmd += [str(context.input), self.selector]
        return cmd

    async def execute(self, context: RunContext, decode: Callable[[Any], T] | None = None) -> T:
        """
        Execute the query and return its result parsed from JSON.

        Standard error of the query tool is passed through, only standard output
        is captured.

        Args:
            context: The run context supplying the typst binary, root, and input
            decode: Optional conversion of the parsed JSON into the expected shape;
                TypeError, KeyError, and ValueError raised by it count as decode failures

        Raises:
            QueryIOError: If the process cannot be launched or its output read
            QueryFailedError: If the process exits with a non-zero status
            QueryDecodeError: If the output is not JSON or not of the expected shape
        """
        command = self.command(context)
        logger.debug(f"running {' '.join(command)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=None,
            )
            stdout, _ = await process.communicate()
        except OSError as e:
            raise QueryIOError(e) from e

        if process.returncode != 0:
            raise QueryFailedError(command, process.returncode)

        try:
            value = json.loads(stdout)
        except ValueError as e:
            raise QueryDecodeError(str(e), cause=e) from e

        if decode is None:
            return value
        try:
            return decode(value)
        except (TypeError, KeyError, ValueError) as e:
            raise QueryDecodeError(str(e), cause=e) from e


@dataclass(frozen=True)
class QueryBuilder:
    """
    A query builder holding per-kind defaults. A setting missing from the
    QueryConfig falls back to its default; the user's value always wins.
    """

    selector: str | None = None
    field: FieldSetting = dataclasses.field(default_factory=FieldSetting.unset)
    one: bool | None = None

    def with_default_selector(self, selector: str) -> QueryBuilder:
        """Set the selector to be queried, e.g. `<label>`."""
        return dataclasses.replace(self, selector=selector)

    def with_default_field(self, field: str | None) -> QueryBuilder:
        """Set the field (`--field`) to be queried; None disables field selection."""
        setting = FieldSetting.disabled() if field is None else FieldSetting.named(field)
        return dataclasses.replace(self, field=setting)

    def with_default_one(self, one: bool) -> QueryBuilder:
        """Set whether only one (`--one`) query result is expected."""
        return dataclasses.replace(self, one=one)

    def build(self, config: QueryConfig) -> Query:
        """
        Build a Query from the given config using these defaults.

        Raises:
            MissingSelectorError: If neither config nor defaults give a selector
            MissingFieldError: If neither config nor defaults give a field setting
            MissingOneError: If neither config nor defaults give `one`
        """
        selector = config.selector if config.selector is not None else self.selector
        if selector is None:
            raise MissingSelectorError()

        field_setting = config.field if config.field.is_set else self.field
        if not field_setting.is_set:
            raise MissingFieldError()

        one = config.one if config.one is not None else self.one
        if one is None:
            raise MissingOneError()

        return Query(
            selector=selector,
            field=field_setting.name if field_setting.mode is FieldMode.NAMED else None,
            one=one,
            inputs=dict(config.inputs),
        )
