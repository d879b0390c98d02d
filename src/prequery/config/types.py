"""
Type definitions for the `[tool.prequery]` manifest section.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldMode(Enum):
    """How the `field` query setting was given."""

    UNSET = "unset"  # not specified, the kind's default applies
    DISABLED = "disabled"  # `field = false`, query whole elements
    NAMED = "named"  # `field = "value"`


@dataclass(frozen=True)
class FieldSetting:
    """
    Tri-state `field` setting: unset, explicitly disabled, or a field name.

    Kept as an explicit mode so that "not specified" stays distinguishable
    from "specified as disabled" through parsing and defaulting.
    """

    mode: FieldMode = FieldMode.UNSET
    name: str | None = None

    def __post_init__(self) -> None:
        if (self.mode is FieldMode.NAMED) != (self.name is not None):
            raise ValueError("a field name is required exactly when the mode is NAMED")

    @classmethod
    def unset(cls) -> FieldSetting:
        return cls()

    @classmethod
    def disabled(cls) -> FieldSetting:
        return cls(FieldMode.DISABLED)

    @classmethod
    def named(cls, name: str) -> FieldSetting:
        return cls(FieldMode.NAMED, name)

    @classmethod
    def from_value(cls, value: Any) -> FieldSetting:
        """
        Decode a manifest value: absent/None, `false`, or a string.

        Raises:
            ValueError: For `true` or any non-string value
        """
        if value is None:
            return cls.unset()
        if value is False:
            return cls.disabled()
        if isinstance(value, str):
            return cls.named(value)
        raise ValueError(f"`field` must be `false` or a string, got {value!r}")

    @property
    def is_set(self) -> bool:
        return self.mode is not FieldMode.UNSET

    def __str__(self) -> str:
        if self.mode is FieldMode.NAMED:
            return str(self.name)
        return self.mode.value


@dataclass(frozen=True)
class QueryConfig:
    """
    User-supplied query configuration. All fields are optional, as
    preprocessor kinds define their own defaults.

    Attributes:
        selector: The selector to be queried, e.g. `<label>`
        field: The field (`--field`) to be queried from the selector
        one: Whether only one (`--one`) query result is expected
        inputs: Additional `--input` values for the queried document.
            `prequery-fallback` is always set to `true` regardless.
    """

    selector: str | None = None
    field: FieldSetting = dataclasses.field(default_factory=FieldSetting.unset)
    one: bool | None = None
    inputs: dict[str, str] = dataclasses.field(default_factory=dict)


@dataclass(frozen=True)
class Job:
    """
    A single preprocessing job: a query plus the kind of preprocessor that
    processes its result.

    Attributes:
        name: The job's name (for humans, e.g. in logs)
        kind: Identifier of the preprocessor that should be run
        query: The query the preprocessor needs to run
        config: Every other key of the job table, owned by the preprocessor kind
    """

    name: str
    kind: str
    query: QueryConfig = field(default_factory=QueryConfig)
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Manifest:
    """The complete `[tool.prequery]` section: the jobs to execute, in manifest order."""

    jobs: list[Job] = field(default_factory=list)
