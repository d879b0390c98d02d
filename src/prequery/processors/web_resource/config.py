"""
Configuration of the `web-resource` preprocessor.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_INDEX_FILENAME = "web-resource-index.toml"


@dataclass(frozen=True)
class WebResourceConfig:
    """
    Auxiliary configuration for the preprocessor.

    Attributes:
        overwrite: Always download and overwrite all files. Not recommended
            permanently, but enabling it temporarily checks for changed resources.
        index: Index file, relative to the manifest. `true` in the manifest
            means web-resource-index.toml; multiple web-resource jobs using the
            same index file will conflict.
        evict: Delete files no longer needed by the document; requires the index.
    """

    overwrite: bool = False
    index: Path | None = None
    evict: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WebResourceConfig:
        """
        Decode the job's kind-specific table.

        Raises:
            ValueError: If a value has the wrong type
        """
        overwrite = data.get("overwrite", False)
        if not isinstance(overwrite, bool):
            raise ValueError(f"`overwrite` must be a boolean, got {overwrite!r}")

        evict = data.get("evict", False)
        if not isinstance(evict, bool):
            raise ValueError(f"`evict` must be a boolean, got {evict!r}")

        return cls(overwrite=overwrite, index=_parse_index(data.get("index")), evict=evict)

    def resolve_index_path(self, manifest_path: Path) -> Path | None:
        """The index file as a sibling of the manifest, or None if the index is disabled."""
        if self.index is None:
            return None
        return manifest_path.parent / self.index


def _parse_index(value: Any) -> Path | None:
    # `index` is either a boolean or a path string
    if value is None or value is False:
        return None
    if value is True:
        return Path(DEFAULT_INDEX_FILENAME)
    if isinstance(value, str):
        return Path(value)
    raise ValueError(f"`index` must be a boolean or string, got {value!r}")
