"""
Persisted index of downloaded web resources.

The index records, per resource path, the URL the file was last downloaded
from. It is read once when a job starts and written once when it finishes.

File format::

    version = 1

    [[entries]]
    path = "assets/logo.svg"
    url = "https://example.com/logo.svg"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
import tomli_w

from prequery.exceptions import ResourceIndexError
from prequery.utils.logging import get_logger

logger = get_logger("prequery.processors.web_resource.index")

INDEX_VERSION = 1


@dataclass
class ResourceIndex:
    """Mapping of resource path to the URL it was last synced from."""

    entries: dict[str, str] = field(default_factory=dict)

    def get(self, path: str) -> str | None:
        return self.entries.get(path)

    def record(self, path: str, url: str) -> None:
        self.entries[path] = url

    @classmethod
    def parse(cls, content: str, source: str | Path) -> ResourceIndex:
        """
        Parse index file contents.

        Raises:
            ResourceIndexError: If the content is not a valid index
        """
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ResourceIndexError(source, f"not valid TOML: {e}") from e

        version = data.get("version", INDEX_VERSION)
        if version != INDEX_VERSION:
            raise ResourceIndexError(source, f"unsupported index version {version!r}")

        raw_entries = data.get("entries", [])
        if not isinstance(raw_entries, list):
            raise ResourceIndexError(source, "`entries` must be an array of tables")

        entries: dict[str, str] = {}
        for entry in raw_entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("path"), str) or not isinstance(entry.get("url"), str):
                raise ResourceIndexError(source, "every entry needs a string `path` and `url`")
            entries[entry["path"]] = entry["url"]
        return cls(entries=entries)

    def dumps(self) -> str:
        data = {
            "version": INDEX_VERSION,
            "entries": [{"path": path, "url": url} for path, url in sorted(self.entries.items())],
        }
        return tomli_w.dumps(data)

    @classmethod
    async def load(cls, path: Path) -> ResourceIndex:
        """
        Read the index file; a missing file is an empty index.

        Raises:
            ResourceIndexError: If the file cannot be read or parsed
        """
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            logger.debug(f"index {path} does not exist yet")
            return cls()
        except OSError as e:
            raise ResourceIndexError(path, f"cannot be read: {e}") from e
        return cls.parse(content, path)

    async def save(self, path: Path) -> None:
        """
        Write the index file, replacing any previous content.

        Raises:
            ResourceIndexError: If the file cannot be written
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(self.dumps())
        except OSError as e:
            raise ResourceIndexError(path, f"cannot be written: {e}") from e
