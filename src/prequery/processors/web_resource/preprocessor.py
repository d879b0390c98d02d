"""
The `web-resource` preprocessor.

Queries the document for `{url, path}` records and makes sure every path in
the project root holds the file downloaded from its URL. All resources of a
job are synced concurrently; a failed resource fails the job, but only after
every other resource was attempted.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import aiohttp

from prequery.config.types import QueryConfig
from prequery.core.context import RunContext
from prequery.core.query import Query
from prequery.exceptions import DownloadError, JobError, PreprocessorConfigError
from prequery.processors.base import Preprocessor, PreprocessorDefinition
from prequery.processors.web_resource.config import WebResourceConfig
from prequery.processors.web_resource.index import ResourceIndex
from prequery.utils.logging import get_logger

logger = get_logger("prequery.processors.web_resource")

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class Resource:
    """
    A resource that should be downloaded.

    Attributes:
        url: The URL to download from
        path: The path to download to, relative to the project root
    """

    url: str
    path: str

    @classmethod
    def from_json(cls, data: Any) -> Resource:
        if not isinstance(data, dict):
            raise TypeError(f"expected a resource object, got {type(data).__name__}")
        url, path = data["url"], data["path"]
        if not isinstance(url, str) or not isinstance(path, str):
            raise TypeError("resource `url` and `path` must be strings")
        return cls(url=url, path=path)

    @classmethod
    def list_from_json(cls, data: Any) -> list[Resource]:
        if not isinstance(data, list):
            raise TypeError(f"expected a list of resources, got {type(data).__name__}")
        return [cls.from_json(item) for item in data]


class SyncAction(Enum):
    DOWNLOAD = "download"
    SKIP = "skip"


class SyncReason(Enum):
    MISSING = "file missing"
    OVERWRITE = "overwrite enabled"
    INDEX = "index enabled"
    EXISTS = "file exists"


@dataclass(frozen=True)
class SyncDecision:
    action: SyncAction
    reason: SyncReason

    @property
    def download(self) -> bool:
        return self.action is SyncAction.DOWNLOAD


def decide(exists: bool, overwrite: bool, index_enabled: bool) -> SyncDecision:
    """
    Decide whether a resource needs to be downloaded.

    An enabled index currently always refreshes existing files: recorded URLs
    are reported but not used to skip downloads.
    """
    if not exists:
        return SyncDecision(SyncAction.DOWNLOAD, SyncReason.MISSING)
    if overwrite:
        return SyncDecision(SyncAction.DOWNLOAD, SyncReason.OVERWRITE)
    if index_enabled:
        return SyncDecision(SyncAction.DOWNLOAD, SyncReason.INDEX)
    return SyncDecision(SyncAction.SKIP, SyncReason.EXISTS)


async def download(session: aiohttp.ClientSession, url: str, path: Path) -> None:
    """
    Stream the body at ``url`` into a newly created file at ``path``.

    Parent directories are created. A partially written file is left in place
    when the transfer fails.

    Raises:
        DownloadError: On HTTP error status, network failure, or write failure
            (including a path the filesystem rejects)
    """
    try:
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with session.get(url) as response:
            response.raise_for_status()
            async with aiofiles.open(path, "wb") as f:
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    await f.write(chunk)
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
        raise DownloadError(url, e) from e


class WebResource(Preprocessor):
    """The `web-resource` preprocessor."""

    def __init__(self, name: str, config: WebResourceConfig, query: Query, context: RunContext) -> None:
        self._name = name
        self.config = config
        self.query = query
        self.context = context

    @property
    def name(self) -> str:
        return self._name

    async def run(self) -> None:
        resources = await self.query.execute(self.context, decode=Resource.list_from_json)

        index_path: Path | None = None
        index: ResourceIndex | None = None
        if self.config.index is not None:
            index_path = self.config.resolve_index_path(self.context.resolve_manifest())
            index = await ResourceIndex.load(index_path)

        if self.config.evict:
            if index is None:
                logger.warning("`evict` requires the index to be enabled; no files will be deleted")
            else:
                logger.warning("eviction is not yet supported; no files will be deleted")

        if not resources:
            logger.info("query returned no resources")

        async with aiohttp.ClientSession() as session:
            results = await asyncio.gather(
                *(self._sync(session, resource, index) for resource in resources),
                return_exceptions=True,
            )

        failures: list[Exception] = []
        for resource, result in zip(resources, results, strict=True):
            if isinstance(result, Exception):
                logger.error(f"{resource.path} failed: {result}")
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            elif index is not None:
                index.record(resource.path, resource.url)

        if index_path is not None and index is not None:
            await index.save(index_path)

        if failures:
            raise JobError(self.name, failures)

    async def _sync(self, session: aiohttp.ClientSession, resource: Resource, index: ResourceIndex | None) -> SyncDecision:
        path = self.context.resolve(resource.path)
        exists = await aiofiles.os.path.exists(path)
        decision = decide(exists, self.config.overwrite, index is not None)

        if not decision.download:
            logger.info(f"{resource.path} skipped ({decision.reason.value})")
            return decision

        note = ""
        if decision.reason is SyncReason.INDEX and index is not None:
            recorded = index.get(resource.path)
            if recorded is None:
                note = " (not in index)"
            elif recorded != resource.url:
                note = " (URL has changed)"
            else:
                note = " (refreshing)"
        elif decision.reason is SyncReason.OVERWRITE:
            note = " (overwriting)"

        logger.info(f"Downloading {resource.url} to {resource.path}{note}...")
        await download(session, resource.url, path)
        logger.info(f"{resource.path} finished")
        return decision


class WebResourceDefinition(PreprocessorDefinition):
    """The `web-resource` preprocessor factory."""

    KIND = "web-resource"

    @classmethod
    def parse_config(cls, config: dict[str, Any]) -> WebResourceConfig:
        try:
            return WebResourceConfig.from_dict(config)
        except ValueError as e:
            raise PreprocessorConfigError(cls.KIND, str(e)) from e

    @classmethod
    def build_query(cls, config: QueryConfig) -> Query:
        query = (
            Query.builder()
            .with_default_selector("<web-resource>")
            .with_default_field("value")
            .with_default_one(False)
            .build(config)
        )
        if query.one:
            raise PreprocessorConfigError(cls.KIND, "web-resource prequery does not support --one")
        return query

    @classmethod
    def configure(
        cls,
        name: str,
        config: dict[str, Any],
        query: QueryConfig,
        context: RunContext,
    ) -> WebResource:
        parsed = cls.parse_config(config)
        built = cls.build_query(query)
        return WebResource(name, parsed, built, context)
