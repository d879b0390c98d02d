"""
Run context shared by all jobs of one invocation.

Holds the resolved command-line settings (input document, project root, query
tool, manifest location). It is created once at startup and passed explicitly
into every component that needs root-relative path resolution.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from prequery.exceptions import ManifestError, PathOutsideRootError

MANIFEST_FILENAME = "typst.toml"


def _normalize(path: Path) -> Path:
    """Absolute, lexically normalized path; symlinks are not followed."""
    return Path(os.path.normpath(os.path.abspath(path)))


@dataclass(frozen=True)
class RunContext:
    """
    Settings for a single prequery run.

    Attributes:
        input: The Typst document that queries run against
        root: Explicit project root (``--root``); None means the input's directory
        typst: The typst executable used for queries
        manifest: Explicit manifest file; None means search for typst.toml
    """

    input: Path
    root: Path | None = None
    typst: str = "typst"
    manifest: Path | None = None

    @property
    def project_root(self) -> Path:
        """The root that all resource paths must stay inside."""
        if self.root is not None:
            return _normalize(self.root)
        return _normalize(self.input).parent

    def resolve(self, path: str | Path) -> Path:
        """
        Resolve a project-relative path against the project root.

        The check is purely lexical, so a path that escapes the root is
        rejected without touching the filesystem.

        Raises:
            PathOutsideRootError: If the resolved path is not inside the root
        """
        root = self.project_root
        resolved = Path(os.path.normpath(root / path))
        if not resolved.is_relative_to(root):
            raise PathOutsideRootError(path)
        return resolved

    def resolve_manifest(self) -> Path:
        """
        Locate the manifest file.

        Uses the explicit manifest if one was given, otherwise the nearest
        typst.toml in the input's directory or one of its parents, without
        leaving the project root.

        Raises:
            ManifestError: If no manifest can be found
        """
        if self.manifest is not None:
            manifest = _normalize(self.manifest)
            if not manifest.is_file():
                raise ManifestError(f"manifest file not found: {manifest}")
            return manifest

        root = self.project_root
        directory = _normalize(self.input).parent
        while True:
            candidate = directory / MANIFEST_FILENAME
            if candidate.is_file():
                return candidate
            if directory == root or directory.parent == directory or not directory.is_relative_to(root):
                break
            directory = directory.parent

        raise ManifestError(
            f"{MANIFEST_FILENAME} not found for {self.input}\n"
            f"  Suggestion: Create a {MANIFEST_FILENAME} next to the document or in the project root"
        )
