"""
Prequery exception hierarchy.

All domain-specific exceptions inherit from PrequeryError, making it easy
to catch any runner error with a single base class while still allowing
fine-grained handling when needed.

Hierarchy::

    PrequeryError
    ├── ConfigurationError          - detected before any job runs
    │   ├── ManifestError           - typst.toml loading / parsing
    │   ├── UnknownKindError        - job kind not registered
    │   ├── PreprocessorConfigError - kind-specific config rejected
    │   ├── QueryBuilderError       - required query setting unresolved
    │   │   ├── MissingSelectorError
    │   │   ├── MissingFieldError
    │   │   └── MissingOneError
    │   └── JobConfigurationError   - aggregate of per-job config errors
    ├── QueryError                  - running `typst query`
    │   ├── QueryIOError            - launching / reading the child process
    │   ├── QueryFailedError        - non-zero exit status
    │   └── QueryDecodeError        - output not JSON / wrong shape
    ├── ResourceError               - a single resource of a sync job
    │   ├── PathOutsideRootError
    │   └── DownloadError
    ├── ResourceIndexError          - index file read / write
    └── JobError                    - job finished with failed resources
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class PrequeryError(Exception):
    """Base exception for all prequery errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(PrequeryError):
    """Raised when configuration loading, parsing, or validation fails."""


class ManifestError(ConfigurationError):
    """Raised when the prequery section of typst.toml cannot be loaded."""


class UnknownKindError(ConfigurationError):
    """Raised when a job names a preprocessor kind that is not registered."""

    def __init__(self, kind: str, available: Sequence[str] = ()) -> None:
        message = f"unknown preprocessor kind '{kind}'"
        if available:
            message += f" (available: {', '.join(sorted(available))})"
        super().__init__(message, details={"kind": kind})
        self.kind = kind


class PreprocessorConfigError(ConfigurationError):
    """Raised when a preprocessor kind rejects its job configuration."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"invalid {kind} configuration: {message}", details={"kind": kind})
        self.kind = kind


class QueryBuilderError(ConfigurationError):
    """Raised when a required query setting has neither a value nor a default."""

    field_name = ""

    def __init__(self) -> None:
        super().__init__(
            f"`{self.field_name}` was not specified but is required",
            details={"field": self.field_name},
        )


class MissingSelectorError(QueryBuilderError):
    field_name = "selector"


class MissingFieldError(QueryBuilderError):
    field_name = "field"


class MissingOneError(QueryBuilderError):
    field_name = "one"


class JobConfigurationError(ConfigurationError):
    """Raised when at least one job could not be configured.

    ``errors`` holds every ``(job name, error)`` pair, in manifest order.
    """

    def __init__(self, errors: Sequence[tuple[str, ConfigurationError]]) -> None:
        lines = [f"[{name}] {error}" for name, error in errors]
        super().__init__(
            "at least one preprocessor has configuration errors:\n" + "\n".join(lines),
            details={"jobs": [name for name, _ in errors]},
        )
        self.errors = list(errors)


# --- Query execution ---------------------------------------------------------


class QueryError(PrequeryError):
    """Raised when executing a query fails."""


class QueryIOError(QueryError):
    """Raised when the `typst query` child process cannot be launched or read."""

    def __init__(self, cause: OSError) -> None:
        super().__init__(f"reading from the `typst query` child process failed: {cause}")
        self.__cause__ = cause


class QueryFailedError(QueryError):
    """Raised when `typst query` exits with a non-zero status."""

    def __init__(self, command: Sequence[str], status: int) -> None:
        rendered = " ".join(command)
        super().__init__(
            f"query command failed: exit status {status}\n\n\t{rendered}",
            details={"command": list(command), "status": status},
        )
        self.command = list(command)
        self.status = status


class QueryDecodeError(QueryError):
    """Raised when the query output is not JSON or does not fit the expected shape."""

    def __init__(self, message: str = "", *, cause: Exception | None = None) -> None:
        full = "query response was not valid JSON or did not fit the expected schema"
        if message:
            full += f": {message}"
        super().__init__(full)
        if cause is not None:
            self.__cause__ = cause


# --- Resources ---------------------------------------------------------------


class ResourceError(PrequeryError):
    """Raised when a single resource of a sync job fails."""


class PathOutsideRootError(ResourceError):
    """Raised when a declared path resolves outside the project root."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(
            f"cannot download to {path} because it is outside the project root",
            details={"path": str(path)},
        )
        self.path = str(path)


class DownloadError(ResourceError):
    """Raised when fetching or writing a remote resource fails."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"downloading {url} failed: {cause}", details={"url": url})
        self.url = url
        self.cause = cause
        self.__cause__ = cause


# --- Index -------------------------------------------------------------------


class ResourceIndexError(PrequeryError):
    """Raised when a web-resource index file cannot be read or written."""

    def __init__(self, path: str | Path, message: str) -> None:
        super().__init__(f"index file {path}: {message}", details={"path": str(path)})
        self.path = str(path)


# --- Jobs --------------------------------------------------------------------


class JobError(PrequeryError):
    """Raised when a job attempted all its work but some of it failed."""

    def __init__(self, job_name: str, failures: Sequence[Exception]) -> None:
        count = len(failures)
        noun = "resource" if count == 1 else "resources"
        message = f"{count} {noun} failed"
        if failures:
            message += ":\n" + "\n".join(f"  - {failure}" for failure in failures)
        super().__init__(message, details={"job": job_name})
        self.job_name = job_name
        self.failures = list(failures)
