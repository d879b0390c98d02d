"""
Prequery - runs preprocessing jobs for Typst documents.

Each job queries metadata out of a document with `typst query` and acts on the
result, e.g. downloading the web resources the document declares.
"""

__version__ = "0.1.0"

from prequery.config import FieldSetting, Job, Manifest, QueryConfig, load_manifest
from prequery.core import JobResult, Query, QueryBuilder, RunContext, run_all, run_jobs
from prequery.exceptions import (
    ConfigurationError,
    DownloadError,
    JobConfigurationError,
    JobError,
    ManifestError,
    MissingFieldError,
    MissingOneError,
    MissingSelectorError,
    PathOutsideRootError,
    PreprocessorConfigError,
    PrequeryError,
    QueryBuilderError,
    QueryDecodeError,
    QueryError,
    QueryFailedError,
    QueryIOError,
    ResourceError,
    ResourceIndexError,
    UnknownKindError,
)
from prequery.processors import Preprocessor, PreprocessorDefinition, build_default_preprocessor_registry, configure_jobs
from prequery.utils.logging import get_logger, setup_logging

__all__ = [
    "__version__",
    # Manifest
    "FieldSetting",
    "Job",
    "Manifest",
    "QueryConfig",
    "load_manifest",
    # Execution
    "JobResult",
    "Query",
    "QueryBuilder",
    "RunContext",
    "run_all",
    "run_jobs",
    # Preprocessors
    "Preprocessor",
    "PreprocessorDefinition",
    "build_default_preprocessor_registry",
    "configure_jobs",
    # Exceptions
    "ConfigurationError",
    "DownloadError",
    "JobConfigurationError",
    "JobError",
    "ManifestError",
    "MissingFieldError",
    "MissingOneError",
    "MissingSelectorError",
    "PathOutsideRootError",
    "PreprocessorConfigError",
    "PrequeryError",
    "QueryBuilderError",
    "QueryDecodeError",
    "QueryError",
    "QueryFailedError",
    "QueryIOError",
    "ResourceError",
    "ResourceIndexError",
    "UnknownKindError",
    # Logging
    "get_logger",
    "setup_logging",
]
