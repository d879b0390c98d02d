"""
Preprocessor registry.

Maps the `kind` of each configured job to the definition that builds it.
"""

from __future__ import annotations

from collections.abc import Iterable

from prequery.config.types import Job
from prequery.core.context import RunContext
from prequery.exceptions import ConfigurationError, JobConfigurationError, UnknownKindError
from prequery.processors.base import Preprocessor, PreprocessorDefinition
from prequery.utils.logging import get_logger

logger = get_logger("prequery.processors.registry")

PreprocessorRegistry = dict[str, type[PreprocessorDefinition]]


def build_default_preprocessor_registry() -> PreprocessorRegistry:
    """
    Build registry of built-in preprocessor kinds.
    """
    from prequery.processors.web_resource import WebResourceDefinition

    registry: PreprocessorRegistry = {}
    for definition in (WebResourceDefinition,):
        registry[definition.KIND] = definition
    return registry


def instantiate(job: Job, registry: PreprocessorRegistry, context: RunContext) -> Preprocessor:
    """
    Create the preprocessor for a single job.

    Raises:
        UnknownKindError: If the job's kind is not registered
        ConfigurationError: If the kind rejects the job's configuration
    """
    definition = registry.get(job.kind)
    if definition is None:
        raise UnknownKindError(job.kind, available=list(registry))
    return definition.configure(job.name, job.config, job.query, context)


def configure_jobs(
    jobs: Iterable[Job],
    *,
    registry: PreprocessorRegistry | None = None,
    context: RunContext,
) -> list[Preprocessor]:
    """
    Create preprocessors for all jobs.

    Construction of every job is attempted; if any of them fails, nothing is
    returned and all failures are reported together.

    Raises:
        JobConfigurationError: Listing every job that could not be configured
    """
    registry = registry if registry is not None else build_default_preprocessor_registry()
    preprocessors: list[Preprocessor] = []
    errors: list[tuple[str, ConfigurationError]] = []
    for job in jobs:
        try:
            preprocessors.append(instantiate(job, registry, context))
        except ConfigurationError as e:
            errors.append((job.name, e))

    if errors:
        raise JobConfigurationError(errors)

    logger.debug(f"configured {len(preprocessors)} job(s)")
    return preprocessors
