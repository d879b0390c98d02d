"""
Base classes for preprocessors.

A preprocessor kind is registered through its PreprocessorDefinition, which
validates the job's configuration and produces a runnable Preprocessor.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from prequery.config.types import QueryConfig
from prequery.core.context import RunContext
from prequery.core.query import Query


class Preprocessor(ABC):
    """A configured job, ready to run."""

    query: Query

    @property
    @abstractmethod
    def name(self) -> str:
        """The job's name, used in logs."""

    @abstractmethod
    async def run(self) -> None:
        """
        Execute the job's query and act on the result.

        Raises:
            PrequeryError: If the job fails
        """


class PreprocessorDefinition(ABC):
    """Factory for one preprocessor kind."""

    KIND: ClassVar[str]

    @classmethod
    @abstractmethod
    def configure(
        cls,
        name: str,
        config: dict[str, Any],
        query: QueryConfig,
        context: RunContext,
    ) -> Preprocessor:
        """
        Create a preprocessor for a job of this kind.

        Args:
            name: The job's name
            config: The job's kind-specific configuration table
            query: The job's query configuration, before applying this kind's defaults
            context: The run context

        Raises:
            ConfigurationError: If the configuration or query is not valid for this kind
        """
