"""
Preprocessor kinds and the registry that maps job kinds to them.
"""

from prequery.processors.base import Preprocessor, PreprocessorDefinition
from prequery.processors.registry import build_default_preprocessor_registry, configure_jobs, instantiate

__all__ = [
    "Preprocessor",
    "PreprocessorDefinition",
    "build_default_preprocessor_registry",
    "configure_jobs",
    "instantiate",
]
