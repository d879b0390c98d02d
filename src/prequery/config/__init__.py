"""
Manifest types and loading for the `[tool.prequery]` section of typst.toml.
"""

from prequery.config.loader import load_manifest, parse_manifest, read_manifest
from prequery.config.types import FieldMode, FieldSetting, Job, Manifest, QueryConfig

__all__ = [
    "FieldMode",
    "FieldSetting",
    "Job",
    "Manifest",
    "QueryConfig",
    "load_manifest",
    "parse_manifest",
    "read_manifest",
]
