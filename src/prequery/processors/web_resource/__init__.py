"""
The `web-resource` preprocessor: downloads files declared in the document.
"""

from prequery.processors.web_resource.config import DEFAULT_INDEX_FILENAME, WebResourceConfig
from prequery.processors.web_resource.index import ResourceIndex
from prequery.processors.web_resource.preprocessor import (
    Resource,
    SyncAction,
    SyncDecision,
    SyncReason,
    WebResource,
    WebResourceDefinition,
    decide,
    download,
)

__all__ = [
    "DEFAULT_INDEX_FILENAME",
    "Resource",
    "ResourceIndex",
    "SyncAction",
    "SyncDecision",
    "SyncReason",
    "WebResource",
    "WebResourceConfig",
    "WebResourceDefinition",
    "decide",
    "download",
]
