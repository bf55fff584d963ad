"""
Content indexing.
"""

from rules_engine.indexing.content_indexer import (
    ContentIndexer,
    RulesIndex,
    dedupe_sources,
    slugify,
    strip_marker,
)

__all__ = [
    "ContentIndexer",
    "RulesIndex",
    "dedupe_sources",
    "slugify",
    "strip_marker",
]
