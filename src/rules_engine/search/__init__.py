"""
Search and cross-reference components.
"""

from rules_engine.search.reference_resolver import ReferenceResolver
from rules_engine.search.search_engine import SearchEngine, tokenize
from rules_engine.search.suggestions import SuggestionProvider, format_result_type

__all__ = [
    "ReferenceResolver",
    "SearchEngine",
    "tokenize",
    "SuggestionProvider",
    "format_result_type",
]
