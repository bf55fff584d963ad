"""Schemas package exports"""

from rules_engine.schemas.database import RulesDatabase
from rules_engine.schemas.entries import EntryType, SearchableEntry, SearchResult
from rules_engine.schemas.references import ReferenceTarget, SourceLocation
from rules_engine.schemas.spans import Span, SpanKind

__all__ = [
    "RulesDatabase",
    "EntryType",
    "SearchableEntry",
    "SearchResult",
    "ReferenceTarget",
    "SourceLocation",
    "Span",
    "SpanKind",
]
