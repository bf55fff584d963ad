"""
RulesEngine: one immutable bundle of index, resolver, search and annotation.

Documents are loaded elsewhere (see rules_engine.parsers). Whenever they
change, build a new engine with rebuild(); nothing is patched in place.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
from loguru import logger

from rules_engine.annotation.text_annotator import TextAnnotator
from rules_engine.indexing.content_indexer import ContentIndexer, RulesIndex
from rules_engine.parsers.rules_loader import RulesLoader
from rules_engine.schemas.database import RulesDatabase
from rules_engine.schemas.entries import SearchableEntry, SearchResult
from rules_engine.schemas.references import ReferenceTarget, SourceLocation
from rules_engine.schemas.spans import Span
from rules_engine.search.reference_resolver import ReferenceResolver
from rules_engine.search.search_engine import SearchEngine
from rules_engine.search.suggestions import SuggestionProvider


class RulesEngine:
    """
    Facade over the indexing, search and annotation components.

    Features:
    - search(query) with canonical ranking and fallback
    - resolve(key) for titles, keywords and @reference ids
    - annotate(text) into typed spans
    - suggestions, page navigation and citation (source map) lookups
    """

    def __init__(self, database: RulesDatabase):
        """
        Build every component from a complete document set.

        Args:
            database: Loaded rule documents
        """
        self.database = database
        self.index: RulesIndex = ContentIndexer().build(database)
        self.resolver = ReferenceResolver.build(
            self.index,
            powers=database.powers,
            equipment=database.equipment,
            monsters=database.monsters,
        )
        self.search_engine = SearchEngine(self.index)
        self.annotator = TextAnnotator(self.resolver)
        self.suggestions = SuggestionProvider(self.index)

        logger.info(
            f"Rules engine ready: {len(self.index)} entries, {len(self.resolver)} link keys"
        )

    @classmethod
    def from_directory(cls, data_dir: Optional[Path] = None) -> "RulesEngine":
        """
        Load documents from disk and build an engine.

        Args:
            data_dir: Directory holding rules-database.json (defaults to settings)

        Returns:
            Ready RulesEngine
        """
        return cls(RulesLoader(data_dir).load())

    def rebuild(self, database: RulesDatabase) -> "RulesEngine":
        """Build a fresh engine for a changed document set"""
        return RulesEngine(database)

    @property
    def entries(self) -> List[SearchableEntry]:
        return list(self.index.entries)

    def search(self, query: str) -> List[SearchResult]:
        return self.search_engine.search(query)

    def search_with_navigation(self, query: str) -> List[SearchResult]:
        """Search results merged with matching page-navigation results"""
        return self.suggestions.navigate(query, self.search(query))

    def resolve(self, key: str) -> Optional[ReferenceTarget]:
        return self.resolver.resolve(key)

    def annotate(self, text: str, references_only: bool = True) -> List[Span]:
        return self.annotator.annotate(text, references_only)

    def suggest(self, query: str) -> List[str]:
        return self.suggestions.suggest(query)

    def get_rule(self, category: str, section_id: str) -> Optional[Dict[str, Any]]:
        return self.index.get_rule(category, section_id)

    def get_category_rules(self, category: str) -> Optional[Dict[str, Any]]:
        return self.index.get_category_rules(category)

    def get_source_map(self) -> Dict[str, List[SourceLocation]]:
        return self.index.get_source_map()

    def get_uncategorized_rules(self) -> List[str]:
        return self.index.get_uncategorized_rules()
