"""
Autocomplete suggestions and page-navigation results for the search box.
"""

from typing import Dict, List, Optional, Sequence
from loguru import logger

from rules_engine.config import settings
from rules_engine.indexing.content_indexer import RulesIndex, strip_marker
from rules_engine.schemas.entries import EntryType, SearchResult

# Page names offered as suggestions
PAGE_NAMES = (
    "Character Creation",
    "Combat Mechanics",
    "Death and Resting",
    "Progression",
    "Casting",
    "Powers",
    "Equipment",
    "Monsters",
    "Quick Reference",
    "Running the Game",
    "Player Tools",
    "GM Tools",
)

# Lowercase page name -> route, used for navigation results
PAGE_ROUTES: Dict[str, str] = {
    "character creation": "/character-creation",
    "combat mechanics": "/combat-mechanics",
    "death and resting": "/death-and-resting",
    "progression": "/progression",
    "casting": "/casting",
    "powers": "/powers",
    "equipment": "/equipment",
    "monsters": "/monsters",
    "quick reference": "/quick-reference",
    "running the game": "/running-the-game",
    "player tools": "/player-tools",
    "gm tools": "/gm-tools",
    "about": "/about",
    "what is i must kill": "/about",
    "home": "/",
}

NAVIGATION_EXACT_SCORE = 10000
NAVIGATION_PARTIAL_SCORE = 5000


def format_result_type(entry_type: str) -> str:
    """
    Human readable label for an entry type.

    'combat-action' -> 'Combat Action', 'page-navigation' -> 'Page'
    """
    if entry_type == EntryType.PAGE_NAVIGATION:
        return "Page"
    return " ".join(word[:1].upper() + word[1:] for word in entry_type.split("-"))


class SuggestionProvider:
    """
    Keyword suggestions and page navigation over a RulesIndex.
    """

    def __init__(
        self,
        index: RulesIndex,
        min_length: Optional[int] = None,
        limit: Optional[int] = None,
        navigation_limit: Optional[int] = None
    ):
        """
        Initialize suggestion provider.

        Args:
            index: Indexed rule content
            min_length: Shortest query that produces suggestions
            limit: Maximum number of suggestions
            navigation_limit: Maximum number of combined navigation results
        """
        self.index = index
        self.min_length = min_length or settings.suggestion_min_length
        self.limit = limit or settings.suggestion_limit
        self.navigation_limit = navigation_limit or settings.navigation_limit

    def suggest(self, query: str) -> List[str]:
        """
        Autocomplete suggestions for a partial query.

        Candidates are entry titles, keywords (marker-stripped), page names
        and reference-id titles. Ordered exact match first, then prefix
        matches, then alphabetically.

        Args:
            query: Partial query text

        Returns:
            Up to `limit` suggestions
        """
        if not query or len(query) < self.min_length:
            return []

        lower_query = query.lower()
        # dict keeps first-seen order and dedupes
        suggestions: Dict[str, None] = {}

        for entry in self.index.entries:
            if lower_query in entry.title.lower():
                suggestions[entry.title] = None
            for keyword in entry.keywords:
                clean = strip_marker(keyword)
                if lower_query in clean.lower():
                    suggestions[clean] = None

        for page in PAGE_NAMES:
            if lower_query in page.lower():
                suggestions[page] = None

        for ref_id, ref_data in self.index.reference_ids.items():
            if not isinstance(ref_data, dict):
                continue
            title = ref_data.get("title")
            if not isinstance(title, str) or not title:
                continue
            if lower_query in strip_marker(ref_id).lower() or lower_query in title.lower():
                suggestions[title] = None

        def rank(suggestion: str):
            lower = suggestion.lower()
            if lower == lower_query:
                tier = 0
            elif lower.startswith(lower_query):
                tier = 1
            else:
                tier = 2
            return (tier, lower, suggestion)

        ranked = sorted(suggestions, key=rank)[:self.limit]
        logger.debug(f"{len(ranked)} suggestions for '{query}'")
        return ranked

    def navigation_results(self, query: str) -> List[SearchResult]:
        """Page-navigation results for pages whose name contains the query"""
        lower_query = query.lower().strip()
        if len(lower_query) < self.min_length:
            return []

        results = []
        for page_name, path in PAGE_ROUTES.items():
            if lower_query not in page_name:
                continue
            title = page_name[:1].upper() + page_name[1:]
            results.append(SearchResult(
                type=EntryType.PAGE_NAVIGATION,
                category="navigation",
                title=title,
                description=f"Go to {title} page",
                path=path,
                section=title,
                relevance_score=(
                    NAVIGATION_EXACT_SCORE if page_name == lower_query
                    else NAVIGATION_PARTIAL_SCORE
                ),
            ))
        return results

    def navigate(self, query: str, search_results: Sequence[SearchResult]) -> List[SearchResult]:
        """
        Merge page-navigation results with rule search results.

        Args:
            query: Query text
            search_results: Results of SearchEngine.search for the same query

        Returns:
            Combined results by score (stable), up to `navigation_limit`
        """
        combined = self.navigation_results(query) + list(search_results)
        combined.sort(key=lambda r: -r.relevance_score)
        return combined[:self.navigation_limit]
