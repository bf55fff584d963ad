"""
Relevance-ranked search over indexed rule content.

The same term usually shows up several times in the corpus: as a
quick-reference blurb, as a stat, as a combat action and as a keyword of
unrelated sections. Ranking uses ownership signals to pick the entry that
is authoritative for the query:

- every query token must appear in title + description + keywords
- additive tiered scores (see SCORE_* constants)
- a canonical filter keeps entries whose owning section cites the query
- ties are broken by title, so results are fully deterministic
- when nothing is canonical, the best plain matches are returned instead
"""

from typing import Dict, List, Optional, Tuple
from loguru import logger

from rules_engine.config import settings
from rules_engine.indexing.content_indexer import (
    RulesIndex,
    section_sources,
    strip_marker,
)
from rules_engine.schemas.entries import EntryType, SearchableEntry, SearchResult

# Score tiers: each tier outweighs any realistic sum of the tiers below it
SCORE_TITLE = 10
SCORE_KEYWORD = 5
SCORE_DESCRIPTION = 2
SCORE_MARKER_KEYWORD = 1000
SCORE_SOURCE_LINKED = 2000
SCORE_SOURCE_NAME = 5000
SCORE_SECTION_CITATION = 20000


def tokenize(query: str) -> List[str]:
    """
    Split a query on whitespace runs and lowercase it.

    Args:
        query: Raw query text

    Returns:
        Lowercased tokens (empty for blank queries)
    """
    return query.lower().split()


def _sort_key(result: SearchResult) -> Tuple[int, str]:
    return (-result.relevance_score, result.title)


class SearchEngine:
    """
    Query executor over a RulesIndex.

    Stateless between calls: concurrent searches against the same index
    are safe.
    """

    def __init__(
        self,
        index: RulesIndex,
        max_results: Optional[int] = None,
        canonical_stat_category: Optional[str] = None
    ):
        """
        Initialize search engine.

        Args:
            index: Indexed rule content
            max_results: Maximum number of results per query
            canonical_stat_category: Category whose citing sections mark the
                result that is always promoted to the top
        """
        self.index = index
        self.max_results = max_results or settings.search_max_results
        self.canonical_stat_category = (
            canonical_stat_category or settings.canonical_stat_category
        )

        # section id -> [(category, section), ...] in document order
        self._sections_by_id: Dict[str, List[Tuple[str, dict]]] = {}
        for category, section in index.iter_sections():
            section_id = section.get("id")
            if isinstance(section_id, str) and section_id:
                self._sections_by_id.setdefault(section_id, []).append((category, section))

    def search(self, query: str) -> List[SearchResult]:
        """
        Search the index.

        Args:
            query: Free-text query; tokens are ANDed

        Returns:
            Up to max_results results, best first
        """
        if not isinstance(query, str) or not query.strip():
            return []

        terms = tokenize(query)
        phrase = query.strip().lower()

        results: List[SearchResult] = []
        canonical_stat: Optional[SearchableEntry] = None

        # Pass 1: score everything except quick-reference entries
        for entry in self.index.entries:
            if entry.is_quick_reference or not self._matches(entry, terms):
                continue

            score, citing_category = self._score(entry, phrase, terms)
            if citing_category == self.canonical_stat_category:
                canonical_stat = entry

            results.append(SearchResult.from_entry(entry, score))

        # Pass 2: quick-reference entries only qualify for the fallback
        for entry in self.index.entries:
            if entry.is_quick_reference and self._matches(entry, terms):
                results.append(SearchResult.from_entry(entry, 0))

        canonical = [r for r in results if self._is_canonical(r, terms)]
        ranked = sorted(canonical, key=_sort_key)[:self.max_results]

        if canonical_stat is not None:
            ranked = self._promote(ranked, canonical_stat)

        if not ranked:
            pool = [r for r in results if not r.is_quick_reference] or results
            ranked = sorted(pool, key=_sort_key)[:self.max_results]
            logger.debug(
                f"No canonical match for '{query}', falling back to {len(ranked)} nearest results"
            )
        else:
            logger.debug(f"Search '{query}': {len(ranked)} canonical results")

        return ranked

    @staticmethod
    def _matches(entry: SearchableEntry, terms: List[str]) -> bool:
        haystack = entry.haystack
        return all(term in haystack for term in terms)

    def _score(
        self,
        entry: SearchableEntry,
        phrase: str,
        terms: List[str]
    ) -> Tuple[int, Optional[str]]:
        """
        Compute the relevance score of a matching entry.

        Returns:
            (score, category of the section citing a query token or None)
        """
        score = 0

        if phrase in entry.title.lower():
            score += SCORE_TITLE

        score += SCORE_KEYWORD * sum(1 for k in entry.keywords if phrase in k.lower())

        if phrase in entry.description.lower():
            score += SCORE_DESCRIPTION

        if any(k.startswith("@") and phrase in k.lower() for k in entry.keywords):
            score += SCORE_MARKER_KEYWORD

        if entry.is_source_linked:
            score += SCORE_SOURCE_LINKED

        if any(strip_marker(s).lower() == phrase for s in entry.source_names):
            score += SCORE_SOURCE_NAME

        citing_category = self._citing_category(entry, terms)
        if citing_category is not None:
            score += SCORE_SECTION_CITATION

        return score, citing_category

    def _citing_category(self, entry: SearchableEntry, terms: List[str]) -> Optional[str]:
        """Category of the first section with the entry's id that cites a query token"""
        if not entry.id:
            return None

        for category, section in self._sections_by_id.get(entry.id, []):
            if self._cites(section, terms):
                return category
        return None

    @staticmethod
    def _cites(section: dict, terms: List[str]) -> bool:
        """True if any citation equals a query token exactly (marker-stripped)"""
        stripped_terms = {strip_marker(term) for term in terms}
        return any(
            strip_marker(source).lower() in stripped_terms
            for source in section_sources(section)
        )

    def _is_canonical(self, result: SearchResult, terms: List[str]) -> bool:
        if result.type == EntryType.STAT:
            return True
        if result.is_quick_reference or not result.id:
            return False

        if result.type == EntryType.COMBAT_ACTION:
            title = result.title.lower()
            for section in self.index.sections(result.category):
                lists_action = any(
                    str(action.get("name", "")).lower() == title
                    for action in section.get("actions") or []
                    if isinstance(action, dict)
                )
                if lists_action and self._cites(section, terms):
                    return True
            return False

        seen_categories = set()
        for category, section in self._sections_by_id.get(result.id, []):
            # only the first section with this id counts in each category
            if category in seen_categories:
                continue
            seen_categories.add(category)

            if self._cites(section, terms):
                return True

            for item in section.get("content") or []:
                if not isinstance(item, dict):
                    continue
                name = item.get("name")
                if isinstance(name, str) and name.lower() in terms:
                    return True

        return False

    @staticmethod
    def _promote(ranked: List[SearchResult], winner: SearchableEntry) -> List[SearchResult]:
        """Move the canonical stat result to the front"""
        for idx, result in enumerate(ranked):
            # a stat slug can equal a section id in the same category
            if (
                result.id == winner.id
                and result.category == winner.category
                and result.title == winner.title
            ):
                if idx > 0:
                    ranked = [result] + ranked[:idx] + ranked[idx + 1:]
                break
        return ranked
