"""
Unit tests for SearchEngine ranking, canonical filtering and fallback.
"""

import pytest

from rules_engine.indexing.content_indexer import ContentIndexer
from rules_engine.schemas.database import RulesDatabase
from rules_engine.schemas.entries import EntryType
from rules_engine.search.search_engine import (
    SCORE_DESCRIPTION,
    SCORE_KEYWORD,
    SCORE_MARKER_KEYWORD,
    SCORE_SECTION_CITATION,
    SCORE_SOURCE_LINKED,
    SCORE_SOURCE_NAME,
    SCORE_TITLE,
    SearchEngine,
    tokenize,
)


@pytest.fixture
def engine(rules_index):
    """Search engine over the sample index"""
    return SearchEngine(rules_index)


def trait_database(count):
    """One section holding `count` equally scored stats"""
    names = [f"Trait {chr(ord('A') + i % 26)}{i:02d}" for i in range(count)]
    return RulesDatabase(documents={
        "character-creation": {
            "sections": [
                {
                    "id": "traits",
                    "title": "Traits",
                    "description": "All of them.",
                    "content": [
                        {"name": name, "description": "a trait"} for name in reversed(names)
                    ],
                }
            ]
        }
    })


class TestTokenize:
    """Test query tokenization"""

    def test_tokenize_lowercases_and_splits(self):
        """Test whitespace runs split and tokens are lowercased"""
        assert tokenize("  Heavy \t STRIKE  ") == ["heavy", "strike"]

    def test_tokenize_blank(self):
        """Test blank query gives no tokens"""
        assert tokenize("   ") == []


class TestSearchEngine:
    """Test SearchEngine.search"""

    def test_blank_query_returns_empty(self, engine):
        """Test whitespace-only queries return nothing"""
        assert engine.search("") == []
        assert engine.search("   \t ") == []

    def test_all_tokens_must_match(self, engine):
        """Test every returned entry contains every query token"""
        for query in ["body", "body toughness", "push", "ash", "shove", "fire"]:
            tokens = tokenize(query)
            for result in engine.search(query):
                assert all(t in result.haystack for t in tokens)

    def test_no_match_returns_empty(self, engine):
        """Test unknown terms return nothing"""
        assert engine.search("xyzzy") == []

    def test_canonical_stat_promoted(self, engine):
        """Test the character-creation section citing the query moves to the top"""
        results = engine.search("body")

        assert [r.title for r in results] == ["Stats", "Body", "Body in Combat"]
        assert results[0].relevance_score == (
            SCORE_KEYWORD + SCORE_MARKER_KEYWORD + SCORE_SECTION_CITATION
        )
        # the stat outscored the promoted section
        assert results[1].relevance_score > results[0].relevance_score

    def test_stat_score_tiers(self, engine):
        """Test additive scoring of a source-linked stat"""
        body = [r for r in engine.search("body") if r.type == EntryType.STAT][0]
        assert body.relevance_score == (
            SCORE_TITLE + SCORE_SOURCE_LINKED + SCORE_SOURCE_NAME + SCORE_SECTION_CITATION
        )

    def test_quick_reference_excluded_from_canonical(self, engine):
        """Test quick-reference entries never appear next to canonical results"""
        results = engine.search("strength")

        assert len(results) == 1
        assert results[0].type == EntryType.STAT
        assert results[0].relevance_score == (
            SCORE_KEYWORD + SCORE_DESCRIPTION + SCORE_SOURCE_LINKED
        )
        assert not any(r.is_quick_reference for r in results)

    def test_combat_action_canonical(self, engine):
        """Test actions listed by a section that cites the query are canonical"""
        results = engine.search("push")

        assert len(results) == 1
        push = results[0]
        assert push.type == EntryType.COMBAT_ACTION
        assert push.path == "/combat-mechanics#push"
        assert push.relevance_score == SCORE_TITLE + SCORE_SOURCE_LINKED + SCORE_SOURCE_NAME

    def test_combat_action_token_citation(self, engine):
        """Test citation matching is per token, not per phrase"""
        results = engine.search("heavy strike")

        assert [r.title for r in results] == ["Heavy Strike"]
        assert results[0].relevance_score == SCORE_TITLE + SCORE_SOURCE_LINKED

    def test_combat_action_needs_exact_citation(self, combat_mechanics_doc):
        """Test a citation containing the token is not enough for an action"""
        index = ContentIndexer().build(RulesDatabase(documents={
            "combat-mechanics": combat_mechanics_doc,
            "death-and-resting": {
                "sections": [
                    {
                        "id": "wounds",
                        "title": "Infected Wounds",
                        "description": "Pus and fever.",
                        "%Source": ["Pus"],
                    }
                ]
            },
        }))

        results = SearchEngine(index).search("pus")

        assert [r.title for r in results] == ["Infected Wounds"]

    def test_section_with_named_content_is_canonical(self):
        """Test a section listing an item named like a token is canonical"""
        index = ContentIndexer().build(RulesDatabase(documents={
            "character-creation": {
                "sections": [
                    {
                        "id": "toughness",
                        "title": "Grit Rules",
                        "description": "Pushing through pain.",
                        "content": [{"name": "Grit"}],
                    },
                    {
                        "id": "rules",
                        "title": "Rules",
                        "description": "General rules.",
                        "%Source": ["Rules"],
                    },
                ]
            }
        }))
        engine = SearchEngine(index)

        grit = [r for r in engine.search("grit") if r.title == "Grit Rules"]
        assert len(grit) == 1
        assert grit[0].type == EntryType.RULE_SECTION

        # no content item is named "rules", so only the citing section passes
        assert [r.title for r in engine.search("rules")] == ["Rules"]

    def test_surrounding_whitespace_ignored(self, engine):
        """Test padded queries score exactly like trimmed ones"""
        padded = [r.to_dict() for r in engine.search("  body ")]
        trimmed = [r.to_dict() for r in engine.search("body")]

        assert padded == trimmed
        assert [r.relevance_score for r in engine.search("heavy strike ")] == [
            SCORE_TITLE + SCORE_SOURCE_LINKED
        ]

    def test_section_citation_outranks(self, engine):
        """Test a section citing the query beats entries without the citation"""
        results = engine.search("ash")

        assert results[0].title == "Lineage"
        assert results[0].relevance_score >= SCORE_SECTION_CITATION
        # the subsection is not canonical for this query
        assert "Ashborn" not in [r.title for r in results]

    def test_fallback_when_nothing_canonical(self, engine):
        """Test nearest matches are returned when no entry is canonical"""
        results = engine.search("shove")

        assert [r.title for r in results] == ["Push"]
        assert results[0].relevance_score == (
            SCORE_KEYWORD + SCORE_DESCRIPTION + SCORE_SOURCE_LINKED
        )

    def test_fallback_prefers_non_quick_reference(self, engine):
        """Test fallback drops quick-reference entries when others matched"""
        results = engine.search("fire")

        assert [r.title for r in results] == ["Fire"]
        assert results[0].type == EntryType.DAMAGE_TYPE

    def test_fallback_to_quick_reference_only(self, engine):
        """Test quick-reference entries are returned when nothing else matches"""
        results = engine.search("parrying")

        assert [r.title for r in results] == ["Blades"]
        assert results[0].relevance_score == 0
        assert results[0].is_quick_reference

    def test_fallback_sorted_by_score_then_title(self, engine):
        """Test fallback results follow the same ordering rule"""
        results = engine.search("the")

        keys = [(-r.relevance_score, r.title) for r in results]
        assert keys == sorted(keys)

    def test_ties_broken_by_title(self):
        """Test equal scores are ordered by title"""
        index = ContentIndexer().build(trait_database(3))
        results = SearchEngine(index).search("trait")

        titles = [r.title for r in results if r.type == EntryType.STAT]
        assert titles == sorted(titles)
        assert len({r.relevance_score for r in results if r.type == EntryType.STAT}) == 1

    def test_results_truncated(self):
        """Test at most max_results entries are returned"""
        index = ContentIndexer().build(trait_database(30))

        assert len(SearchEngine(index).search("trait")) == 20
        assert len(SearchEngine(index, max_results=5).search("trait")) == 5

    def test_results_sorted(self, engine):
        """Test non-promoted results are score-descending"""
        results = engine.search("combat")
        keys = [(-r.relevance_score, r.title) for r in results]
        assert keys == sorted(keys)

    def test_search_is_deterministic(self, engine):
        """Test repeated searches return identical results"""
        assert engine.search("body") == engine.search("body")

    def test_case_insensitive(self, engine):
        """Test query case does not change results"""
        assert engine.search("BODY") == engine.search("body")

    def test_result_to_dict(self, engine):
        """Test presentation payload keys"""
        payload = engine.search("push")[0].to_dict()

        assert payload == {
            "type": "combat-action",
            "category": "combat-mechanics",
            "title": "Push",
            "description": "Shove a foe one zone using Body.",
            "path": "/combat-mechanics#push",
            "section": "Push",
            "id": "push",
            "relevanceScore": SCORE_TITLE + SCORE_SOURCE_LINKED + SCORE_SOURCE_NAME,
        }

    def test_custom_canonical_category(self, rules_index):
        """Test the promoted category is configurable"""
        engine = SearchEngine(rules_index, canonical_stat_category="combat-mechanics")
        results = engine.search("body")

        # both stat Body and Body in Combat cite from combat-mechanics;
        # the last one scored wins the promotion
        assert results[0].title == "Body in Combat"
