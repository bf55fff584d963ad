"""
pytest configuration and shared fixtures.
"""

import json
import pytest
from pathlib import Path

from rules_engine.indexing.content_indexer import ContentIndexer, RulesIndex
from rules_engine.schemas.database import RulesDatabase
from rules_engine.search.reference_resolver import ReferenceResolver


@pytest.fixture
def character_creation_doc():
    """Character creation document with stats and a lineage section"""
    return {
        "title": "Character Creation",
        "sections": [
            {
                "id": "stats",
                "title": "Stats",
                "description": "Your core attributes.",
                "keywords": ["@Body", "attributes"],
                "%Source": ["Body", "body", "Mind"],
                "content": [
                    {
                        "name": "Body",
                        "description": "Physical strength and toughness.",
                        "keywords": ["strength"],
                    },
                    {
                        "name": "Mind",
                        "description": "Reasoning and willpower.",
                    },
                ],
            },
            {
                "id": "body-checks",
                "title": "Body Checks",
                "description": "Rolling Body against hazards.",
                "keywords": ["body check"],
            },
            {
                "id": "lineage",
                "title": "Lineage",
                "description": "Ash and Ember bloodlines.",
                "%Source": ["Ash", "ash", "Ember"],
                "subsections": [
                    {
                        "id": "ashborn",
                        "title": "Ashborn",
                        "description": "Born of the ember wastes.",
                        "%Source": ["Ash", "ASH", "Ember"],
                    }
                ],
            },
        ],
    }


@pytest.fixture
def combat_mechanics_doc():
    """Combat document covering every domain-specific array"""
    return {
        "title": "Combat Mechanics",
        "sections": [
            {
                "id": "actions",
                "title": "Actions",
                "description": "What you can do on your turn.",
                "%Source": ["Push", "Strike"],
                "actions": [
                    {
                        "name": "Push",
                        "description": "Shove a foe one zone using Body.",
                        "keywords": ["shove"],
                    },
                    {
                        "name": "Heavy Strike",
                        "description": "A slow, crushing attack.",
                        "keywords": ["attack"],
                    },
                ],
            },
            {
                "id": "body",
                "title": "Body in Combat",
                "description": "Using your physique in a fight.",
                "%Source": ["Body"],
            },
            {
                "id": "damage",
                "title": "Damage",
                "description": "How harm is dealt.",
                "types": [
                    {"name": "Fire", "description": "Burns and spreads.", "examples": ["torch"]}
                ],
            },
            {
                "id": "conditions",
                "title": "Conditions",
                "description": "Lasting effects.",
                "%Source": ["@Focus"],
                "conditions": [{"name": "Stunned", "description": "Lose your next action."}],
            },
            {
                "id": "gear",
                "title": "Gear",
                "description": "Equipment rules.",
                "equipment": [{"name": "Shield", "effect": "Block one hit per round."}],
            },
            {
                "id": "hunt",
                "title": "The Hunt",
                "description": "Phases of a hunt.",
                "keywords": ["hunt"],
                "phases": [{"name": "Tracking", "description": "Follow the trail."}],
            },
        ],
    }


@pytest.fixture
def quick_reference():
    """Quick-reference table"""
    return {
        "stats": [
            {
                "stat": "Body",
                "description": "Quick Body summary.",
                "keywords": ["strength"],
                "%Source": ["Body"],
            }
        ],
        "weapons": [
            {"type": "Blades", "uses": ["cutting", "parrying"]},
        ],
    }


@pytest.fixture
def reference_ids():
    """Explicit reference ids"""
    return {
        "@Body": {
            "category": "character-creation",
            "section": "stats",
            "description": "Physical power.",
            "title": "Body",
        },
        "@Focus": {
            "category": "casting",
            "description": "Mental focus.",
            "title": "Focus",
        },
    }


@pytest.fixture
def rules_database(character_creation_doc, combat_mechanics_doc, quick_reference, reference_ids):
    """Complete document set"""
    return RulesDatabase(
        documents={
            "character-creation": character_creation_doc,
            "combat-mechanics": combat_mechanics_doc,
            "broken": {"title": "No sections here"},
        },
        quick_reference=quick_reference,
        reference_ids=reference_ids,
        category_titles={
            "character-creation": "Character Creation",
            "combat-mechanics": "Combat Mechanics",
        },
    )


@pytest.fixture
def rules_index(rules_database) -> RulesIndex:
    """Index built from the sample document set"""
    return ContentIndexer().build(rules_database)


@pytest.fixture
def resolver(rules_index) -> ReferenceResolver:
    """Resolver built from the sample index"""
    return ReferenceResolver.build(rules_index)


@pytest.fixture
def data_dir(tmp_path, character_creation_doc, combat_mechanics_doc, quick_reference, reference_ids) -> Path:
    """Data directory laid out like the published rules files"""
    database = {
        "rulesDatabase": {
            "categories": {
                "character-creation": {
                    "title": "Character Creation",
                    "file": "character-creation.json",
                },
                "combat-mechanics": {
                    "title": "Combat Mechanics",
                    "file": "combat-mechanics.json",
                },
            },
            "quickReference": quick_reference,
            "referenceIds": reference_ids,
        }
    }
    (tmp_path / "rules-database.json").write_text(json.dumps(database), encoding="utf-8")
    (tmp_path / "character-creation.json").write_text(
        json.dumps({"characterCreation": character_creation_doc}), encoding="utf-8"
    )
    (tmp_path / "combat-mechanics.json").write_text(
        json.dumps({"combatMechanics": combat_mechanics_doc}), encoding="utf-8"
    )
    (tmp_path / "powers.json").write_text(
        json.dumps({"powers": [{"name": "Cleave", "deck": "Warrior", "description": "Hit twice."}]}),
        encoding="utf-8",
    )
    return tmp_path
