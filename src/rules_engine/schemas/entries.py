"""
Searchable entry models.

Every rule fragment that can be searched (sections, stats, combat actions,
quick-reference blurbs, ...) is flattened into one SearchableEntry. Entries
are frozen: an index is rebuilt wholesale instead of patched.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntryType(str, Enum):
    """Kinds of searchable entries produced by the indexer"""
    QUICK_REFERENCE = "quick-reference"
    RULE_SECTION = "rule-section"
    RULE_SUBSECTION = "rule-subsection"
    STAT = "stat"
    COMBAT_ACTION = "combat-action"
    DAMAGE_TYPE = "damage-type"
    STATUS_CONDITION = "status-condition"
    EQUIPMENT_RULE = "equipment-rule"
    HUNT_PHASE = "hunt-phase"
    PAGE_NAVIGATION = "page-navigation"


class SearchableEntry(BaseModel):
    """
    One flattened, searchable piece of rule content.

    `source_names` is the citation list inherited from the owning section
    (only populated for source-linked entries).
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    type: EntryType = Field(..., description="Entry kind")
    category: str = Field(..., description="Category key the entry belongs to")
    title: str = Field(..., min_length=1, description="Display title")
    description: str = Field("", description="Description text")
    keywords: Tuple[str, ...] = Field(default_factory=tuple, description="Ordered keywords")
    path: str = Field(..., description="Route to the entry")
    section: str = Field("", description="Section label used for highlighting")
    id: Optional[str] = Field(None, description="Entry id (absent for unanchored entries)")
    is_quick_reference: bool = Field(False, description="Condensed cheat-sheet entry")
    is_source_linked: bool = Field(False, description="Inherits citations from its section")
    source_names: Tuple[str, ...] = Field(
        default_factory=tuple,
        description="Citation list of the owning section"
    )
    examples: Tuple[str, ...] = Field(default_factory=tuple, description="Examples (damage types)")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject whitespace-only titles"""
        if not v.strip():
            raise ValueError("Entry title must not be blank")
        return v

    @property
    def haystack(self) -> str:
        """Lowercased text a query is matched against"""
        return " ".join([self.title, self.description, " ".join(self.keywords)]).lower()


class SearchResult(SearchableEntry):
    """A searchable entry paired with the relevance score it earned for a query."""

    relevance_score: int = Field(
        0,
        serialization_alias="relevanceScore",
        description="Additive relevance score"
    )

    @classmethod
    def from_entry(cls, entry: SearchableEntry, score: int) -> "SearchResult":
        """Attach a score to an entry"""
        return cls(**entry.model_dump(), relevance_score=score)

    def to_dict(self) -> Dict[str, Any]:
        """Presentation payload"""
        return {
            "type": self.type,
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "path": self.path,
            "section": self.section,
            "id": self.id,
            "relevanceScore": self.relevance_score,
        }
