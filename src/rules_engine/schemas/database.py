"""
The complete, loaded document set the engine is built from.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class RulesDatabase(BaseModel):
    """
    Raw rule documents plus lookup tables.

    Documents are kept as parsed JSON: their shape varies per category and
    the indexer reads them defensively.
    """

    model_config = ConfigDict(frozen=True)

    documents: Dict[str, Any] = Field(
        default_factory=dict,
        description="category key -> RuleDocument ({title, sections})"
    )
    quick_reference: Dict[str, Any] = Field(
        default_factory=dict,
        description="category -> list of quick-reference items"
    )
    reference_ids: Dict[str, Any] = Field(
        default_factory=dict,
        description="'@Ref' -> {category, section?, description, title}"
    )
    category_titles: Dict[str, str] = Field(
        default_factory=dict,
        description="category key -> human readable title"
    )
    powers: List[Any] = Field(default_factory=list, description="Power catalog")
    equipment: List[Any] = Field(default_factory=list, description="Equipment catalog")
    monsters: List[Any] = Field(default_factory=list, description="Monster catalog")

    @property
    def categories(self) -> List[str]:
        """Category keys in registration order"""
        return list(self.documents.keys())

    def category_title(self, category: str) -> Optional[str]:
        return self.category_titles.get(category)
