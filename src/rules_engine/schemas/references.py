"""
Link targets and provenance of rule citations.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ReferenceTarget(BaseModel):
    """
    Where a keyword, title or `@marker` links to.

    `page` is the category key; `type` is the entry type for rule content,
    or one of "power", "equipment", "monster", "reference".
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Key as registered (original casing)")
    page: str = Field(..., description="Category / page the target lives on")
    path: str = Field(..., description="Route to the target")
    section: Optional[str] = Field(None, description="Section label or anchor")
    description: str = Field("", description="Tooltip description")
    type: str = Field(..., description="Target type")
    title: Optional[str] = Field(None, description="Display title")

    @property
    def is_reference(self) -> bool:
        """True for explicit reference-id targets"""
        return self.type == "reference"

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class SourceLocation(BaseModel):
    """A section that cites a name in its `%Source` list."""

    model_config = ConfigDict(frozen=True)

    category: str
    category_title: Optional[str] = None
    section_id: str
    section_title: str
    description: str = ""
    path: str
