"""
Typed spans produced by the text annotator.
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from rules_engine.schemas.references import ReferenceTarget


class SpanKind(str, Enum):
    """Presentation kind of an annotated span"""
    PLAIN = "plain"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold-italic"
    REFERENCE_LINK = "reference-link"
    KEYWORD_LINK = "keyword-link"


class Span(BaseModel):
    """
    A piece of annotated text.

    Link spans carry their target; the presentation layer builds tooltips
    and routes from it.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    kind: SpanKind
    text: str
    target: Optional[ReferenceTarget] = Field(None, description="Link target for link spans")

    @property
    def is_link(self) -> bool:
        return self.target is not None

    @property
    def display_text(self) -> str:
        """Text as shown to the reader (reference markers drop their '@')"""
        if self.kind == SpanKind.REFERENCE_LINK.value and self.text.startswith("@"):
            return self.text[1:]
        return self.text

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind, "text": self.text}
        if self.target is not None:
            data["target"] = self.target.to_dict()
        return data
