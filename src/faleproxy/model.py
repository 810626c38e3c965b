# src/faleproxy/model.py
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class NodeKind(Enum):
    """Kinds of nodes in a parsed document, as seen by the substitution walker."""
    TEXT = "text"
    ELEMENT = "element"
    COMMENT = "comment"
    DOCTYPE = "doctype"
    CDATA = "cdata"
    PROCESSING_INSTRUCTION = "processing_instruction"
    DECLARATION = "declaration"
    RAW_TEXT = "raw_text"


class CasePattern(Enum):
    UPPER = "upper"
    LOWER = "lower"
    CAPITALIZED = "capitalized"
    MIXED = "mixed"


class Match(BaseModel):
    """A case-insensitive occurrence of the target word inside a text string."""
    model_config = ConfigDict(frozen=True)

    text: str
    start: int
    end: int
    pattern: CasePattern


class TransformResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    transformed_html: str
    title: str = ""
    original_url: str

    def to_response(self) -> Dict[str, Any]:
        """Renders the JSON body returned by POST /fetch."""
        return {
            "success": True,
            "content": self.transformed_html,
            "title": self.title,
            "originalUrl": self.original_url,
        }


class FetchResult(BaseModel):
    url: str
    final_url: str
    status_code: int
    content_type: Optional[str] = None
    body: str = ""
    elapsed_time: float = 0.0


class LinkPlan(BaseModel):
    """How the viewer should treat one anchor of the proxied page."""
    model_config = ConfigDict(frozen=True)

    original_url: str
    raw_href: str
    href: str
    intercept: bool
    title: Optional[str] = None
    target: Optional[str] = None
    rel: Optional[str] = None
    css_class: Optional[str] = Field(default=None, serialization_alias="class")
