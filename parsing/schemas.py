"""
Pydantic schemas for parsed documents and chunks
Wire format is camelCase (pageNumber, chunkIndex); Python code uses snake_case.
"""

from typing import List, Optional, Union, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParsedElement(ApiModel):
    """
    A single text element returned by the external document parser.

    page_number may be missing; the chunker estimates it from the element's
    position in that case.
    """
    text: Optional[str] = Field(None, description="Extracted text content")
    page_number: Optional[int] = Field(None, ge=1, description="1-based page number, if known")
    element_type: str = Field("NarrativeText", description="Element class from the parser (Title, NarrativeText, ...)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"text": "Photosynthesis converts light energy...", "pageNumber": 2, "elementType": "NarrativeText"}
        }
    )


class Chunk(ApiModel):
    """Fixed-size, page-attributed slice of document text (unit of embedding)."""
    text: str = Field(..., min_length=1, description="Chunk text, non-empty after trim")
    page_number: int = Field(..., ge=1, description="Page the chunk was cut from")
    chunk_index: int = Field(..., ge=0, description="Monotonic index, unique within a document")

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chunk text must not be blank")
        return value


# ─── Parser boundary: tagged result ────────────────────────────────────────────

class ParseOk(BaseModel):
    kind: Literal["ok"] = "ok"
    elements: List[ParsedElement]

    @property
    def total_pages(self) -> Optional[int]:
        pages = [e.page_number for e in self.elements if e.page_number]
        return max(pages) if pages else None


class ParseErr(BaseModel):
    kind: Literal["err"] = "err"
    reason: str


ParseResult = Union[ParseOk, ParseErr]
