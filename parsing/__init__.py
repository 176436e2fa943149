"""
Parsing package
Parsed-element schemas, the external parser client and the page-aware chunker
"""

from .chunker import build_record_id, chunk_elements, group_pages
from .schemas import Chunk, ParsedElement, ParseErr, ParseOk, ParseResult

__all__ = [
    "build_record_id",
    "chunk_elements",
    "group_pages",
    "Chunk",
    "ParsedElement",
    "ParseErr",
    "ParseOk",
    "ParseResult",
]
