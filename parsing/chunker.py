"""
Page-aware chunker: group → trim → window.

Strategy:
1. Group: parsed elements are grouped by page number, texts joined with "\n"
   in element order. Elements without a usable page number get an estimate
   from their position (one page per ELEMENTS_PER_PAGE_ESTIMATE elements).
2. Trim: each page's text is stripped; empty pages are skipped.
3. Window: non-overlapping windows of `window_size` characters. Windowing
   restarts on every page, so a chunk never spans two pages. Windows whose
   stripped length is not above `min_chunk_length` are dropped as noise;
   kept windows are stored as raw slices, so joining a page's chunks gives
   back the trimmed page text (less any dropped windows).

chunk_index is one counter shared by every page of the document, so
(document_id, chunk_index) is unique and reproducible for identical input.
Malformed input never raises; it just yields fewer (or zero) chunks.
"""

from typing import Any, Dict, Iterable, List, Optional

from parsing.schemas import Chunk

DEFAULT_WINDOW_SIZE = 500
DEFAULT_MIN_CHUNK_LENGTH = 50
ELEMENTS_PER_PAGE_ESTIMATE = 20


def build_record_id(document_id: str, chunk_index: int) -> str:
    """Deterministic id of a chunk's embedding record."""
    return f"{document_id}_chunk_{chunk_index}"


def _field(elem: Any, name: str, alias: Optional[str] = None) -> Any:
    """Read a field from a ParsedElement, a plain object or a dict."""
    if isinstance(elem, dict):
        if name in elem:
            return elem[name]
        return elem.get(alias) if alias else None
    return getattr(elem, name, None)


def _page_of(elem: Any, ordinal: int) -> int:
    page = _field(elem, "page_number", "pageNumber")
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        return ordinal // ELEMENTS_PER_PAGE_ESTIMATE + 1
    return page


def group_pages(elements: Optional[Iterable[Any]]) -> Dict[int, str]:
    """
    Concatenate element texts per page (newline-separated, element order).

    Returns {page_number: trimmed page text} in ascending page order, with
    whitespace-only pages omitted.
    """
    pages: Dict[int, List[str]] = {}
    for ordinal, elem in enumerate(elements or []):
        text = _field(elem, "text")
        if not isinstance(text, str):
            continue
        pages.setdefault(_page_of(elem, ordinal), []).append(text)

    grouped: Dict[int, str] = {}
    for page in sorted(pages):
        page_text = "\n".join(pages[page]).strip()
        if page_text:
            grouped[page] = page_text
    return grouped


def chunk_elements(
    elements: Optional[Iterable[Any]],
    window_size: int = DEFAULT_WINDOW_SIZE,
    min_chunk_length: int = DEFAULT_MIN_CHUNK_LENGTH,
) -> List[Chunk]:
    """
    Split parsed elements into page-attributed chunks.

    Args:
        elements: ParsedElement objects (or dicts with text/pageNumber)
        window_size: Characters per window (> 0)
        min_chunk_length: A window is kept only if its stripped length exceeds this

    Returns:
        Chunks in chunk_index order. An empty list means the document had
        nothing indexable; callers skip embedding instead of failing.
    """
    if window_size <= 0:
        window_size = DEFAULT_WINDOW_SIZE

    chunks: List[Chunk] = []
    chunk_index = 0
    for page, page_text in group_pages(elements).items():
        for start in range(0, len(page_text), window_size):
            window = page_text[start:start + window_size]
            if len(window.strip()) <= min_chunk_length:
                continue
            chunks.append(Chunk(text=window, page_number=page, chunk_index=chunk_index))
            chunk_index += 1
    return chunks
