"""
Document Parser client
Sends an uploaded file to the hosted Unstructured API and maps the returned
elements to ParsedElement.

CONSTRAINTS:
- No chunking, no embeddings, no DB writes
- Returns a tagged ParseResult; malformed payloads become ParseErr instead
  of leaking None/garbage into the chunker
"""

import logging
from typing import Any, List, Optional

import httpx

from parsing.schemas import ParsedElement, ParseErr, ParseOk, ParseResult

log = logging.getLogger(__name__)


def elements_from_payload(payload: Any) -> ParseResult:
    """
    Map an Unstructured API response body to a ParseResult.

    Expected shape: [{"type": "Title", "text": "...", "metadata": {"page_number": 1}}, ...]
    Items that are not objects are skipped; a non-list body is an error.
    """
    if not isinstance(payload, list):
        return ParseErr(reason=f"Unexpected parser response: expected a list, got {type(payload).__name__}")

    elements: List[ParsedElement] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        metadata = item.get("metadata") or {}
        page = metadata.get("page_number") if isinstance(metadata, dict) else None
        if not isinstance(page, int) or isinstance(page, bool) or page < 1:
            page = None
        text = item.get("text")
        elements.append(
            ParsedElement(
                text=text if isinstance(text, str) else None,
                page_number=page,
                element_type=str(item.get("type") or "NarrativeText"),
            )
        )
    return ParseOk(elements=elements)


class UnstructuredClient:
    """Thin async client for the external document-parsing service."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self._http = http_client

    async def parse(self, filename: str, content: bytes, content_type: str = "application/pdf") -> ParseResult:
        """
        Parse a document's bytes into ordered elements.

        Returns:
            ParseOk(elements) or ParseErr(reason); never raises for
            provider-side failures.
        """
        if not content:
            return ParseErr(reason="Empty file")

        files = {"files": (filename, content, content_type)}
        headers = {"unstructured-api-key": self.api_key, "accept": "application/json"}
        try:
            if self._http is not None:
                response = await self._http.post(self.api_url, files=files, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.api_url, files=files, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            log.warning(f"[PARSE] {filename}: parser returned HTTP {e.response.status_code}")
            return ParseErr(reason=f"Parser returned HTTP {e.response.status_code}: {e.response.text[:200]}")
        except httpx.HTTPError as e:
            log.warning(f"[PARSE] {filename}: parser request failed: {e}")
            return ParseErr(reason=f"Parser request failed: {e}")
        except ValueError as e:
            return ParseErr(reason=f"Parser returned invalid JSON: {e}")

        result = elements_from_payload(payload)
        if isinstance(result, ParseOk):
            log.info(f"[PARSE] {filename}: {len(result.elements)} elements")
        return result
