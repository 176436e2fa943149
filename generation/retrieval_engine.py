"""
Retrieval & Citation Engine

Answers a question from one document's indexed chunks:
1. Reject blank questions (no external call)
2. Embed the question
3. Vector search, filtered to documentId when given (top 5)
4. Nothing retrieved → fixed "not found" answer, no model call
5. Grounded prompt: answer only from context, cite [Page N], decline when
   the context is insufficient
6. One chat call (low temperature, bounded output)
7. Citations built from the top 3 retrieved chunks, never parsed from the
   model's prose, so they are correct whatever the model writes
"""

import asyncio
import logging
from typing import List, Optional

from config import Settings
from embeddings.generator import EmbeddingGenerator
from embeddings.qdrant_manager import QdrantManager
from embeddings.schemas import RetrievedMatch
from errors import InputValidationError, UpstreamTimeoutError
from generation.gpt_client import ChatClient
from generation.schemas import AnswerResult, Citation

log = logging.getLogger("rag.pipeline")

CITATION_LIMIT = 3
QUOTE_MAX_CHARS = 150
ELLIPSIS = "..."

NOT_FOUND_RESPONSE = (
    "I couldn't find any information about that in this document. "
    "Make sure the document has finished processing, or try rephrasing your question."
)

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful tutor answering questions about a single document. "
    "Answer ONLY using the context excerpts provided; do not use outside knowledge. "
    "Each excerpt is labelled with its page number, e.g. [Page 3]. "
    "Cite the page number inline whenever you use information from an excerpt, e.g. (p. 3). "
    "If the context does not contain enough information to answer, say so explicitly "
    "instead of guessing."
)


def truncate_quote(text: str, limit: int = QUOTE_MAX_CHARS) -> str:
    """t unchanged if len(t) <= limit, else t[:limit] + "..."."""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def build_citations(matches: List[RetrievedMatch], limit: int = CITATION_LIMIT) -> List[Citation]:
    """Citations for the best `limit` matches, in rank order."""
    ranked = sorted(matches, key=lambda m: m.rank)[:limit]
    return [Citation(page=m.page_number, quote=truncate_quote(m.chunk_text)) for m in ranked]


def format_context(matches: List[RetrievedMatch]) -> str:
    """Label each retrieved chunk with its page number."""
    parts = []
    for match in sorted(matches, key=lambda m: m.rank):
        parts.append(f"[Page {match.page_number}]\n{match.chunk_text.strip()}")
    return "\n\n---\n\n".join(parts)


def build_grounded_prompt(question: str, matches: List[RetrievedMatch]) -> str:
    return (
        f"CONTEXT:\n---\n{format_context(matches)}\n---\n\n"
        f"QUESTION: {question.strip()}\n\n"
        "Answer using only the context above and cite page numbers inline. "
        "If the context is insufficient, say that the document does not cover it."
    )


class RetrievalEngine:
    """Question answering over one document's indexed chunks."""

    def __init__(
        self,
        embedder: EmbeddingGenerator,
        index: QdrantManager,
        chat: ChatClient,
        settings: Settings,
    ):
        self.embedder = embedder
        self.index = index
        self.chat = chat
        self.settings = settings

    async def retrieve(self, question: str, document_id: Optional[str] = None) -> List[RetrievedMatch]:
        """Embed the question and return ranked matches (possibly empty)."""
        query_vector = await self.embedder.embed(question)
        result = await asyncio.to_thread(
            self.index.query,
            query_vector,
            self.settings.top_k,
            document_id,
        )
        return result.chunks

    async def _answer(self, question: str, document_id: Optional[str]) -> AnswerResult:
        matches = await self.retrieve(question, document_id)
        log.info(f"[QUERY] doc={document_id or '*'}: {len(matches)} chunks retrieved")

        if not matches:
            return AnswerResult(response=NOT_FOUND_RESPONSE, citations=[], matches=[], grounded=False)

        response = await self.chat.call_gpt(
            build_grounded_prompt(question, matches),
            system=ANSWER_SYSTEM_PROMPT,
            temperature=self.settings.answer_temperature,
            max_tokens=self.settings.answer_max_tokens,
        )
        return AnswerResult(
            response=response.strip(),
            citations=build_citations(matches),
            matches=matches,
        )

    async def answer(
        self,
        question: Optional[str],
        document_id: Optional[str] = None,
        include_matches: bool = False,
    ) -> AnswerResult:
        """
        Answer a question, grounded in (and citable to) the document.

        include_matches=True keeps the ranked retrieval results on the
        result (diagnostics); otherwise `matches` is empty.

        Raises:
            InputValidationError: blank question
            UpstreamError subclasses: embedding / vector store / chat failures,
                or UpstreamTimeoutError after QUERY_TIMEOUT_SECONDS
        """
        if not question or not question.strip():
            raise InputValidationError("Question must not be empty")
        if document_id is not None and not document_id.strip():
            document_id = None

        try:
            result = await asyncio.wait_for(
                self._answer(question, document_id),
                timeout=self.settings.query_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError(
                "Query timed out",
                f"exceeded {self.settings.query_timeout_seconds}s",
            ) from e

        if not include_matches:
            result.matches = []
        return result
