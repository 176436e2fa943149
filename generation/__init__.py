"""
Answer + Quiz Generation
generation/

Steps:
1. Retrieval Engine    — embed question, document-filtered top-k search, grounded answer
2. Citation Builder    — page + truncated quote from the top retrieved chunks
3. Question Generator  — one chat call for a mixed mcq / saq / laq set
4. Validator           — code-fence repair, JSON parse, per-question checks
5. Scoring             — percentage score for a submitted quiz attempt
"""

from .gpt_client import ChatClient
from .question_generator import QuizGenerator, split_composition
from .retrieval_engine import NOT_FOUND_RESPONSE, RetrievalEngine, build_citations, truncate_quote
from .scoring import score_attempt

__all__ = [
    "ChatClient",
    "QuizGenerator",
    "split_composition",
    "NOT_FOUND_RESPONSE",
    "RetrievalEngine",
    "build_citations",
    "truncate_quote",
    "score_attempt",
]
