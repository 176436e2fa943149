"""
Error taxonomy for the tutor API

Every failure surfaces as a TutorError subclass carrying an HTTP status,
a human-readable `error` and an optional diagnostic `detail` (usually the
provider's own message). main.py turns these into the
{"success": false, "error": ..., "detail": ...} envelope.

Empty results (no retrieved chunks, nothing indexable) are NOT errors.
"""

from typing import Optional


class TutorError(Exception):
    """Base class for all errors reported to API callers."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, error: Optional[str] = None, detail: Optional[str] = None):
        self.error = error or self.default_message
        self.detail = detail
        super().__init__(self.error if not detail else f"{self.error}: {detail}")


# ─── Input validation (4xx, no external call made) ────────────────────────────

class InputValidationError(TutorError):
    status_code = 400
    default_message = "Invalid request"


class PayloadTooLargeError(TutorError):
    status_code = 413
    default_message = "Payload too large"


class NotFoundError(TutorError):
    status_code = 404
    default_message = "Not found"


# ─── Upstream provider failures (5xx, never retried transparently) ────────────

class UpstreamError(TutorError):
    status_code = 502
    default_message = "Upstream service failed"


class UpstreamTimeoutError(UpstreamError):
    status_code = 504
    default_message = "Upstream service timed out"


class EmbeddingProviderError(UpstreamError):
    default_message = "Embedding provider failed"


class EmbeddingRateLimitError(EmbeddingProviderError):
    default_message = "Embedding provider rate limit exceeded"


class EmbeddingTimeoutError(EmbeddingProviderError):
    status_code = 504
    default_message = "Embedding provider timed out"


class EmbeddingInputError(TutorError):
    status_code = 400
    default_message = "Cannot embed empty text"


class VectorStoreError(UpstreamError):
    default_message = "Vector store request failed"


class ChatProviderError(UpstreamError):
    default_message = "Chat model request failed"


class DocumentParseError(UpstreamError):
    default_message = "Failed to parse document"


class VideoSearchError(UpstreamError):
    default_message = "Failed to search videos"


# ─── Malformed generative output ──────────────────────────────────────────────

class QuizGenerationError(UpstreamError):
    """The chat call succeeded but its payload violates the quiz contract."""

    reason: str = "invalid_output"
    default_message = "Failed to generate quiz"


class EmptyModelOutputError(QuizGenerationError):
    reason = "empty_output"
    default_message = "Model returned an empty response"


class MalformedModelOutputError(QuizGenerationError):
    reason = "invalid_json"
    default_message = "Model output is not valid JSON"

    def __init__(self, error: Optional[str] = None, detail: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(error, detail)
        if reason:
            self.reason = reason


class EmptyQuestionSetError(QuizGenerationError):
    reason = "empty_array"
    default_message = "Model returned no questions"
