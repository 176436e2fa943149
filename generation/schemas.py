"""
Pydantic schemas for answers, citations and quizzes.
Supports: mcq (4 options) AND saq / laq (free-text) question types.
"""

from typing import List, Literal, Optional

from pydantic import Field, model_validator

from embeddings.schemas import RetrievedMatch
from parsing.schemas import ApiModel

QuestionType = Literal["mcq", "saq", "laq"]
MCQ_OPTION_COUNT = 4


# ─── Grounded answers ──────────────────────────────────────────────────────────

class Citation(ApiModel):
    """Page + quote pair traceable to one retrieved chunk."""
    page: int
    quote: str


class AnswerResult(ApiModel):
    response: str
    citations: List[Citation] = Field(default_factory=list)
    matches: List[RetrievedMatch] = Field(default_factory=list)
    grounded: bool = Field(True, description="False when nothing was retrieved and the fallback answer was used")


# ─── Quiz ─────────────────────────────────────────────────────────────────────

class QuizQuestion(ApiModel):
    """
    One self-test question.

    mcq: exactly 4 distinct non-empty options, correct_answer is one of them.
    saq / laq: no options.
    """
    id: str
    type: QuestionType
    question: str = Field(..., min_length=1)
    options: Optional[List[str]] = None
    correct_answer: str = Field(..., min_length=1)
    explanation: str = ""

    @model_validator(mode="after")
    def _check_shape(self) -> "QuizQuestion":
        if not self.question.strip():
            raise ValueError("question must not be blank")
        if not self.correct_answer.strip():
            raise ValueError("correctAnswer must not be blank")
        if self.type == "mcq":
            options = self.options or []
            if len(options) != MCQ_OPTION_COUNT:
                raise ValueError(f"mcq needs exactly {MCQ_OPTION_COUNT} options, got {len(options)}")
            if any(not o.strip() for o in options):
                raise ValueError("mcq options must be non-empty")
            if len({o.strip().lower() for o in options}) != MCQ_OPTION_COUNT:
                raise ValueError("mcq options must be distinct")
            if self.correct_answer not in options:
                raise ValueError("correctAnswer must be one of the options")
        elif self.options:
            raise ValueError(f"{self.type} questions have no options")
        return self


class RejectedQuestion(ApiModel):
    index: int
    reason: str


class ValidationReport(ApiModel):
    questions: List[QuizQuestion] = Field(default_factory=list)
    rejected: List[RejectedQuestion] = Field(default_factory=list)


class QuizComposition(ApiModel):
    mcq: int
    saq: int
    laq: int

    @property
    def total(self) -> int:
        return self.mcq + self.saq + self.laq


class QuizResult(ApiModel):
    questions: List[QuizQuestion]
    rejected: int = 0
    generation_attempts: int = 1
    content_truncated: bool = False
