"""
Pydantic schemas for request/response validation
Separate from SQLAlchemy models for clean API contracts
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field

from generation.schemas import QuizQuestion
from parsing.schemas import ApiModel


# ==========================================
# QUIZ ATTEMPT SCHEMAS
# ==========================================

class QuizAttemptCreate(ApiModel):
    """Schema for saving a quiz attempt; score is recomputed when omitted"""
    document_id: str = Field(..., min_length=1, description="Document the quiz was generated from")
    questions: List[QuizQuestion] = Field(..., min_length=1)
    user_answers: Dict[str, str] = Field(default_factory=dict, description="question id → answer")
    score: Optional[float] = Field(None, ge=0, le=100)


class QuizAttemptResponse(ApiModel):
    id: int
    document_id: str
    questions: List[QuizQuestion]
    user_answers: Dict[str, str]
    score: float
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


# ==========================================
# DOCUMENT SCHEMAS
# ==========================================

class DocumentResponse(ApiModel):
    id: str
    filename: str
    size_bytes: int
    status: str
    chunk_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
