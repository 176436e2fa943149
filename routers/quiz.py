"""
Quiz Router

Endpoints:
  POST /generate-quiz  — validated mcq / saq / laq question set from document text
  POST /save-attempt   — persist a scored attempt (append-only)
  GET  /get-progress   — attempts newest first, optionally for one document
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.orm import Session

from database import crud
from database.database import get_db
from database.schemas import QuizAttemptCreate, QuizAttemptResponse
from errors import InputValidationError
from generation.question_generator import QuizGenerator
from generation.schemas import QuizQuestion
from generation.scoring import score_attempt
from parsing.schemas import ApiModel
from routers.deps import get_quiz_generator

router = APIRouter(tags=["quiz"])

log = logging.getLogger("rag.pipeline")

# client-reported scores may differ from the recomputed one by rounding only
SCORE_TOLERANCE = 0.01


class GenerateQuizRequest(ApiModel):
    content: Optional[str] = Field(None, description="Document text to quiz on (at least 100 characters)")
    question_count: int = Field(30, description="Total questions; split evenly across mcq / saq / laq")


class GenerateQuizResponse(ApiModel):
    success: bool = True
    questions: List[QuizQuestion]
    count: int
    rejected: int = 0
    content_truncated: bool = False


class SaveAttemptResponse(ApiModel):
    success: bool = True
    attempt: QuizAttemptResponse


class ProgressResponse(ApiModel):
    success: bool = True
    attempts: List[QuizAttemptResponse]


@router.post("/generate-quiz", response_model=GenerateQuizResponse)
async def generate_quiz(
    request: GenerateQuizRequest,
    generator: QuizGenerator = Depends(get_quiz_generator),
):
    """
    Generate a self-test quiz.

    Every returned question passed validation; `rejected` counts model
    items that were dropped.
    """
    result = await generator.generate(request.content, request.question_count)
    log.info(f"[QUIZ] returning {len(result.questions)} questions ({result.rejected} rejected)")
    return GenerateQuizResponse(
        questions=result.questions,
        count=len(result.questions),
        rejected=result.rejected,
        content_truncated=result.content_truncated,
    )


@router.post("/save-attempt", response_model=SaveAttemptResponse)
def save_attempt(attempt: QuizAttemptCreate, db: Session = Depends(get_db)):
    """Score (or verify the client's score) and store a quiz attempt."""
    score = score_attempt(attempt.questions, attempt.user_answers)
    if attempt.score is not None and abs(attempt.score - score) > SCORE_TOLERANCE:
        raise InputValidationError(
            "Score does not match the submitted answers",
            f"submitted {attempt.score}, computed {score:.2f}",
        )
    db_attempt = crud.create_attempt(db, attempt, score)
    log.info(f"[QUIZ] saved attempt {db_attempt.id} for doc={attempt.document_id}: score {score:.1f}")
    return SaveAttemptResponse(attempt=QuizAttemptResponse.model_validate(db_attempt))


@router.get("/get-progress", response_model=ProgressResponse)
def get_progress(
    document_id: Optional[str] = Query(None, alias="documentId"),
    db: Session = Depends(get_db),
):
    attempts = crud.list_attempts(db, document_id)
    return ProgressResponse(attempts=[QuizAttemptResponse.model_validate(a) for a in attempts])
