"""
CRUD operations for the tutor record store
All database operations go through these functions
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from database import models, schemas


# ==========================================
# QUIZ ATTEMPT CRUD (append-only)
# ==========================================

def create_attempt(db: Session, attempt: schemas.QuizAttemptCreate, score: float) -> models.QuizAttemptRecord:
    """Persist a quiz attempt with its final score"""
    db_attempt = models.QuizAttemptRecord(
        document_id=attempt.document_id,
        questions=[q.model_dump(by_alias=True) for q in attempt.questions],
        user_answers=dict(attempt.user_answers),
        score=score,
    )
    db.add(db_attempt)
    db.commit()
    db.refresh(db_attempt)
    return db_attempt


def list_attempts(db: Session, document_id: Optional[str] = None) -> List[models.QuizAttemptRecord]:
    """Attempts newest first, optionally for one document"""
    query = db.query(models.QuizAttemptRecord)
    if document_id:
        query = query.filter(models.QuizAttemptRecord.document_id == document_id)
    return query.order_by(
        models.QuizAttemptRecord.timestamp.desc(),
        models.QuizAttemptRecord.id.desc(),
    ).all()


# ==========================================
# DOCUMENT CRUD
# ==========================================

def create_document(db: Session, document_id: str, filename: str, stored_path: str, size_bytes: int) -> models.DocumentRecord:
    db_document = models.DocumentRecord(
        id=document_id,
        filename=filename,
        stored_path=stored_path,
        size_bytes=size_bytes,
        status=models.DocumentStatus.UPLOADED.value,
    )
    db.add(db_document)
    db.commit()
    db.refresh(db_document)
    return db_document


def get_document(db: Session, document_id: str) -> Optional[models.DocumentRecord]:
    """Get document by ID"""
    return db.query(models.DocumentRecord).filter(models.DocumentRecord.id == document_id).first()


def list_documents(db: Session, skip: int = 0, limit: int = 100) -> List[models.DocumentRecord]:
    """Documents newest first"""
    return db.query(models.DocumentRecord).order_by(
        models.DocumentRecord.created_at.desc()
    ).offset(skip).limit(limit).all()


def update_document_status(
    db: Session,
    document_id: str,
    status: models.DocumentStatus,
    chunk_count: Optional[int] = None,
) -> Optional[models.DocumentRecord]:
    db_document = get_document(db, document_id)
    if not db_document:
        return None
    db_document.status = status.value
    if chunk_count is not None:
        db_document.chunk_count = chunk_count
    db.commit()
    db.refresh(db_document)
    return db_document


def delete_document(db: Session, document_id: str) -> bool:
    """Delete a document record; quiz attempts for it are kept"""
    db_document = get_document(db, document_id)
    if not db_document:
        return False
    db.delete(db_document)
    db.commit()
    return True
