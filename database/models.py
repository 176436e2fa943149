"""
SQLAlchemy models for the tutor record store

Vectors live in Qdrant; these tables hold uploaded documents and
append-only quiz attempts.
"""

import enum

from sqlalchemy import JSON, Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func

from database.database import Base


class DocumentStatus(str, enum.Enum):
    UPLOADED = "uploaded"
    INDEXED = "indexed"
    EMPTY = "empty"      # parsed fine, nothing indexable
    FAILED = "failed"


class DocumentRecord(Base):
    """
    One uploaded PDF.
    id is the documentId used as the vector index tenancy key.
    """
    __tablename__ = "documents"

    id = Column(String(255), primary_key=True, index=True)
    filename = Column(String(512), nullable=False)
    stored_path = Column(String(1024), nullable=False)
    size_bytes = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=DocumentStatus.UPLOADED.value)
    chunk_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<DocumentRecord(id='{self.id}', filename='{self.filename}', status='{self.status}')>"


class QuizAttemptRecord(Base):
    """
    One submitted quiz attempt. Immutable once written.
    questions / user_answers are stored as JSON snapshots of what was answered.
    """
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(String(255), nullable=False, index=True)
    questions = Column(JSON, nullable=False)
    user_answers = Column(JSON, nullable=False)
    score = Column(Float, nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<QuizAttemptRecord(id={self.id}, document_id='{self.document_id}', score={self.score})>"
