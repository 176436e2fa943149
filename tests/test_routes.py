"""
HTTP tests for the FastAPI app.

Adapters are swapped through app.dependency_overrides; the lifespan is not
run (no `with TestClient(...)`), so no real provider is ever contacted.
"""

import json
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import models  # noqa: F401  (registers tables on Base)
from database.database import Base, get_db
from generation.question_generator import QuizGenerator
from generation.retrieval_engine import NOT_FOUND_RESPONSE, RetrievalEngine
from ingestion.pipeline import IngestionPipeline
from main import app
from parsing.chunker import chunk_elements
from parsing.schemas import ParseErr, ParseOk
from routers import deps
from services.file_store import LocalFileStore
from services.video_search import VideoRecommendation

from helpers import chat_response, three_page_elements

QUIZ_JSON = json.dumps([
    {
        "type": "mcq",
        "question": "Which organelle powers the cell?",
        "options": ["Nucleus", "Mitochondria", "Ribosome", "Vacuole"],
        "correctAnswer": "Mitochondria",
    },
    {"type": "saq", "question": "What is ATP?", "correctAnswer": "Energy currency"},
    {"type": "laq", "question": "Describe respiration.", "correctAnswer": "Glucose is oxidised..."},
])
CONTENT = "Mitochondria generate most of the chemical energy needed by the cell. " * 3


@pytest.fixture
def parser():
    mock = Mock()
    mock.parse = AsyncMock(return_value=ParseOk(elements=three_page_elements()))
    return mock


@pytest.fixture
def video_client():
    mock = Mock()
    mock.search = AsyncMock(return_value=[
        VideoRecommendation(id="abc", title="Cells 101", thumbnail="t.jpg", url="https://www.youtube.com/watch?v=abc")
    ])
    return mock


@pytest.fixture
def client(embedder, index, chat, settings, parser, video_client):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    store = LocalFileStore(settings.upload_dir, settings.max_upload_size)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_embedder] = lambda: embedder
    app.dependency_overrides[deps.get_index] = lambda: index
    app.dependency_overrides[deps.get_ingestion_pipeline] = lambda: IngestionPipeline(embedder, index, settings)
    app.dependency_overrides[deps.get_retrieval_engine] = lambda: RetrievalEngine(embedder, index, chat, settings)
    app.dependency_overrides[deps.get_quiz_generator] = lambda: QuizGenerator(chat, settings)
    app.dependency_overrides[deps.get_parser] = lambda: parser
    app.dependency_overrides[deps.get_file_store] = lambda: store
    app.dependency_overrides[deps.get_video_client] = lambda: video_client
    yield TestClient(app)
    app.dependency_overrides.clear()
    engine.dispose()


def _ingest_chunks():
    return [c.model_dump(by_alias=True) for c in chunk_elements(three_page_elements())]


class TestIngestAndQuery:
    def test_ingest_then_query_cites_page_two(self, client):
        response = client.post("/ingest", json={"documentId": "doc-bio", "chunks": _ingest_chunks()})
        assert response.status_code == 200
        assert response.json() == {"success": True, "chunksProcessed": 7}

        response = client.post("/query", json={"question": "What do mitochondria do in the cell?", "documentId": "doc-bio"})
        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["citations"][0]["page"] == 2
        assert len(body["citations"]) == 3

    def test_query_for_other_document_returns_fallback(self, client):
        client.post("/ingest", json={"documentId": "doc-bio", "chunks": _ingest_chunks()})
        body = client.post("/query", json={"question": "mitochondria?", "documentId": "doc-other"}).json()
        assert body["response"] == NOT_FOUND_RESPONSE
        assert body["citations"] == []
        assert body["grounded"] is False

    def test_blank_question_is_400_envelope(self, client):
        response = client.post("/query", json={"question": "  "})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Question must not be empty", "detail": None}

    def test_empty_chunk_list(self, client):
        response = client.post("/ingest", json={"documentId": "doc-empty", "chunks": []})
        assert response.json()["chunksProcessed"] == 0

    def test_malformed_body_is_400_envelope(self, client):
        response = client.post("/ingest", json={"chunks": [{"text": "", "pageNumber": 0, "chunkIndex": -1}]})
        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert "documentId" in body["detail"]


class TestQuiz:
    def test_short_content_rejected(self, client, fake_openai):
        response = client.post("/generate-quiz", json={"content": "x" * 50})
        assert response.status_code == 400
        assert "at least 100 characters" in response.json()["error"]
        fake_openai.chat.completions.create.assert_not_awaited()

    def test_generate_quiz(self, client, fake_openai):
        fake_openai.chat.completions.create.return_value = chat_response(QUIZ_JSON)
        body = client.post("/generate-quiz", json={"content": CONTENT, "questionCount": 3}).json()
        assert body["success"] is True
        assert body["count"] == 3
        assert body["rejected"] == 0
        assert body["questions"][0]["correctAnswer"] == "Mitochondria"
        assert "options" not in body["questions"][1] or body["questions"][1]["options"] is None

    def test_malformed_model_output_is_502_with_reason(self, client, fake_openai):
        fake_openai.chat.completions.create.return_value = chat_response("not json at all")
        response = client.post("/generate-quiz", json={"content": CONTENT, "questionCount": 3})
        assert response.status_code == 502
        assert response.json()["reason"] == "invalid_json"

    def test_save_attempt_and_progress(self, client):
        questions = json.loads(QUIZ_JSON)
        for i, q in enumerate(questions):
            q["id"] = f"q{i + 1}"

        first = client.post("/save-attempt", json={
            "documentId": "doc-bio",
            "questions": questions,
            "userAnswers": {"q1": "mitochondria", "q2": "wrong"},
        })
        assert first.status_code == 200
        assert first.json()["attempt"]["score"] == pytest.approx(100 / 3)

        second = client.post("/save-attempt", json={
            "documentId": "doc-bio",
            "questions": questions,
            "userAnswers": {"q1": "Mitochondria", "q2": "energy currency", "q3": "glucose is oxidised..."},
            "score": 100,
        })
        assert second.status_code == 200

        client.post("/save-attempt", json={"documentId": "doc-other", "questions": questions, "userAnswers": {}})

        attempts = client.get("/get-progress", params={"documentId": "doc-bio"}).json()["attempts"]
        assert [a["score"] for a in attempts] == [100.0, pytest.approx(100 / 3)]
        assert attempts[0]["userAnswers"]["q1"] == "Mitochondria"
        assert len(client.get("/get-progress").json()["attempts"]) == 3

    def test_mismatched_client_score_rejected(self, client):
        questions = json.loads(QUIZ_JSON)
        for i, q in enumerate(questions):
            q["id"] = f"q{i + 1}"
        response = client.post("/save-attempt", json={
            "documentId": "doc-bio",
            "questions": questions,
            "userAnswers": {},
            "score": 90,
        })
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestDocuments:
    def test_upload_list_and_index(self, client, index):
        upload = client.post("/documents/upload", files={"file": ("biology.pdf", b"%PDF-1.4 body", "application/pdf")})
        assert upload.status_code == 200
        document_id = upload.json()["documentId"]
        assert document_id.endswith("_biology.pdf")
        assert upload.json()["fileName"] == "biology.pdf"

        listing = client.get("/documents").json()
        assert [d["id"] for d in listing["documents"]] == [document_id]
        assert listing["documents"][0]["status"] == "uploaded"
        assert listing["files"] == [document_id]

        indexed = client.post(f"/documents/{document_id}/index").json()
        assert indexed == {"success": True, "documentId": document_id, "chunksProcessed": 7, "status": "indexed"}
        assert index.count(document_id) == 7
        assert client.get("/documents").json()["documents"][0]["chunkCount"] == 7

    def test_index_with_nothing_indexable(self, client, parser):
        parser.parse.return_value = ParseOk(elements=[])
        document_id = client.post("/documents/upload", files={"file": ("blank.pdf", b"%PDF", "application/pdf")}).json()["documentId"]
        body = client.post(f"/documents/{document_id}/index").json()
        assert body["status"] == "empty"
        assert body["chunksProcessed"] == 0

    def test_index_parse_failure_marks_document_failed(self, client, parser):
        parser.parse.return_value = ParseErr(reason="Parser returned HTTP 401")
        document_id = client.post("/documents/upload", files={"file": ("a.pdf", b"%PDF", "application/pdf")}).json()["documentId"]
        response = client.post(f"/documents/{document_id}/index")
        assert response.status_code == 502
        assert response.json()["detail"] == "Parser returned HTTP 401"
        assert client.get("/documents").json()["documents"][0]["status"] == "failed"

    def test_index_unknown_document(self, client):
        response = client.post("/documents/nope.pdf/index")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_upload_rejects_non_pdf(self, client):
        response = client.post("/documents/upload", files={"file": ("notes.txt", b"text", "text/plain")})
        assert response.status_code == 400
        assert response.json()["error"] == "Only PDF files are supported"

    def test_parse_returns_elements_and_page_count(self, client):
        body = client.post("/documents/parse", files={"file": ("biology.pdf", b"%PDF", "application/pdf")}).json()
        assert body["success"] is True
        assert body["totalPages"] == 3
        assert body["elements"][1]["pageNumber"] == 2

    def test_delete_removes_vectors_file_and_record(self, client, index):
        document_id = client.post("/documents/upload", files={"file": ("biology.pdf", b"%PDF", "application/pdf")}).json()["documentId"]
        client.post(f"/documents/{document_id}/index")

        response = client.delete(f"/documents/{document_id}")
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "documentId": document_id,
            "chunksRemoved": 7,
            "fileRemoved": True,
        }
        assert index.count(document_id) == 0
        listing = client.get("/documents").json()
        assert listing["documents"] == []
        assert listing["files"] == []

    def test_delete_unknown_document(self, client):
        response = client.delete("/documents/nope.pdf")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestMisc:
    def test_youtube_search(self, client, video_client):
        body = client.post("/youtube-search", json={"topic": "cell biology"}).json()
        assert body["videos"][0]["url"] == "https://www.youtube.com/watch?v=abc"
        video_client.search.assert_awaited_once_with("cell biology")

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_qdrant_health(self, client):
        body = client.get("/health/qdrant").json()
        assert body["status"] == "healthy"
        assert body["collection"]["collection_name"] == "test_chunks"

    def test_embeddings_health_reports_model(self, client):
        body = client.get("/health/embeddings").json()
        assert body["status"] == "healthy"
        assert body["model"]["model_name"] == "text-embedding-3-small"
        assert body["model"]["embedding_dimension"] == 8

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/does-not-exist")
        assert response.status_code == 404
        assert response.json()["success"] is False
