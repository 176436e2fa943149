"""
Tests for local upload storage.
"""

import pytest

from errors import InputValidationError, NotFoundError, PayloadTooLargeError
from services.file_store import LocalFileStore, validate_filename


@pytest.fixture
def store(tmp_path):
    return LocalFileStore(str(tmp_path / "uploads"), max_upload_size=1024)


def test_save_prefixes_epoch_millis(store):
    stored = store.save("notes.pdf", b"%PDF-1.4")
    prefix, _, name = stored.document_id.partition("_")
    assert name == "notes.pdf"
    assert prefix.isdigit() and len(prefix) >= 13
    assert stored.path.read_bytes() == b"%PDF-1.4"
    assert stored.size_bytes == 8


def test_directory_components_are_dropped():
    assert validate_filename("../../etc/evil.pdf") == "evil.pdf"
    assert validate_filename("C:\\docs\\Lecture.PDF") == "Lecture.PDF"


@pytest.mark.parametrize("filename", [None, "", "notes.docx", "README"])
def test_only_pdfs_accepted(store, filename):
    with pytest.raises(InputValidationError):
        store.save(filename, b"data")


def test_empty_upload_rejected(store):
    with pytest.raises(InputValidationError):
        store.save("notes.pdf", b"")


def test_oversized_upload_rejected(store):
    with pytest.raises(PayloadTooLargeError) as exc_info:
        store.save("big.pdf", b"x" * 1025)
    assert exc_info.value.status_code == 413


def test_list_pdfs_and_read(store):
    assert store.list_pdfs() == []
    stored = store.save("b.pdf", b"one")
    (store.upload_dir / "ignore.txt").write_text("x")
    assert store.list_pdfs() == [stored.document_id]
    assert store.read(stored.document_id) == b"one"


def test_read_missing_file(store):
    with pytest.raises(NotFoundError):
        store.read("123_missing.pdf")


def test_delete_removes_stored_file(store):
    stored = store.save("c.pdf", b"pdf")
    assert store.delete(stored.document_id) is True
    assert store.list_pdfs() == []
    assert store.delete(stored.document_id) is False
