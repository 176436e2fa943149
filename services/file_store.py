"""
Local storage for uploaded PDFs

Files are written under UPLOAD_DIR as "{epoch_ms}_{filename}"; that stored
name is also the documentId used by the vector index.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from errors import InputValidationError, NotFoundError, PayloadTooLargeError

log = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"pdf"}


@dataclass
class StoredFile:
    document_id: str
    filename: str
    path: Path
    size_bytes: int


def validate_filename(filename: Optional[str]) -> str:
    """
    Normalize an uploaded filename.

    Raises:
        InputValidationError: missing name or a non-PDF extension
    """
    if not filename or not filename.strip():
        raise InputValidationError("Filename is required")
    # drop any client-supplied directory components
    name = Path(filename.strip().replace("\\", "/")).name
    extension = Path(name).suffix.lower().lstrip(".")
    if extension not in ALLOWED_EXTENSIONS:
        raise InputValidationError(
            "Only PDF files are supported",
            f"got '.{extension}'" if extension else "file has no extension",
        )
    return name


class LocalFileStore:
    """Writes uploads to a directory on local disk."""

    def __init__(self, upload_dir: str, max_upload_size: int = 52428800):
        self.upload_dir = Path(upload_dir)
        self.max_upload_size = max_upload_size

    def save(self, filename: Optional[str], content: bytes) -> StoredFile:
        name = validate_filename(filename)
        if not content:
            raise InputValidationError("Uploaded file is empty")
        if len(content) > self.max_upload_size:
            raise PayloadTooLargeError(
                "File too large",
                f"{len(content)} bytes exceeds maximum of {self.max_upload_size} bytes",
            )

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"{int(time.time() * 1000)}_{name}"
        path = self.upload_dir / stored_name
        path.write_bytes(content)
        log.info(f"Saved upload {name} as {stored_name} ({len(content)} bytes)")
        return StoredFile(document_id=stored_name, filename=name, path=path, size_bytes=len(content))

    def read(self, document_id: str) -> bytes:
        path = self.upload_dir / Path(document_id).name
        if not path.is_file():
            raise NotFoundError("Document file not found", document_id)
        return path.read_bytes()

    def delete(self, document_id: str) -> bool:
        """Remove a stored file; False when it was already gone."""
        path = self.upload_dir / Path(document_id).name
        if not path.is_file():
            return False
        path.unlink()
        log.info(f"Deleted upload {path.name}")
        return True

    def list_pdfs(self) -> List[str]:
        """Stored PDF names, sorted; an absent upload dir means no files."""
        if not self.upload_dir.is_dir():
            return []
        return sorted(
            p.name for p in self.upload_dir.iterdir()
            if p.is_file() and p.suffix.lower() == ".pdf"
        )
