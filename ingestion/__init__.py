"""
Ingestion package
Turns chunked documents into indexed embedding records
"""

from .pipeline import IngestionPipeline, IngestResult, build_records

__all__ = ["IngestionPipeline", "IngestResult", "build_records"]
