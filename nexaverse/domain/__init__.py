"""Domain layer utilities for Nexaverse."""

from .documents import (
    DEFAULT_COLLECTION_TITLE,
    DOCUMENT_REGISTRY,
    AdCodeDocument,
    CollectionDocument,
    NoSQLBaseDocument,
    ReportDocument,
    ValidationError,
    build_document,
    resolve_document_class,
)
from .videos import (
    PLACEHOLDER_POSTER,
    VideoRecord,
    read_video_lines,
    serialize_records,
    split_normalized_block,
)

__all__ = [
    "DEFAULT_COLLECTION_TITLE",
    "DOCUMENT_REGISTRY",
    "PLACEHOLDER_POSTER",
    "AdCodeDocument",
    "CollectionDocument",
    "NoSQLBaseDocument",
    "ReportDocument",
    "ValidationError",
    "VideoRecord",
    "build_document",
    "read_video_lines",
    "resolve_document_class",
    "serialize_records",
    "split_normalized_block",
]
