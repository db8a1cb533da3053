from __future__ import annotations

import pytest

from nexaverse.domain import (
    AdCodeDocument,
    CollectionDocument,
    ReportDocument,
    ValidationError,
    build_document,
)

VIDEO = {"id": "v1", "title": "Clip", "poster": "https://p/1.jpg", "download": "#", "watch": ""}


def test_collection_document_defaults() -> None:
    document = CollectionDocument({"owner": "u1", "title": "  ", "videos": [VIDEO]})
    assert document.data["title"] == "My Collection"
    assert document.data["poster"] == "https://p/1.jpg"
    assert document.data["is_single_video"] is False
    assert document.data["kind"] == "collection"
    assert document.upsert_filter() == {"collection_id": document.doc_id}
    assert len(document.doc_id) == 32


def test_collection_document_requires_videos_and_owner() -> None:
    with pytest.raises(ValidationError):
        CollectionDocument({"owner": "u1", "videos": []})
    with pytest.raises(ValidationError):
        CollectionDocument({"title": "T", "videos": [VIDEO]})
    with pytest.raises(ValidationError):
        CollectionDocument({"owner": "u1", "videos": [{"id": "x", "title": ""}]})


def test_collection_document_drops_mongo_id_and_keeps_created_at() -> None:
    document = CollectionDocument(
        {"_id": 5, "owner": "u1", "videos": [VIDEO], "collection_id": "c1", "created_at": "2024-01-01T00:00:00+00:00"}
    )
    payload = document.to_mongo()
    assert "_id" not in payload
    assert payload["created_at"] == "2024-01-01T00:00:00+00:00"
    assert payload["collection_id"] == "c1"


def test_report_document_status_is_validated() -> None:
    report = ReportDocument({"video_id": "v1", "reported_by": "a@b.c", "reason": "spam"})
    assert report.data["status"] == "pending"
    with pytest.raises(ValidationError):
        ReportDocument({"video_id": "v1", "reported_by": "a@b.c", "reason": "spam", "status": "closed"})
    with pytest.raises(ValidationError):
        ReportDocument({"video_id": "v1", "reported_by": "a@b.c"})


def test_ad_code_document_is_keyed_by_slot() -> None:
    document = AdCodeDocument({"key": "footerBanner", "code": "<script></script>"})
    assert document.upsert_filter() == {"key": "footerBanner"}
    with pytest.raises(ValidationError):
        AdCodeDocument({"code": "<script></script>"})


def test_build_document_selects_class_by_kind() -> None:
    document = build_document({"kind": "report", "video_id": "v", "reported_by": "x", "reason": "r"})
    assert isinstance(document, ReportDocument)
    with pytest.raises(ValidationError):
        build_document({"kind": "unknown"})
    with pytest.raises(ValidationError):
        build_document({})
