"""Domain document models stored in the document database."""
from __future__ import annotations

import uuid
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Type

from .videos import FIELD_NAMES

DEFAULT_COLLECTION_TITLE = "My Collection"
REPORT_STATUSES = ("pending", "resolved", "dismissed")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


class ValidationError(ValueError):
    """Raised when an ODM document fails validation."""


class NoSQLBaseDocument:
    """Base document that enforces lightweight schema and metadata defaults."""

    kind: str = "generic"
    collection_name: str = "documents"
    id_field: str = "doc_id"
    required_fields: tuple[str, ...] = ()

    def __init__(self, payload: Mapping[str, Any]):
        if not isinstance(payload, Mapping):
            raise ValidationError("Document payload must be a mapping.")
        raw = dict(payload)
        raw.pop("_id", None)
        self.data = self._apply_defaults(raw)
        self.validate()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "NoSQLBaseDocument":
        return cls(payload)

    @property
    def doc_id(self) -> str:
        return self.data[self.id_field]

    def _apply_defaults(self, document: Dict[str, Any]) -> Dict[str, Any]:
        data = deepcopy(document)
        data.setdefault("kind", self.kind)
        if not data.get(self.id_field):
            data[self.id_field] = new_id()

        created_at = data.get("created_at")
        if not created_at:
            created_at = _now_iso()
        data["created_at"] = created_at
        data["updated_at"] = _now_iso()
        return data

    def validate(self) -> None:
        missing_required = [field for field in self.required_fields if not self.data.get(field)]
        if missing_required:
            raise ValidationError(
                f"{self.kind} document missing required fields: {', '.join(missing_required)}"
            )

    def upsert_filter(self) -> Dict[str, Any]:
        return {self.id_field: self.data[self.id_field]}

    def to_mongo(self) -> Dict[str, Any]:
        payload = deepcopy(self.data)
        payload["updated_at"] = _now_iso()
        return payload


class CollectionDocument(NoSQLBaseDocument):
    kind = "collection"
    collection_name = "collections"
    id_field = "collection_id"
    required_fields = ("owner", "title")

    def _apply_defaults(self, document: Dict[str, Any]) -> Dict[str, Any]:
        data = super()._apply_defaults(document)
        data["title"] = (data.get("title") or "").strip() or DEFAULT_COLLECTION_TITLE
        data["is_single_video"] = bool(data.get("is_single_video", False))
        videos = data.get("videos")
        if isinstance(videos, list):
            data["videos"] = [_video_dict(video) for video in videos]
        if data.get("poster") is None:
            first = data["videos"][0] if isinstance(data.get("videos"), list) and data["videos"] else {}
            data["poster"] = first.get("poster", "")
        return data

    def validate(self) -> None:
        super().validate()
        videos = self.data.get("videos")
        if not isinstance(videos, list) or not videos:
            raise ValidationError("collection document requires at least one video.")
        if any(not video.get("title") for video in videos):
            raise ValidationError("collection document contains a video without a title.")


class ReportDocument(NoSQLBaseDocument):
    kind = "report"
    collection_name = "reports"
    id_field = "report_id"
    required_fields = ("video_id", "reported_by", "reason")

    def _apply_defaults(self, document: Dict[str, Any]) -> Dict[str, Any]:
        data = super()._apply_defaults(document)
        data.setdefault("status", "pending")
        data.setdefault("video_title", "")
        data.setdefault("description", "")
        return data

    def validate(self) -> None:
        super().validate()
        if self.data["status"] not in REPORT_STATUSES:
            raise ValidationError(
                f"report status must be one of {', '.join(REPORT_STATUSES)}, got '{self.data['status']}'."
            )


class AdCodeDocument(NoSQLBaseDocument):
    kind = "ad_code"
    collection_name = "ad_codes"
    id_field = "key"
    required_fields = ("key", "code")

    def _apply_defaults(self, document: Dict[str, Any]) -> Dict[str, Any]:
        if not document.get("key"):
            raise ValidationError("ad_code document requires a 'key'.")
        return super()._apply_defaults(document)


def _video_dict(video: Any) -> Dict[str, str]:
    if not isinstance(video, Mapping):
        raise ValidationError("collection videos must be mappings.")
    return {name: str(video.get(name) or "") for name in FIELD_NAMES}


DOCUMENT_REGISTRY: Dict[str, Type[NoSQLBaseDocument]] = {
    cls.kind: cls
    for cls in (
        CollectionDocument,
        ReportDocument,
        AdCodeDocument,
    )
}


def resolve_document_class(kind: str) -> Type[NoSQLBaseDocument]:
    try:
        return DOCUMENT_REGISTRY[kind]
    except KeyError as exc:
        raise ValidationError(f"No document registered for kind '{kind}'.") from exc


def build_document(record: Mapping[str, Any]) -> NoSQLBaseDocument:
    """Construct a typed document instance from a raw record mapping."""
    kind = record.get("kind")
    if not kind:
        raise ValidationError("Record is missing 'kind'; unable to select ODM document.")
    return resolve_document_class(kind).from_payload(record)


__all__ = [
    "DEFAULT_COLLECTION_TITLE",
    "DOCUMENT_REGISTRY",
    "REPORT_STATUSES",
    "AdCodeDocument",
    "CollectionDocument",
    "NoSQLBaseDocument",
    "ReportDocument",
    "ValidationError",
    "build_document",
    "new_id",
    "resolve_document_class",
]
