"""User content reports and their moderation state."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from nexaverse.domain.documents import REPORT_STATUSES, ReportDocument, ValidationError

from .mongo import upsert_document

LOGGER = logging.getLogger(__name__)

MODERATION_ACTIONS = ("resolved", "dismissed")


def submit_report(
    database: Any,
    *,
    video_id: str,
    reported_by: str,
    reason: str,
    video_title: str = "",
    description: str = "",
) -> str:
    document = ReportDocument(
        {
            "video_id": video_id,
            "video_title": video_title,
            "reported_by": reported_by,
            "reason": reason,
            "description": description,
            "status": "pending",
        }
    )
    upsert_document(database, document)
    LOGGER.info("Report %s submitted for video %s", document.doc_id, video_id)
    return document.doc_id


def list_reports(database: Any, *, status: Optional[str] = None) -> List[Dict[str, Any]]:
    """Return reports newest first, optionally limited to one status."""
    query: Dict[str, Any] = {}
    if status:
        if status not in REPORT_STATUSES:
            raise ValidationError(f"Unknown report status '{status}'.")
        query["status"] = status
    cursor = database[ReportDocument.collection_name].find(
        query, {"_id": 0}, sort=[("created_at", DESCENDING)]
    )
    return list(cursor)


def resolve_report(database: Any, report_id: str, action: str, *, resolved_by: Optional[str] = None) -> bool:
    if action not in MODERATION_ACTIONS:
        raise ValidationError(f"Report action must be one of {', '.join(MODERATION_ACTIONS)}.")
    now = datetime.now(timezone.utc).isoformat()
    result = database[ReportDocument.collection_name].update_one(
        {"report_id": report_id},
        {"$set": {"status": action, "resolved_at": now, "resolved_by": resolved_by, "updated_at": now}},
    )
    updated = getattr(result, "matched_count", 0) > 0
    if updated:
        LOGGER.info("Report %s marked as %s", report_id, action)
    return updated


def delete_report(database: Any, report_id: str) -> bool:
    result = database[ReportDocument.collection_name].delete_one({"report_id": report_id})
    return getattr(result, "deleted_count", 0) > 0
