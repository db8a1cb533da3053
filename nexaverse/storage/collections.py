"""Video collection persistence and the watch-page read path."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from pymongo import DESCENDING

from nexaverse.domain.documents import DEFAULT_COLLECTION_TITLE, CollectionDocument, ValidationError
from nexaverse.domain.videos import (
    FIELD_COUNT,
    FIELD_SEPARATOR,
    RECORD_SEPARATOR,
    VideoRecord,
    coerce_records,
    read_video_lines,
    split_normalized_block,
)

from .mongo import upsert_document

LOGGER = logging.getLogger(__name__)

VideosInput = Union[str, Iterable[Any]]


def records_for_upload(videos: VideosInput) -> List[VideoRecord]:
    """Turn a normalized block or an iterable of records into records."""
    if isinstance(videos, str):
        return split_normalized_block(videos)
    return coerce_records(videos)


def _first_non_blank(*values: Optional[str]) -> str:
    for value in values:
        if value and value.strip():
            return value.strip()
    return ""


def save_collection(
    database: Any,
    *,
    owner: str,
    videos: VideosInput,
    title: Optional[str] = None,
    poster: Optional[str] = None,
    suggested_title: Optional[str] = None,
    suggested_poster: Optional[str] = None,
    collection_id: Optional[str] = None,
    created_at: Optional[str] = None,
    is_single_video: bool = False,
) -> str:
    """Create or replace a collection and return its id."""
    records = records_for_upload(videos)
    if not records:
        raise ValidationError("No valid video data found.")

    payload: Dict[str, Any] = {
        "kind": CollectionDocument.kind,
        "collection_id": collection_id,
        "owner": owner,
        "title": _first_non_blank(title, suggested_title) or DEFAULT_COLLECTION_TITLE,
        "poster": _first_non_blank(poster, suggested_poster, records[0].poster_url),
        "videos": [record.to_dict() for record in records],
        "is_single_video": is_single_video,
        "created_at": created_at,
    }
    document = CollectionDocument(payload)
    inserted = upsert_document(database, document)
    LOGGER.info(
        "%s collection %s with %s videos",
        "Created" if inserted else "Updated",
        document.doc_id,
        len(records),
    )
    return document.doc_id


def save_single_videos(database: Any, *, owner: str, videos: VideosInput) -> List[str]:
    """Store every record as its own single-video collection."""
    records = records_for_upload(videos)
    if not records:
        raise ValidationError("No valid video data found.")

    ids: List[str] = []
    for record in records:
        document = CollectionDocument(
            {
                "owner": owner,
                "title": record.title,
                "poster": record.poster_url,
                "videos": [record.to_dict()],
                "is_single_video": True,
            }
        )
        upsert_document(database, document)
        ids.append(document.doc_id)
    LOGGER.info("Stored %s single videos for %s", len(ids), owner)
    return ids


def load_collection(database: Any, collection_id: str) -> Optional[Dict[str, Any]]:
    return database[CollectionDocument.collection_name].find_one(
        {"collection_id": collection_id}, {"_id": 0}
    )


def collection_videos(document: Dict[str, Any]) -> List[VideoRecord]:
    """Read the playable videos of a stored collection.

    ``videos`` is normally a list of mappings; older collections keep it as
    line-oriented text. Entries without an id or title are skipped.
    """
    videos = document.get("videos")
    if isinstance(videos, list):
        records = [
            VideoRecord.from_mapping(video)
            for video in videos
            if isinstance(video, dict) and video.get("title")
        ]
    elif isinstance(videos, str) and videos.strip():
        records = read_video_lines(videos)
    else:
        raise ValidationError("This collection has an invalid video data format.")

    valid = [record for record in records if record.id and record.title]
    if len(valid) != len(records):
        LOGGER.warning(
            "Skipped %s invalid videos in collection %s",
            len(records) - len(valid),
            document.get("collection_id"),
        )
    return valid


def find_video(records: Iterable[VideoRecord], video_id: Optional[str]) -> Optional[VideoRecord]:
    if not video_id:
        return None
    for record in records:
        if record.id == video_id:
            return record
    return None


def read_edited_text(text: str) -> List[VideoRecord]:
    """Read edited collection text.

    Normalized block text (records separated by a blank line, or a single
    record of exactly five lines) is split by position so empty fields stay
    in place. Anything else is read with the line reader.
    """
    if RECORD_SEPARATOR in text or len(text.split(FIELD_SEPARATOR)) == FIELD_COUNT:
        return split_normalized_block(text)
    return read_video_lines(text)


def update_collection_text(
    database: Any,
    collection_id: str,
    *,
    videos_text: str,
    title: Optional[str] = None,
    poster: Optional[str] = None,
) -> Optional[str]:
    """Replace a collection's videos from edited text; ``None`` if it does not exist."""
    existing = load_collection(database, collection_id)
    if existing is None:
        return None
    records = read_edited_text(videos_text)
    if not records:
        raise ValidationError(
            "Each video needs 5 lines: VideoID, Title, Poster URL, Download Link, Embed Link."
        )
    return save_collection(
        database,
        owner=existing["owner"],
        videos=records,
        title=title,
        poster=poster,
        collection_id=collection_id,
        created_at=existing.get("created_at"),
        is_single_video=bool(existing.get("is_single_video")),
    )


def list_owner_collections(database: Any, owner: str, *, single_videos: bool = False) -> List[Dict[str, Any]]:
    cursor = database[CollectionDocument.collection_name].find(
        {"owner": owner, "is_single_video": single_videos},
        {"_id": 0},
        sort=[("created_at", DESCENDING)],
    )
    return list(cursor)


def delete_collection(database: Any, collection_id: str) -> bool:
    result = database[CollectionDocument.collection_name].delete_one({"collection_id": collection_id})
    deleted = getattr(result, "deleted_count", 0) > 0
    if deleted:
        LOGGER.info("Deleted collection %s", collection_id)
    return deleted


def watch_url(base_url: str, collection_id: str) -> str:
    return f"{base_url.rstrip('/')}/watch/{collection_id}"
