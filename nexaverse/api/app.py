"""FastAPI API for Nexaverse video galleries.

Endpoints:
- GET /health: lightweight health check (no external dependencies).
- POST /upload/parse: normalize pasted video data and preview the result.
- POST /collections: store a collection (or single videos) for an owner.
- GET/PUT/DELETE /collections/{collection_id}: watch page data and edits.
- POST/GET /reports, POST /reports/{report_id}/resolve, DELETE /reports/{report_id}.
- GET/PUT/DELETE /ads/{key}: ad codes with admin overrides.

Example POST /collections body:
{
    "owner": "user-42",
    "text": "[{\"id\": \"v1\", \"title\": \"Paris-Day1\", \"watch\": \"https://...\"}]",
    "title": null,
    "single_video": false
}
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from nexaverse.ads.catalog import AdCode, load_ad_catalog
from nexaverse.ads.fragments import extract_script_fragments, strip_scripts
from nexaverse.ads.overrides import delete_override, load_overrides, save_override
from nexaverse.config.settings import load_settings
from nexaverse.domain.documents import ValidationError
from nexaverse.domain.videos import DEFAULT_DOWNLOAD, DEFAULT_WATCH, PLACEHOLDER_POSTER
from nexaverse.storage import collections as collection_store
from nexaverse.storage import reports as report_store
from nexaverse.storage.mongo import get_database
from nexaverse.upload.normalizer import parse

app = FastAPI(title="Nexaverse API")
LOGGER = logging.getLogger("api")


class ParseRequest(BaseModel):
    text: str


class ParseResponse(BaseModel):
    normalizedBlock: str
    suggestedTitle: Optional[str] = None
    suggestedPoster: Optional[str] = None
    videoCount: int


class VideoItem(BaseModel):
    id: str
    title: str
    poster: str = PLACEHOLDER_POSTER
    download: str = DEFAULT_DOWNLOAD
    watch: str = DEFAULT_WATCH


class CreateCollectionRequest(BaseModel):
    owner: str
    text: Optional[str] = None
    videos: Optional[List[VideoItem]] = None
    title: Optional[str] = None
    poster: Optional[str] = None
    single_video: bool = False


class CreateCollectionResponse(BaseModel):
    collection_ids: List[str]
    watch_urls: List[str]
    video_count: int


class UpdateCollectionRequest(BaseModel):
    videos_text: str
    title: Optional[str] = None
    poster: Optional[str] = None


class CollectionResponse(BaseModel):
    collection_id: str
    title: str
    poster: str
    owner: Optional[str] = None
    videos: List[VideoItem]
    current_video: Optional[VideoItem] = None


class ReportRequest(BaseModel):
    video_id: str
    reported_by: str
    reason: str
    video_title: str = ""
    description: str = ""


class ResolveReportRequest(BaseModel):
    action: str
    resolved_by: Optional[str] = None


class AdCodeUpdate(BaseModel):
    code: str


class AdCodeResponse(BaseModel):
    key: str
    name: str
    code: str
    edited: bool
    markup: str
    scripts: List[Dict[str, Any]]
    width: Optional[int] = None
    height: Optional[int] = None


@lru_cache(maxsize=4)
def _catalog(path: str) -> Dict[str, AdCode]:
    return load_ad_catalog(Path(path))


def _ad_catalog() -> Dict[str, AdCode]:
    return _catalog(str(load_settings().ad_codes_path))


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/upload/parse", response_model=ParseResponse)
def parse_upload(req: ParseRequest) -> ParseResponse:
    """Preview how pasted text will be stored."""
    result = parse(req.text)
    if not result.normalized_block:
        raise HTTPException(status_code=400, detail="No valid video data found. Please check the format.")
    return ParseResponse(**result.to_dict(), videoCount=result.video_count)


@app.post("/collections", response_model=CreateCollectionResponse)
def create_collection(req: CreateCollectionRequest) -> CreateCollectionResponse:
    owner = (req.owner or "").strip()
    if not owner:
        raise HTTPException(status_code=400, detail="Owner must not be empty")

    suggested_title: Optional[str] = None
    suggested_poster: Optional[str] = None
    if req.videos:
        videos: Any = [video.model_dump() for video in req.videos]
        video_count = len(videos)
    else:
        result = parse(req.text)
        if not result.normalized_block:
            raise HTTPException(status_code=400, detail="No valid video data found.")
        videos = result.normalized_block
        video_count = result.video_count
        suggested_title = result.suggested_title
        suggested_poster = result.suggested_poster

    settings = load_settings()
    try:
        database = get_database(settings)
        if req.single_video:
            ids = collection_store.save_single_videos(database, owner=owner, videos=videos)
        else:
            ids = [
                collection_store.save_collection(
                    database,
                    owner=owner,
                    videos=videos,
                    title=req.title,
                    poster=req.poster,
                    suggested_title=suggested_title,
                    suggested_poster=suggested_poster,
                )
            ]
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Failed to save collection for owner=%r", owner)
        raise HTTPException(status_code=500, detail="Failed to create collection. Please try again.") from exc

    return CreateCollectionResponse(
        collection_ids=ids,
        watch_urls=[collection_store.watch_url(settings.public_base_url, cid) for cid in ids],
        video_count=video_count,
    )


@app.get("/collections/{collection_id}", response_model=CollectionResponse)
def get_collection(
    collection_id: str,
    video_id: Optional[str] = Query(None, description="Video to select on the watch page"),
) -> CollectionResponse:
    """Watch page payload for a stored collection."""
    document = collection_store.load_collection(get_database(), collection_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    try:
        records = collection_store.collection_videos(document)
    except ValidationError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if not records:
        raise HTTPException(status_code=404, detail="This collection appears to be empty or contains invalid video data.")

    current = collection_store.find_video(records, video_id)
    return CollectionResponse(
        collection_id=collection_id,
        title=document.get("title") or "",
        poster=document.get("poster") or "",
        owner=document.get("owner"),
        videos=[VideoItem(**record.to_dict()) for record in records],
        current_video=VideoItem(**current.to_dict()) if current else None,
    )


@app.put("/collections/{collection_id}", response_model=CollectionResponse)
def update_collection(collection_id: str, req: UpdateCollectionRequest) -> CollectionResponse:
    try:
        updated = collection_store.update_collection_text(
            get_database(),
            collection_id,
            videos_text=req.videos_text,
            title=req.title,
            poster=req.poster,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if updated is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    return get_collection(collection_id, video_id=None)


@app.delete("/collections/{collection_id}")
def remove_collection(collection_id: str) -> Dict[str, bool]:
    if not collection_store.delete_collection(get_database(), collection_id):
        raise HTTPException(status_code=404, detail="Collection not found")
    return {"deleted": True}


@app.post("/reports")
def create_report(req: ReportRequest) -> Dict[str, str]:
    try:
        report_id = report_store.submit_report(
            get_database(),
            video_id=req.video_id,
            reported_by=req.reported_by,
            reason=req.reason,
            video_title=req.video_title,
            description=req.description,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"report_id": report_id, "status": "pending"}


@app.get("/reports")
def get_reports(status: Optional[str] = Query(None, description="pending, resolved or dismissed")) -> List[Dict[str, Any]]:
    try:
        return report_store.list_reports(get_database(), status=status)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/reports/{report_id}/resolve")
def moderate_report(report_id: str, req: ResolveReportRequest) -> Dict[str, str]:
    try:
        updated = report_store.resolve_report(get_database(), report_id, req.action, resolved_by=req.resolved_by)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not updated:
        raise HTTPException(status_code=404, detail="Report not found")
    return {"report_id": report_id, "status": req.action}


@app.delete("/reports/{report_id}")
def remove_report(report_id: str) -> Dict[str, bool]:
    if not report_store.delete_report(get_database(), report_id):
        raise HTTPException(status_code=404, detail="Report not found")
    return {"deleted": True}


def _ad_response(ad_code: AdCode, code: str) -> AdCodeResponse:
    return AdCodeResponse(
        key=ad_code.key,
        name=ad_code.name,
        code=code,
        edited=code != ad_code.code,
        markup=strip_scripts(code),
        scripts=[fragment.to_dict() for fragment in extract_script_fragments(code)],
        width=ad_code.width,
        height=ad_code.height,
    )


def _lookup_ad(key: str) -> AdCode:
    ad_code = _ad_catalog().get(key)
    if ad_code is None:
        raise HTTPException(status_code=404, detail=f"Unknown ad slot '{key}'")
    return ad_code


@app.get("/ads/{key}", response_model=AdCodeResponse)
def get_ad(key: str) -> AdCodeResponse:
    ad_code = _lookup_ad(key)
    overrides = load_overrides(get_database())
    return _ad_response(ad_code, overrides.resolve(key, ad_code.code))


@app.put("/ads/{key}", response_model=AdCodeResponse)
def put_ad(key: str, req: AdCodeUpdate) -> AdCodeResponse:
    ad_code = _lookup_ad(key)
    code = req.code.strip()
    if not code:
        raise HTTPException(status_code=400, detail="Ad code must not be empty")
    save_override(get_database(), key, code)
    return _ad_response(ad_code, code)


@app.delete("/ads/{key}", response_model=AdCodeResponse)
def reset_ad(key: str) -> AdCodeResponse:
    ad_code = _lookup_ad(key)
    delete_override(get_database(), key)
    return _ad_response(ad_code, ad_code.code)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=load_settings().api_port)
