"""Tolerant parser turning pasted or uploaded text into normalized video records.

Accepted input shapes, tried in order:

- a JSON array of objects (or a single object) with optional ``id``,
  ``title``, ``poster``, ``download`` and ``watch`` fields;
- delimited rows (tab, pipe, semicolon or comma separated), one video per row;
- plain lines, five consecutive lines per video.

Malformed input never raises: broken JSON falls back to the text readers and
unusable text yields an empty normalized block.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from nexaverse.domain.videos import (
    DEFAULT_DOWNLOAD,
    DEFAULT_WATCH,
    FIELD_COUNT,
    PAD_DEFAULTS,
    PLACEHOLDER_POSTER,
    VideoRecord,
    serialize_records,
    single_line,
)

LOGGER = logging.getLogger(__name__)

BOM = "\ufeff"
SEPARATOR_LINE_RE = re.compile(r"^[-=_*#]{3,}$")
TITLE_TOKEN_RE = re.compile(r"[\s\-_.]")
DELIMITERS = ("\t", "|", ";")
COMMA_MIN_PARTS = 4
MIN_PARTS = 2
FALLBACK_COLLECTION_TITLE = "Videos"


@dataclass
class ExtractionResult:
    """Records produced by one extraction path plus optional suggestions."""

    records: List[VideoRecord] = field(default_factory=list)
    suggested_title: Optional[str] = None
    suggested_poster: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass
class ParseResult:
    normalized_block: str = ""
    suggested_title: Optional[str] = None
    suggested_poster: Optional[str] = None
    records: List[VideoRecord] = field(default_factory=list)

    @property
    def video_count(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"normalizedBlock": self.normalized_block}
        if self.suggested_title is not None:
            payload["suggestedTitle"] = self.suggested_title
        if self.suggested_poster is not None:
            payload["suggestedPoster"] = self.suggested_poster
        return payload


def sanitize(raw: Optional[str]) -> str:
    """Drop a leading BOM, normalize line endings and trim."""
    if not raw:
        return ""
    text = raw[1:] if raw.startswith(BOM) else raw
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.strip()


def looks_like_json(text: str) -> bool:
    stripped = text.strip()
    return stripped.startswith("[") or stripped.startswith("{")


# JSON path ---------------------------------------------------------------


def _text_value(value: Any) -> str:
    """Return a usable single-line string for a JSON field, or ``""``."""
    if not value or isinstance(value, (dict, list)):
        return ""
    text = value if isinstance(value, str) else str(value)
    if not text.strip():
        return ""
    return single_line(text)


def _http_poster(item: Mapping[str, Any]) -> Optional[str]:
    poster = item.get("poster")
    if isinstance(poster, str) and poster.startswith("http"):
        return single_line(poster)
    return None


def suggest_poster(items: Sequence[Mapping[str, Any]]) -> Optional[str]:
    """First poster in input order that looks like an http(s) URL."""
    for item in items:
        poster = _http_poster(item)
        if poster:
            return poster
    return None


def suggest_title(items: Sequence[Mapping[str, Any]]) -> Optional[str]:
    if not items:
        return None
    first_title = items[0].get("title")
    if not first_title:
        first_title = FALLBACK_COLLECTION_TITLE
    first_title = first_title if isinstance(first_title, str) else str(first_title)
    count = len(items)
    if count == 1:
        return first_title
    tokens = TITLE_TOKEN_RE.split(first_title)
    if len(tokens) > 1:
        return f"{tokens[0]} Collection ({count} videos)"
    return f"Video Collection ({count} videos)"


def _record_from_item(item: Mapping[str, Any], position: int) -> VideoRecord:
    return VideoRecord(
        id=_text_value(item.get("id")) or f"video_{position}",
        title=_text_value(item.get("title")) or f"Video {position}",
        poster_url=_http_poster(item) or PLACEHOLDER_POSTER,
        download_url=_text_value(item.get("download")) or DEFAULT_DOWNLOAD,
        watch_url=_text_value(item.get("watch")) or DEFAULT_WATCH,
    )


def try_json(text: str) -> Optional[ExtractionResult]:
    """Read ``text`` as JSON video objects.

    Returns ``None`` when the text is not JSON of a usable shape so the caller
    can fall through to the text readers.
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as exc:
        LOGGER.debug("JSON parsing failed, falling back to text parsing: %s", exc)
        return None

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        LOGGER.debug("JSON top-level value is %s, falling back to text parsing", type(data).__name__)
        return None

    items: List[Mapping[str, Any]] = [item if isinstance(item, dict) else {} for item in data]
    records = [_record_from_item(item, position) for position, item in enumerate(items, start=1)]
    result = ExtractionResult(
        records=records,
        suggested_title=suggest_title(items),
        suggested_poster=suggest_poster(items),
    )
    LOGGER.debug("Parsed %s video objects from JSON", len(records))
    return result


# Delimited / plain-line path --------------------------------------------


def is_separator_line(line: str) -> bool:
    return bool(SEPARATOR_LINE_RE.match(line))


def split_line(line: str) -> Optional[List[str]]:
    """Split a delimited row, or return ``None`` for a plain line.

    The first delimiter present wins: tab, then pipe, then semicolon. Commas
    only count when they separate at least four non-empty parts.
    """
    for delimiter in DELIMITERS:
        if delimiter in line:
            return line.split(delimiter)
    if "," in line:
        parts = line.split(",")
        if len([part for part in parts if part.strip()]) >= COMMA_MIN_PARTS:
            return parts
    return None


def pad_fields(parts: Sequence[str]) -> List[str]:
    """Complete a partial record up to five fields with slot defaults."""
    if len(parts) < MIN_PARTS:
        raise ValueError(f"At least {MIN_PARTS} values are needed to pad a record.")
    padded = list(parts)
    while len(padded) < FIELD_COUNT:
        padded.append(PAD_DEFAULTS[len(padded) - MIN_PARTS])
    return padded


def extract_fields(text: str) -> List[str]:
    """Flatten text lines into one running list of field values."""
    fields: List[str] = []
    lines = [line.strip() for line in text.split("\n")]
    for line in lines:
        if not line:
            continue
        if is_separator_line(line):
            LOGGER.debug("Skipping separator line %r", line)
            continue
        parts = split_line(line)
        if parts is None:
            fields.append(line)
            continue
        parts = [part.strip() for part in parts]
        parts = [part for part in parts if part]
        if len(parts) < MIN_PARTS:
            LOGGER.debug("Dropping delimited line with fewer than %s values: %r", MIN_PARTS, line)
            continue
        fields.extend(pad_fields(parts)[:FIELD_COUNT])
    return fields


def group_fields(fields: Sequence[str]) -> List[VideoRecord]:
    """Group consecutive fields into records and repair a partial tail."""
    complete = len(fields) // FIELD_COUNT
    records = [
        VideoRecord.from_fields(fields[index * FIELD_COUNT:(index + 1) * FIELD_COUNT])
        for index in range(complete)
    ]
    leftover = list(fields[complete * FIELD_COUNT:])
    if len(leftover) >= MIN_PARTS:
        LOGGER.debug("Padding incomplete trailing video with %s values", len(leftover))
        records.append(VideoRecord.from_fields(pad_fields(leftover)))
    elif leftover:
        LOGGER.debug("Discarding single trailing value %r", leftover[0])
    return records


def try_delimited(text: str) -> ExtractionResult:
    """Read delimited rows and plain lines; an empty result means nothing usable."""
    records = group_fields(extract_fields(text))
    return ExtractionResult(records=records)


# Entry point -------------------------------------------------------------


def parse(raw_text: Optional[str]) -> ParseResult:
    """Normalize pasted or uploaded video data.

    Suggestions are only offered for JSON input. An empty ``normalized_block``
    means there was nothing to save.
    """
    text = sanitize(raw_text)
    if not text:
        return ParseResult()

    result: Optional[ExtractionResult] = None
    if looks_like_json(text):
        result = try_json(text)
    if result is None:
        result = try_delimited(text)

    if result.is_empty:
        LOGGER.debug("No video data found after processing")
        return ParseResult()

    return ParseResult(
        normalized_block=serialize_records(result.records),
        suggested_title=result.suggested_title,
        suggested_poster=result.suggested_poster,
        records=list(result.records),
    )


__all__ = [
    "ExtractionResult",
    "ParseResult",
    "extract_fields",
    "group_fields",
    "is_separator_line",
    "looks_like_json",
    "pad_fields",
    "parse",
    "sanitize",
    "split_line",
    "suggest_poster",
    "suggest_title",
    "try_delimited",
    "try_json",
]
