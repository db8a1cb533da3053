"""Video record model and the normalized block text format."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence

PLACEHOLDER_POSTER = "https://images.unsplash.com/photo-1611162617474-5b21e879e113?w=300&h=200"
DEFAULT_DOWNLOAD = "#"
DEFAULT_WATCH = ""
FIELD_COUNT = 5
FIELD_NAMES = ("id", "title", "poster", "download", "watch")

RECORD_SEPARATOR = "\n\n"
FIELD_SEPARATOR = "\n"

# Defaults for slots 2..4 when a partial record is padded.
PAD_DEFAULTS = (PLACEHOLDER_POSTER, DEFAULT_DOWNLOAD, DEFAULT_WATCH)

_NEWLINES_RE = re.compile(r"[\r\n]+")


def single_line(value: str) -> str:
    """Collapse embedded line breaks so a value fits in one field line."""
    return _NEWLINES_RE.sub(" ", value)


@dataclass(frozen=True)
class VideoRecord:
    id: str
    title: str
    poster_url: str
    download_url: str
    watch_url: str

    @classmethod
    def from_fields(cls, fields: Sequence[str]) -> "VideoRecord":
        if len(fields) != FIELD_COUNT:
            raise ValueError(f"A video record needs exactly {FIELD_COUNT} fields, got {len(fields)}.")
        return cls(*(str(value) for value in fields))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VideoRecord":
        """Build a record from the stored dict shape (id/title/poster/download/watch).

        Missing poster, download and watch values get the usual defaults.
        """
        values = [str(data.get(name) or "") for name in FIELD_NAMES]
        for index, default in enumerate(PAD_DEFAULTS, start=2):
            values[index] = values[index] or default
        return cls(*values)

    def as_fields(self) -> List[str]:
        return [self.id, self.title, self.poster_url, self.download_url, self.watch_url]

    def to_dict(self) -> Dict[str, str]:
        return dict(zip(FIELD_NAMES, self.as_fields()))


def serialize_records(records: Iterable[VideoRecord]) -> str:
    """Render records as the normalized block text."""
    return RECORD_SEPARATOR.join(FIELD_SEPARATOR.join(record.as_fields()) for record in records)


def split_normalized_block(block: str) -> List[VideoRecord]:
    """Inverse of :func:`serialize_records` used by storage consumers.

    Blocks are split on blank-line boundaries and fields are taken by
    position; a short block is completed with empty strings. A record whose
    last field is empty leaves one extra newline at the start of the next
    chunk, which belongs to that record and is dropped here.
    """
    if not block or not block.strip():
        return []
    records: List[VideoRecord] = []
    for chunk in block.split(RECORD_SEPARATOR):
        if chunk.startswith(FIELD_SEPARATOR):
            chunk = chunk[len(FIELD_SEPARATOR):]
        if not chunk.strip():
            continue
        fields = chunk.split(FIELD_SEPARATOR)[:FIELD_COUNT]
        fields.extend([""] * (FIELD_COUNT - len(fields)))
        records.append(VideoRecord.from_fields(fields))
    return records


def read_video_lines(text: str) -> List[VideoRecord]:
    """Read stored or hand-edited collection text, five non-empty lines per video.

    Missing values fall back to positional defaults. A trailing group of at
    least two lines becomes a basic record; a single trailing line is dropped.
    """
    if not isinstance(text, str) or not text.strip():
        return []
    lines = [line.strip() for line in text.strip().split("\n")]
    lines = [line for line in lines if line]

    records: List[VideoRecord] = []
    for start in range(0, len(lines), FIELD_COUNT):
        position = start // FIELD_COUNT + 1
        group = lines[start:start + FIELD_COUNT]
        if len(group) == FIELD_COUNT:
            records.append(
                VideoRecord(
                    id=group[0] or f"video_{position}",
                    title=group[1] or f"Video {position}",
                    poster_url=group[2] or PLACEHOLDER_POSTER,
                    download_url=group[3] or DEFAULT_DOWNLOAD,
                    watch_url=group[4] or DEFAULT_WATCH,
                )
            )
        elif len(group) >= 2 and group[1]:
            records.append(
                VideoRecord(
                    id=group[0] or f"video_{position}",
                    title=group[1],
                    poster_url=PLACEHOLDER_POSTER,
                    download_url=DEFAULT_DOWNLOAD,
                    watch_url=DEFAULT_WATCH,
                )
            )
    return records


def coerce_records(videos: Iterable[Any]) -> List[VideoRecord]:
    """Accept records, 5-field sequences or stored dicts and return records."""
    records: List[VideoRecord] = []
    for item in videos:
        if isinstance(item, VideoRecord):
            records.append(item)
        elif isinstance(item, Mapping):
            records.append(VideoRecord.from_mapping(item))
        elif isinstance(item, (list, tuple)):
            records.append(VideoRecord.from_fields(list(item)))
        else:
            raise TypeError(f"Unsupported video entry of type {type(item).__name__}.")
    return records


__all__ = [
    "DEFAULT_DOWNLOAD",
    "DEFAULT_WATCH",
    "FIELD_COUNT",
    "FIELD_NAMES",
    "PAD_DEFAULTS",
    "PLACEHOLDER_POSTER",
    "VideoRecord",
    "coerce_records",
    "read_video_lines",
    "serialize_records",
    "single_line",
    "split_normalized_block",
]
