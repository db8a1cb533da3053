"""Admin-edited ad codes layered over the default catalog."""
from __future__ import annotations

import logging
from typing import Any, Dict, MutableMapping, Optional

from nexaverse.domain.documents import AdCodeDocument
from nexaverse.storage.mongo import upsert_document

LOGGER = logging.getLogger(__name__)


class AdCodeOverrides:
    """Key -> edited code mapping.

    The mapping is owned by the caller and shared by reference; an empty
    override never hides the fallback.
    """

    def __init__(self, codes: Optional[MutableMapping[str, str]] = None) -> None:
        self.codes: MutableMapping[str, str] = codes if codes is not None else {}

    def set(self, key: str, code: str) -> None:
        self.codes[key] = code

    def resolve(self, key: str, fallback: str) -> str:
        return self.codes.get(key) or fallback

    def clear(self, key: str) -> None:
        self.codes.pop(key, None)

    def clear_all(self) -> None:
        self.codes.clear()

    def snapshot(self) -> Dict[str, str]:
        return dict(self.codes)

    def __contains__(self, key: object) -> bool:
        return bool(self.codes.get(key))  # type: ignore[call-overload]


def load_overrides(database: Any) -> AdCodeOverrides:
    cursor = database[AdCodeDocument.collection_name].find({}, {"_id": 0})
    return AdCodeOverrides({row["key"]: row.get("code", "") for row in cursor if row.get("key")})


def save_override(database: Any, key: str, code: str) -> None:
    upsert_document(database, AdCodeDocument({"key": key, "code": code}))
    LOGGER.info("Stored edited ad code for %s", key)


def delete_override(database: Any, key: Optional[str] = None) -> int:
    """Delete one override, or all of them when ``key`` is None."""
    collection = database[AdCodeDocument.collection_name]
    if key is None:
        result = collection.delete_many({})
    else:
        result = collection.delete_one({"key": key})
    return getattr(result, "deleted_count", 0)
