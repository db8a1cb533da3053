"""MongoDB connection helpers."""
from __future__ import annotations

import logging
from typing import Any, Dict

from pymongo import MongoClient

from nexaverse.config.settings import Settings, load_settings
from nexaverse.domain.documents import NoSQLBaseDocument

LOGGER = logging.getLogger(__name__)

_CLIENTS: Dict[str, Any] = {}


def get_database(settings: Settings | None = None) -> Any:
    """Return the configured database, reusing one client per URL."""
    settings = settings or load_settings()
    client = _CLIENTS.get(settings.mongo_url)
    if client is None:
        LOGGER.info("Connecting to MongoDB database %s", settings.db_name)
        client = MongoClient(settings.mongo_url)
        _CLIENTS[settings.mongo_url] = client
    return client[settings.db_name]


def upsert_document(database: Any, document: NoSQLBaseDocument) -> bool:
    """Upsert an ODM document; return True when a new row was inserted."""
    payload = document.to_mongo()
    created_at = payload.pop("created_at", None)
    update_doc: Dict[str, Any] = {"$set": payload}
    if created_at:
        update_doc.setdefault("$setOnInsert", {})["created_at"] = created_at

    result = database[document.collection_name].update_one(document.upsert_filter(), update_doc, upsert=True)
    return getattr(result, "upserted_id", None) is not None
