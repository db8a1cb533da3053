"""Convert collections that still store videos as text into the record-array form."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nexaverse.domain.documents import CollectionDocument
from nexaverse.domain.videos import read_video_lines
from nexaverse.storage.mongo import get_database

LOGGER = logging.getLogger("renormalize")


def renormalize(database: Any, *, dry_run: bool = False) -> Dict[str, int]:
    collection = database[CollectionDocument.collection_name]
    cursor = collection.find({"videos": {"$type": "string"}})
    stats = {"seen": 0, "updated": 0, "empty": 0}

    for doc in cursor:
        stats["seen"] += 1
        records = read_video_lines(doc.get("videos") or "")
        if not records:
            stats["empty"] += 1
            LOGGER.warning("Collection %s has no readable videos, leaving it untouched", doc.get("collection_id"))
            continue

        updates: Dict[str, Any] = {"videos": [record.to_dict() for record in records]}
        if not doc.get("poster"):
            updates["poster"] = records[0].poster_url
        if dry_run:
            LOGGER.info("Would convert %s (%s videos)", doc.get("collection_id"), len(records))
        else:
            collection.update_one({"_id": doc["_id"]}, {"$set": updates})
        stats["updated"] += 1

    return stats


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--dry-run", action="store_true", help="Report conversions without writing them.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    stats = renormalize(get_database(), dry_run=args.dry_run)
    print(f"seen: {stats['seen']} updated: {stats['updated']} empty: {stats['empty']}")


if __name__ == "__main__":
    main()
