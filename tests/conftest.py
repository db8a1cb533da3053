"""Shared fixtures: an in-memory stand-in for the MongoDB client API we use."""
from __future__ import annotations

import sys
from copy import deepcopy
from itertools import count
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class FakeUpdateResult:
    def __init__(self, matched_count: int, upserted_id: Any = None) -> None:
        self.matched_count = matched_count
        self.upserted_id = upserted_id


class FakeDeleteResult:
    def __init__(self, deleted_count: int) -> None:
        self.deleted_count = deleted_count


def _matches(document: Dict[str, Any], filter_doc: Dict[str, Any]) -> bool:
    for key, expected in filter_doc.items():
        value = document.get(key)
        if isinstance(expected, dict) and "$type" in expected:
            if expected["$type"] == "string" and not isinstance(value, str):
                return False
            continue
        if value != expected:
            return False
    return True


def _project(document: Dict[str, Any], projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    result = deepcopy(document)
    if projection and projection.get("_id") == 0:
        result.pop("_id", None)
    return result


class FakeCollection:
    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []
        self._ids = count(1)

    def insert_raw(self, document: Dict[str, Any]) -> Dict[str, Any]:
        row = deepcopy(document)
        row.setdefault("_id", next(self._ids))
        self.rows.append(row)
        return row

    def update_one(self, filter_doc: Dict[str, Any], update_doc: Dict[str, Any], upsert: bool = False):
        for row in self.rows:
            if _matches(row, filter_doc):
                row.update(deepcopy(update_doc.get("$set", {})))
                return FakeUpdateResult(matched_count=1)
        if not upsert:
            return FakeUpdateResult(matched_count=0)
        document = dict(filter_doc)
        document.update(deepcopy(update_doc.get("$set", {})))
        document.update(deepcopy(update_doc.get("$setOnInsert", {})))
        row = self.insert_raw(document)
        return FakeUpdateResult(matched_count=0, upserted_id=row["_id"])

    def find_one(self, filter_doc: Dict[str, Any], projection: Optional[Dict[str, Any]] = None):
        for row in self.rows:
            if _matches(row, filter_doc):
                return _project(row, projection)
        return None

    def find(
        self,
        filter_doc: Optional[Dict[str, Any]] = None,
        projection: Optional[Dict[str, Any]] = None,
        sort: Optional[Iterable[Tuple[str, int]]] = None,
    ) -> List[Dict[str, Any]]:
        rows = [row for row in self.rows if _matches(row, filter_doc or {})]
        for key, direction in reversed(list(sort or [])):
            rows.sort(key=lambda row: row.get(key) or "", reverse=direction < 0)
        return [_project(row, projection) for row in rows]

    def delete_one(self, filter_doc: Dict[str, Any]) -> FakeDeleteResult:
        for index, row in enumerate(self.rows):
            if _matches(row, filter_doc):
                del self.rows[index]
                return FakeDeleteResult(1)
        return FakeDeleteResult(0)

    def delete_many(self, filter_doc: Dict[str, Any]) -> FakeDeleteResult:
        before = len(self.rows)
        self.rows = [row for row in self.rows if not _matches(row, filter_doc)]
        return FakeDeleteResult(before - len(self.rows))


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection()
        return self.collections[name]


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()
