"""
In-process Firestore stand-in used when USE_MOCK_DB=true (local development, tests).

Implements the subset of the google-cloud-firestore client surface the services
rely on:
- collection(name).document(id).get / set / update / create / delete
- where / order_by / offset / limit / stream / get on collections and queries
- count() aggregation
- SERVER_TIMESTAMP, DELETE_FIELD, ArrayUnion and Increment transforms

State lives in memory and is optionally mirrored to a JSON file so a dev
server keeps its data across restarts.
"""

import copy
import json
import logging
import os
import random
import string
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

logger = logging.getLogger(__name__)

_AUTO_ID_CHARS = string.ascii_letters + string.digits
_rng = random.SystemRandom()

_OPERATORS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
    "not-in": lambda a, b: a not in b,
    "array_contains": lambda a, b: isinstance(a, list) and b in a,
}

_MISSING = object()


def _auto_id() -> str:
    return "".join(_rng.choice(_AUTO_ID_CHARS) for _ in range(20))


def _get_field(data: Dict, field_path: str):
    value: Any = data
    for part in field_path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _set_field(data: Dict, field_path: str, value) -> None:
    parts = field_path.split(".")
    target = data
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


def _pop_field(data: Dict, field_path: str) -> None:
    parts = field_path.split(".")
    target = data
    for part in parts[:-1]:
        target = target.get(part)
        if not isinstance(target, dict):
            return
    target.pop(parts[-1], None)


def _resolve_value(value, now: datetime):
    """Replace SERVER_TIMESTAMP sentinels nested inside plain values."""
    if value is firestore.SERVER_TIMESTAMP:
        return now
    if isinstance(value, dict):
        return {k: _resolve_value(v, now) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_value(v, now) for v in value]
    return copy.deepcopy(value)


def _apply_update(document: Dict, updates: Dict, now: datetime) -> Dict:
    result = copy.deepcopy(document)
    for field_path, value in updates.items():
        if value is firestore.DELETE_FIELD:
            _pop_field(result, field_path)
        elif isinstance(value, firestore.ArrayUnion):
            current = _get_field(result, field_path)
            current = list(current) if isinstance(current, list) else []
            for item in value.values:
                if item not in current:
                    current.append(_resolve_value(item, now))
            _set_field(result, field_path, current)
        elif isinstance(value, firestore.Increment):
            current = _get_field(result, field_path)
            base = current if isinstance(current, (int, float)) and current is not _MISSING else 0
            _set_field(result, field_path, base + value.value)
        else:
            _set_field(result, field_path, _resolve_value(value, now))
    return result


class _JSONEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, datetime):
            return {"__datetime__": o.isoformat()}
        return super().default(o)


def _json_object_hook(obj):
    if "__datetime__" in obj and len(obj) == 1:
        return datetime.fromisoformat(obj["__datetime__"])
    return obj


class MockDocumentSnapshot:
    def __init__(self, reference: "MockDocumentReference", data: Optional[Dict]):
        self.reference = reference
        self._data = data

    @property
    def id(self) -> str:
        return self.reference.id

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict]:
        return copy.deepcopy(self._data) if self._data is not None else None

    def get(self, field_path: str):
        if self._data is None:
            return None
        value = _get_field(self._data, field_path)
        if value is _MISSING:
            raise KeyError(field_path)
        return copy.deepcopy(value)


class MockDocumentReference:
    def __init__(self, client: "MockFirestore", collection_name: str, document_id: str):
        self._client = client
        self._collection_name = collection_name
        self.id = document_id

    @property
    def path(self) -> str:
        return f"{self._collection_name}/{self.id}"

    def get(self) -> MockDocumentSnapshot:
        return MockDocumentSnapshot(self, self._client._read(self._collection_name, self.id))

    def set(self, document_data: Dict, merge: bool = False) -> None:
        now = datetime.now(timezone.utc)
        with self._client._lock:
            existing = self._client._read(self._collection_name, self.id) if merge else None
            data = _apply_update(existing or {}, document_data, now)
            self._client._write(self._collection_name, self.id, data)

    def create(self, document_data: Dict) -> None:
        with self._client._lock:
            if self._client._read(self._collection_name, self.id) is not None:
                raise google_exceptions.Conflict(f"Document already exists: {self.path}")
            self.set(document_data)

    def update(self, field_updates: Dict) -> None:
        now = datetime.now(timezone.utc)
        with self._client._lock:
            existing = self._client._read(self._collection_name, self.id)
            if existing is None:
                raise google_exceptions.NotFound(f"No document to update: {self.path}")
            self._client._write(self._collection_name, self.id, _apply_update(existing, field_updates, now))

    def delete(self) -> None:
        self._client._delete(self._collection_name, self.id)


class MockAggregationResult:
    def __init__(self, alias: str, value: int):
        self.alias = alias
        self.value = value


class MockAggregationQuery:
    def __init__(self, query: "MockQuery", alias: Optional[str]):
        self._query = query
        self._alias = alias or "field_1"

    def get(self) -> List[List[MockAggregationResult]]:
        count = sum(1 for _ in self._query._matching())
        return [[MockAggregationResult(self._alias, count)]]


class MockQuery:
    def __init__(
        self,
        client: "MockFirestore",
        collection_name: str,
        filters: Tuple = (),
        orders: Tuple = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ):
        self._client = client
        self._collection_name = collection_name
        self._filters = filters
        self._orders = orders
        self._offset = offset
        self._limit = limit

    def _copy(self, **changes) -> "MockQuery":
        params = {
            "filters": self._filters,
            "orders": self._orders,
            "offset": self._offset,
            "limit": self._limit,
        }
        params.update(changes)
        return MockQuery(self._client, self._collection_name, **params)

    def where(self, field_path: str, op_string: str, value) -> "MockQuery":
        if op_string not in _OPERATORS:
            raise ValueError(f"Unsupported operator in mock Firestore: {op_string}")
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> "MockQuery":
        return self._copy(orders=self._orders + ((field_path, direction),))

    def offset(self, num_to_skip: int) -> "MockQuery":
        return self._copy(offset=num_to_skip)

    def limit(self, count: int) -> "MockQuery":
        return self._copy(limit=count)

    def count(self, alias: Optional[str] = None) -> MockAggregationQuery:
        return MockAggregationQuery(self._copy(offset=0, limit=None), alias)

    def _matching(self) -> Iterator[Tuple[str, Dict]]:
        for doc_id, data in self._client._documents(self._collection_name):
            if all(self._matches(data, f) for f in self._filters):
                yield doc_id, data

    @staticmethod
    def _matches(data: Dict, query_filter: Tuple) -> bool:
        field_path, op_string, value = query_filter
        field_value = _get_field(data, field_path)
        if field_value is _MISSING:
            return False
        return _OPERATORS[op_string](field_value, value)

    def stream(self) -> Iterator[MockDocumentSnapshot]:
        rows = list(self._matching())
        # Stable sorts applied from the least to the most significant ordering
        for field_path, direction in reversed(self._orders):
            rows = [row for row in rows if _get_field(row[1], field_path) is not _MISSING]
            rows.sort(
                key=lambda row: _get_field(row[1], field_path),
                reverse=(direction == firestore.Query.DESCENDING),
            )
        rows = rows[self._offset:]
        if self._limit is not None:
            rows = rows[: self._limit]
        for doc_id, data in rows:
            reference = MockDocumentReference(self._client, self._collection_name, doc_id)
            yield MockDocumentSnapshot(reference, data)

    def get(self) -> List[MockDocumentSnapshot]:
        return list(self.stream())


class MockCollectionReference(MockQuery):
    def __init__(self, client: "MockFirestore", name: str):
        super().__init__(client, name)
        self.id = name

    def document(self, document_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._client, self._collection_name, document_id or _auto_id())


class MockFirestore:
    """Drop-in replacement for firestore.Client backed by a dict."""

    def __init__(self, path: Optional[str] = None):
        self._path = path
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, Dict]] = {}
        if path and os.path.exists(path):
            self._load()

    def collection(self, collection_name: str) -> MockCollectionReference:
        return MockCollectionReference(self, collection_name)

    def collections(self) -> List[MockCollectionReference]:
        with self._lock:
            names = sorted(name for name, docs in self._data.items() if docs)
        return [MockCollectionReference(self, name) for name in names]

    def _read(self, collection_name: str, document_id: str) -> Optional[Dict]:
        with self._lock:
            data = self._data.get(collection_name, {}).get(document_id)
            return copy.deepcopy(data) if data is not None else None

    def _write(self, collection_name: str, document_id: str, data: Dict) -> None:
        with self._lock:
            self._data.setdefault(collection_name, {})[document_id] = data
            self._flush()

    def _delete(self, collection_name: str, document_id: str) -> None:
        with self._lock:
            self._data.get(collection_name, {}).pop(document_id, None)
            self._flush()

    def _documents(self, collection_name: str) -> List[Tuple[str, Dict]]:
        with self._lock:
            return [(doc_id, copy.deepcopy(data)) for doc_id, data in self._data.get(collection_name, {}).items()]

    def _load(self) -> None:
        with open(self._path, "r", encoding="utf-8") as f:
            self._data = json.load(f, object_hook=_json_object_hook)
        logger.info(f"[MOCK DB] Loaded {sum(len(d) for d in self._data.values())} documents from {self._path}")

    def _flush(self) -> None:
        if not self._path:
            return
        tmp_path = f"{self._path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, cls=_JSONEncoder, indent=2)
        os.replace(tmp_path, self._path)


def get_mock_db(path: Optional[str] = None) -> MockFirestore:
    return MockFirestore(path)
