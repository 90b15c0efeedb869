"""
Firestore helpers shared by the services.

NOTE: For firebase_admin SDK, we use positional arguments in where() which still
work. The deprecation warning is just a warning - the functionality is still supported.
"""

import base64
from datetime import date, datetime
from typing import Any, Dict, Optional

MAX_DOCUMENT_ID_BYTES = 1500


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Usage:
        query = where_filter(collection, "status", "==", "pending")
        query = where_filter(query, "is_deleted", "==", False)
    """
    return query.where(field_path, op_string, value)


def is_valid_document_id(document_id: Optional[str]) -> bool:
    """
    Firestore document ID rules: non-empty, at most 1500 bytes, no '/',
    not '.' or '..', and not matching the reserved __.*__ pattern.
    """
    if not document_id or not isinstance(document_id, str):
        return False
    if "/" in document_id or document_id in (".", ".."):
        return False
    if document_id.startswith("__") and document_id.endswith("__"):
        return False
    return len(document_id.encode("utf-8")) <= MAX_DOCUMENT_ID_BYTES


def document_to_dict(doc) -> Optional[Dict]:
    """Snapshot -> dict with the document ID under "id", or None if missing."""
    if doc is None or not doc.exists:
        return None
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def to_json_safe(value: Any) -> Any:
    """
    Convert Firestore-specific values (timestamps, geo points, document
    references, bytes) into JSON-friendly equivalents. Used for pass-through
    reads of collections this service does not own.
    """
    if isinstance(value, dict):
        return {str(k): to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if hasattr(value, "latitude") and hasattr(value, "longitude"):
        return {"latitude": value.latitude, "longitude": value.longitude}
    if hasattr(value, "path") and hasattr(value, "id") and not isinstance(value, str):
        return value.path
    return value
