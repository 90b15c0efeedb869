"""
Read-only relays for collections populated by the external air-quality
pipeline (model output, recommendations).

Documents are passed through unmodified apart from converting Firestore
value types to JSON-friendly ones. There is no schema on this side.
"""

import logging
from typing import Dict, List

from app.config.firebase import get_db
from app.core import errors
from app.utils.firestore_helpers import is_valid_document_id, to_json_safe

logger = logging.getLogger(__name__)


def list_documents(collection_name: str) -> List[Dict]:
    docs = get_db().collection(collection_name).stream()
    documents = [{**to_json_safe(doc.to_dict() or {}), "id": doc.id} for doc in docs]
    logger.info(f"Retrieved {len(documents)} {collection_name} documents")
    return documents


def get_document(collection_name: str, document_id: str, not_found_message: str = "Document not found") -> Dict:
    """
    Raises:
        InvalidIdentifier: document_id is not a valid Firestore document ID
        NotFound: no document with that ID
    """
    if not is_valid_document_id(document_id):
        raise errors.InvalidIdentifier(f"Invalid identifier: {document_id!r}")

    doc = get_db().collection(collection_name).document(document_id).get()
    if not doc.exists:
        raise errors.NotFound(not_found_message)

    return {**to_json_safe(doc.to_dict() or {}), "id": doc.id}
