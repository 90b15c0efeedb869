"""
Status workflow for official review of citizen reports.

    pending -> verified   (terminal success)
    pending -> rejected   (terminal failure)

Re-reviewing an already reviewed report overwrites the verifier and timestamp;
there is no guard against a second transition. Every transition is appended
to status_history for auditability.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from firebase_admin import firestore

from app.models.report import ReportStatus

# Review outcomes an official can record, mapped to the stored verified flag
REVIEW_OUTCOMES: Dict[ReportStatus, bool] = {
    ReportStatus.VERIFIED: True,
    ReportStatus.REJECTED: False,
}


def create_status_history_entry(
    from_status: str,
    to_status: str,
    changed_by: str,
    note: Optional[str] = None,
) -> Dict:
    """
    Create a status history entry for the audit trail.

    Uses a concrete timestamp: Firestore does not allow SERVER_TIMESTAMP
    inside array elements.
    """
    return {
        "from": from_status,
        "to": to_status,
        "changed_by": changed_by,
        "timestamp": datetime.now(timezone.utc),
        "note": note or "",
    }


def build_review_update(
    current_status: str,
    outcome: ReportStatus,
    reviewer_id: str,
    notes: Optional[str] = None,
) -> Dict:
    """
    Field updates for a verify / reject review, applied as one document update.

    Raises:
        ValueError: outcome is not a review outcome
    """
    if outcome not in REVIEW_OUTCOMES:
        raise ValueError(f"{outcome.value} is not a review outcome; expected one of {[s.value for s in REVIEW_OUTCOMES]}")

    update = {
        "verified": REVIEW_OUTCOMES[outcome],
        "verified_by": reviewer_id,
        "verified_at": firestore.SERVER_TIMESTAMP,
        "status": outcome.value,
        "updated_at": firestore.SERVER_TIMESTAMP,
        "status_history": firestore.ArrayUnion([
            create_status_history_entry(current_status, outcome.value, reviewer_id, notes)
        ]),
    }
    if notes:
        update["verification_notes"] = notes
    return update
