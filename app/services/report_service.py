"""
Report service - lifecycle of citizen pollution reports.
Handles Firestore CRUD operations for reports.

DESIGN NOTE:
- Citizens create reports; officials verify, reject and soft-delete them
- Soft-deleted reports are invisible to every read path
- Media is uploaded before the report is persisted; a failed persist
  leaves the uploaded object behind (logged, not rolled back)
"""

import logging
from typing import Dict, List, Optional, Tuple

from firebase_admin import firestore
from pydantic import ValidationError as PydanticValidationError

from app.config.firebase import get_db
from app.core import errors
from app.models.report import ReportCreate, ReportResponse, ReportStatus
from app.models.user import CurrentUser, Role, UserSummary
from app.services.media_service import get_media_service
from app.services.status_workflow import build_review_update, create_status_history_entry
from app.services.user_service import get_user_service
from app.utils.firestore_helpers import document_to_dict, is_valid_document_id, where_filter

logger = logging.getLogger(__name__)

REPORTS_COLLECTION = "reports"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def build_report_input(**fields) -> ReportCreate:
    """
    Build a validated ReportCreate from flat submission fields
    (title, description, use_current_location, address, latitude,
    longitude, city, province).

    Raises:
        ValidationError: missing coordinates, out-of-range coordinates,
            or text fields over their length limits
    """
    latitude = fields.pop("latitude", None)
    longitude = fields.pop("longitude", None)
    location_keys = ("use_current_location", "address", "city", "province")
    location = {k: fields.pop(k) for k in location_keys if fields.get(k) is not None}
    fields = {k: v for k, v in fields.items() if v is not None}

    try:
        return ReportCreate(
            location={**location, "coordinates": {"latitude": latitude, "longitude": longitude}},
            **fields,
        )
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise errors.ValidationError("Invalid report data", error=details)


def _get_live_report_ref(report_id: str):
    """
    Resolve a non-deleted report document.

    Raises:
        NotFound: malformed ID, missing document or soft-deleted report
    """
    if not is_valid_document_id(report_id):
        raise errors.NotFound("Report not found")

    doc_ref = get_db().collection(REPORTS_COLLECTION).document(report_id)
    data = document_to_dict(doc_ref.get())
    if data is None or data.get("is_deleted", False):
        raise errors.NotFound("Report not found")
    return doc_ref, data


def _to_response(data: Dict, summaries: Optional[Dict[str, UserSummary]] = None) -> ReportResponse:
    """Convert a stored report to the response model with owner / verifier populated."""
    summaries = summaries if summaries is not None else {}
    user_service = get_user_service()

    def summary_for(user_id: Optional[str]) -> Optional[UserSummary]:
        if not user_id:
            return None
        if user_id not in summaries:
            summaries[user_id] = user_service.get_user_summary(user_id)
        return summaries[user_id]

    return ReportResponse(
        **{k: v for k, v in data.items() if k in ReportResponse.model_fields},
        user=summary_for(data.get("user_id")),
        verifier=summary_for(data.get("verified_by")),
    )


async def create_report(
    owner: CurrentUser,
    report_data: ReportCreate,
    file_bytes: bytes,
    mime_type: Optional[str],
    size_bytes: Optional[int] = None,
    filename: Optional[str] = None,
) -> ReportResponse:
    """
    Create a new citizen report with exactly one media attachment.

    Flow:
    1. Only citizens may submit
    2. Upload media (validated by the media adapter)
    3. Persist the report as pending / unverified

    Raises:
        Forbidden: caller is not a citizen
        ValidationError: no media attached
        UnsupportedMediaType / PayloadTooLarge / UpstreamFailure: from media ingestion
    """
    if owner.role is not Role.CITIZEN:
        raise errors.Forbidden(f"Access denied. {Role.CITIZEN.label} role required.")

    if not file_bytes:
        raise errors.ValidationError("Please upload an image or video")

    media = await get_media_service().ingest(file_bytes, mime_type, size_bytes, filename)

    doc_ref = get_db().collection(REPORTS_COLLECTION).document()
    report_dict = {
        "user_id": owner.id,
        "media": media.model_dump(mode="json"),
        "location": report_data.location.model_dump(mode="json"),
        "title": report_data.title,
        "description": report_data.description,
        "status": ReportStatus.PENDING.value,
        "verified": False,
        "verified_by": None,
        "verified_at": None,
        "air_quality": None,
        "visibility": None,
        "severity": None,
        "views": 0,
        "likes": 0,
        "flags": [],
        "comments": [],
        "tags": [],
        "status_history": [
            create_status_history_entry("", ReportStatus.PENDING.value, owner.id, "Report created")
        ],
        "is_deleted": False,
        "deleted_at": None,
        "created_at": firestore.SERVER_TIMESTAMP,
        "updated_at": firestore.SERVER_TIMESTAMP,
    }

    try:
        doc_ref.set(report_dict)
    except Exception as e:
        logger.error(
            f"Failed to save report to Firestore; uploaded media left at {media.object_path}: {e}",
            exc_info=True,
        )
        raise

    logger.info(f"✅ Report created: {doc_ref.id} by {owner.id} ({media.type.value})")
    return _to_response(document_to_dict(doc_ref.get()))


async def list_reports(
    status: Optional[ReportStatus] = None,
    verified: Optional[bool] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[ReportResponse], int]:
    """
    List non-deleted reports, newest first.

    Returns:
        (reports on the requested page, total matching reports)
    """
    if page < 1:
        raise errors.ValidationError("page must be >= 1")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise errors.ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

    # Needs a composite index on (is_deleted, status, verified, created_at desc)
    query = where_filter(get_db().collection(REPORTS_COLLECTION), "is_deleted", "==", False)
    if status is not None:
        query = where_filter(query, "status", "==", status.value)
    if verified is not None:
        query = where_filter(query, "verified", "==", verified)

    total = query.count().get()[0][0].value

    page_query = (
        query.order_by("created_at", direction=firestore.Query.DESCENDING)
        .offset((page - 1) * limit)
        .limit(limit)
    )

    summaries: Dict[str, UserSummary] = {}
    reports = [_to_response(document_to_dict(doc), summaries) for doc in page_query.stream()]
    return reports, total


async def get_report(report_id: str) -> ReportResponse:
    _, data = _get_live_report_ref(report_id)
    return _to_response(data)


async def _review_report(
    report_id: str,
    reviewer: CurrentUser,
    outcome: ReportStatus,
    notes: Optional[str],
) -> ReportResponse:
    if reviewer.role is not Role.OFFICIAL:
        raise errors.Forbidden(f"Access denied. {Role.OFFICIAL.label} role required.")

    doc_ref, data = _get_live_report_ref(report_id)
    doc_ref.update(build_review_update(data.get("status", ""), outcome, reviewer.id, notes))

    logger.info(f"✅ Report {report_id} {outcome.value} by {reviewer.id}")
    return _to_response(document_to_dict(doc_ref.get()))


async def verify_report(report_id: str, reviewer: CurrentUser, notes: Optional[str] = None) -> ReportResponse:
    """
    Mark a report verified (official only).

    Raises:
        Forbidden: caller is not an official
        NotFound: missing or soft-deleted report
    """
    return await _review_report(report_id, reviewer, ReportStatus.VERIFIED, notes)


async def reject_report(report_id: str, reviewer: CurrentUser, notes: Optional[str] = None) -> ReportResponse:
    """
    Mark a report rejected (official only).

    Raises:
        Forbidden: caller is not an official
        NotFound: missing or soft-deleted report
    """
    return await _review_report(report_id, reviewer, ReportStatus.REJECTED, notes)


async def delete_report(report_id: str, actor: CurrentUser) -> None:
    """
    Soft-delete a report (official only). The document stays in Firestore
    with is_deleted=true and is excluded from every read.
    """
    if actor.role is not Role.OFFICIAL:
        raise errors.Forbidden(f"Access denied. {Role.OFFICIAL.label} role required.")

    doc_ref, _ = _get_live_report_ref(report_id)
    doc_ref.update({
        "is_deleted": True,
        "deleted_at": firestore.SERVER_TIMESTAMP,
        "updated_at": firestore.SERVER_TIMESTAMP,
    })
    logger.info(f"Report {report_id} soft-deleted by {actor.id}")
