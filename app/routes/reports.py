"""
Report endpoints - API routes for citizen report submission and official review.
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status

from app.core import errors
from app.core.auth import require_authenticated, require_citizen, require_official
from app.models.base import Pagination
from app.models.report import ReportEnvelope, ReportListResponse, ReportReviewRequest, ReportStatus
from app.models.user import CurrentUser
from app.services import report_service
from app.services.media_service import get_media_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.post("", response_model=ReportEnvelope, status_code=status.HTTP_201_CREATED)
async def submit_report(
    media: Optional[UploadFile] = File(None, description="Single image or video, max 20MB"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    use_current_location: Optional[bool] = Form(None, alias="useCurrentLocation"),
    address: Optional[str] = Form(None),
    latitude: Optional[float] = Form(None),
    longitude: Optional[float] = Form(None),
    city: Optional[str] = Form(None),
    province: Optional[str] = Form(None),
    user: CurrentUser = Depends(require_citizen),
):
    """
    Submit a new citizen report (multipart form).

    This endpoint:
    1. Validates text and location fields
    2. Validates and uploads the media file
    3. Stores the report as pending / unverified
    """
    report_data = report_service.build_report_input(
        title=title,
        description=description,
        use_current_location=use_current_location,
        address=address,
        latitude=latitude,
        longitude=longitude,
        city=city,
        province=province,
    )

    if media is None or not media.filename:
        raise errors.ValidationError("Please upload an image or video")

    # Reject oversized or wrong-type uploads before buffering them
    get_media_service().validate(media.content_type, media.size or 0)

    try:
        file_bytes = await media.read()
    finally:
        await media.close()

    logger.info(f"📝 POST /api/reports - user={user.id} file={media.filename} ({len(file_bytes)} bytes)")
    report = await report_service.create_report(
        owner=user,
        report_data=report_data,
        file_bytes=file_bytes,
        mime_type=media.content_type,
        size_bytes=media.size,
        filename=media.filename,
    )
    return ReportEnvelope(message="Report submitted successfully", data=report)


@router.get("", response_model=ReportListResponse)
async def get_reports(
    status_filter: Optional[ReportStatus] = Query(None, alias="status"),
    verified: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(report_service.DEFAULT_PAGE_SIZE, ge=1, le=report_service.MAX_PAGE_SIZE),
    user: CurrentUser = Depends(require_authenticated),
):
    """
    List reports, newest first. Citizens and officials can both read every
    non-deleted report.
    """
    reports, total = await report_service.list_reports(status=status_filter, verified=verified, page=page, limit=limit)
    return ReportListResponse(
        data=reports,
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.get("/{report_id}", response_model=ReportEnvelope)
async def get_report(report_id: str, user: CurrentUser = Depends(require_authenticated)):
    return ReportEnvelope(data=await report_service.get_report(report_id))


@router.patch("/{report_id}/verify", response_model=ReportEnvelope)
async def verify_report(
    report_id: str,
    request: Optional[ReportReviewRequest] = Body(None),
    user: CurrentUser = Depends(require_official),
):
    notes = request.notes if request else None
    report = await report_service.verify_report(report_id, user, notes)
    return ReportEnvelope(message="Report verified successfully", data=report)


@router.patch("/{report_id}/reject", response_model=ReportEnvelope)
async def reject_report(
    report_id: str,
    request: Optional[ReportReviewRequest] = Body(None),
    user: CurrentUser = Depends(require_official),
):
    notes = request.notes if request else None
    report = await report_service.reject_report(report_id, user, notes)
    return ReportEnvelope(message="Report rejected", data=report)


@router.delete("/{report_id}")
async def delete_report(report_id: str, user: CurrentUser = Depends(require_official)):
    await report_service.delete_report(report_id, user)
    return {"success": True, "message": "Report deleted successfully"}
