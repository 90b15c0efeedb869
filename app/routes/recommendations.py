"""
Recommendation endpoints - pass-through reads of externally generated
policy / health recommendations. Officials only.
"""

from fastapi import APIRouter, Depends

from app.core.auth import require_official
from app.core.settings import settings
from app.services import data_relay_service

router = APIRouter(
    prefix="/api/recommendations",
    tags=["Recommendations"],
    dependencies=[Depends(require_official)],
)


@router.get("")
async def get_recommendations():
    documents = data_relay_service.list_documents(settings.RECOMMENDATIONS_COLLECTION)
    return {"success": True, "count": len(documents), "data": documents}


@router.get("/{recommendation_id}")
async def get_recommendation_by_id(recommendation_id: str):
    document = data_relay_service.get_document(
        settings.RECOMMENDATIONS_COLLECTION, recommendation_id, not_found_message="Recommendation not found"
    )
    return {"success": True, "data": document}
