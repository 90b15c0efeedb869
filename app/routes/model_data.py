"""
Model data endpoints - pass-through reads of the externally computed
air-quality model output. Officials only.
"""

from fastapi import APIRouter, Depends

from app.core.auth import require_official
from app.core.settings import settings
from app.services import data_relay_service

router = APIRouter(
    prefix="/api/model-data",
    tags=["Model Data"],
    dependencies=[Depends(require_official)],
)


@router.get("")
async def get_model_data():
    documents = data_relay_service.list_documents(settings.MODEL_DATA_COLLECTION)
    return {"success": True, "count": len(documents), "data": documents}


@router.get("/{entry_id}")
async def get_model_data_by_id(entry_id: str):
    document = data_relay_service.get_document(
        settings.MODEL_DATA_COLLECTION, entry_id, not_found_message="Model data not found"
    )
    return {"success": True, "data": document}
