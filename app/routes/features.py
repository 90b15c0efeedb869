"""
Feature flag status - lets the frontend decide which optional AI panels to show.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends

from app.core.auth import optional_authenticated
from app.core.settings import settings
from app.models.user import CurrentUser

router = APIRouter(prefix="/api/features", tags=["Features"])


@router.get("/status")
async def get_feature_status(user: Optional[CurrentUser] = Depends(optional_authenticated)):
    return {
        "features": {
            "claudeHaiku": settings.ENABLE_CLAUDE_HAIKU,
            "aiFeatures": settings.ENABLE_AI_FEATURES,
        },
        "environment": settings.ENVIRONMENT,
        "viewer_role": user.role.value if user else None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
