"""
Pydantic models for citizen pollution reports.
These models handle validation for report submission and responses.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.models.base import Pagination
from app.models.user import UserSummary


class ReportStatus(str, Enum):
    """
    Report lifecycle states.

    pending -> verified | rejected through official review.
    under_review and archived are valid stored values reserved for later workflow steps.
    """
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    VERIFIED = "verified"
    REJECTED = "rejected"
    ARCHIVED = "archived"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class Visibility(str, Enum):
    CLEAR = "clear"
    MODERATE = "moderate"
    POOR = "poor"
    VERY_POOR = "very_poor"
    HAZARDOUS = "hazardous"


class Severity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"
    EXTREME = "extreme"


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, description="Latitude must be between -90 and 90")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude must be between -180 and 180")


class ReportLocation(BaseModel):
    use_current_location: bool = True
    address: str = Field("", max_length=500)
    coordinates: Coordinates
    city: str = Field("", max_length=100)
    province: str = Field("", max_length=100)

    @field_validator("address", "city", "province", mode="before")
    @classmethod
    def strip_text(cls, value):
        return (value or "").strip()


class ReportCreate(BaseModel):
    """
    Text and location fields a citizen submits alongside the media file.
    """
    title: str = Field("", max_length=200, description="Title cannot exceed 200 characters")
    description: str = Field("", max_length=1000, description="Description cannot exceed 1000 characters")
    location: ReportLocation

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return (value or "").strip()

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Heavy smog near Ferozepur Road",
                "description": "Visibility under 200m since morning, strong burning smell.",
                "location": {
                    "use_current_location": True,
                    "address": "Ferozepur Road, Lahore",
                    "coordinates": {"latitude": 31.4676, "longitude": 74.3209},
                    "city": "Lahore",
                    "province": "Punjab",
                },
            }
        }


class MediaDescriptor(BaseModel):
    type: MediaKind
    url: str
    filename: str
    size: int = Field(..., ge=0)
    mime_type: str
    object_path: Optional[str] = None


class AirQualitySnapshot(BaseModel):
    aqi: Optional[float] = Field(None, ge=0, le=500)
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    timestamp: Optional[datetime] = None


class ReportFlag(BaseModel):
    user_id: str
    reason: Optional[str] = None
    timestamp: Optional[datetime] = None


class ReportComment(BaseModel):
    user_id: str
    text: str = Field(..., max_length=500)
    timestamp: Optional[datetime] = None


class ReportReviewRequest(BaseModel):
    """Body of verify / reject. Accepts the legacy verificationNotes key."""
    notes: Optional[str] = Field(
        None,
        max_length=1000,
        validation_alias=AliasChoices("notes", "verificationNotes", "verification_notes"),
    )


class ReportResponse(BaseModel):
    """
    Model for report responses (what API returns).
    Owner and verifier references are populated with user summaries.
    """
    id: str = Field(..., description="Firestore document ID")
    user_id: str
    user: Optional[UserSummary] = None
    media: MediaDescriptor
    location: ReportLocation
    title: str = ""
    description: str = ""
    status: ReportStatus = ReportStatus.PENDING
    verified: bool = False
    verified_by: Optional[str] = None
    verifier: Optional[UserSummary] = None
    verified_at: Optional[datetime] = None
    verification_notes: Optional[str] = None
    air_quality: Optional[AirQualitySnapshot] = None
    visibility: Optional[Visibility] = None
    severity: Optional[Severity] = None
    views: int = 0
    likes: int = 0
    flags: List[ReportFlag] = Field(default_factory=list)
    comments: List[ReportComment] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    status_history: List[Dict] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReportEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: ReportResponse


class ReportListResponse(BaseModel):
    success: bool = True
    data: List[ReportResponse]
    pagination: Pagination
