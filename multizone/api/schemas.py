"""Request/response models for the multizone API."""

from typing import List, Optional
from pydantic import BaseModel, Field

from multizone.models.zone_status import ZoneStatus


class UserCreateRequest(BaseModel):
    """Request model for creating a user.

    Fields are optional here so that missing values reach the datastore
    layer's required-field check and come back as 400.
    """
    email: Optional[str] = Field(None, description="User email address")
    name: Optional[str] = Field(None, description="User display name")


class FeatureFlagCreateRequest(BaseModel):
    """Request model for creating a feature flag (any 'enabled' value is ignored)."""
    key: Optional[str] = Field(None, description="Unique flag key")
    name: Optional[str] = Field(None, description="Human-readable name")
    description: Optional[str] = Field("", description="What this flag controls")


class FeatureFlagUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are applied."""
    name: Optional[str] = None
    description: Optional[str] = None
    enabled: Optional[bool] = None

    class Config:
        """Pydantic configuration."""
        extra = "forbid"


class HealthResponse(BaseModel):
    """Liveness payload."""
    status: str = "ok"
    service: str = "backend-api"


class ZonesStatusResponse(BaseModel):
    """Envelope for zone check results; status reports that the check ran."""
    status: str = "ok"
    zones: List[ZoneStatus]


class MessageResponse(BaseModel):
    message: str


class SeedResponse(BaseModel):
    """Response for database seeding."""
    message: str
    total_users: int = Field(..., alias="totalUsers")
    created: int
    skipped: int
    errors: List[str]
    error_count: int = Field(..., alias="errorCount")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
