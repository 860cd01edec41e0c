"""ZoneStatus data model for multizone."""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field


class ZoneHealth(str, Enum):
    """Classification of a single zone check."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ZoneStatus(BaseModel):
    """Result of one health check against a zone; never persisted."""
    
    name: str = Field(..., description="Zone name (e.g. 'zone-main')")
    status: ZoneHealth = Field(..., description="Check classification")
    url: str = Field(..., description="URL that was checked")
    last_check: datetime = Field(..., alias="lastCheck", description="When the check was issued")
    message: str = Field(..., description="Human-readable check outcome")
    
    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        use_enum_values = True
