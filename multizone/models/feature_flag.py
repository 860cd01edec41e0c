"""FeatureFlag data model for multizone."""

from datetime import datetime
from pydantic import BaseModel, Field


class FeatureFlag(BaseModel):
    """Named boolean toggle used by the front-end zones."""
    
    id: int = Field(..., description="Numeric surrogate identifier")
    key: str = Field(..., description="Unique natural key (e.g. 'new_dashboard')")
    name: str = Field(..., description="Human-readable name")
    description: str = Field("", description="What this flag controls")
    enabled: bool = Field(False, description="Current state")
    created_at: datetime = Field(..., alias="createdAt", description="Flag creation timestamp")
    updated_at: datetime = Field(..., alias="updatedAt", description="Flag last update timestamp")
    
    class Config:
        """Pydantic configuration."""
        populate_by_name = True
