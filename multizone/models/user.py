"""User data model for multizone."""

from datetime import datetime
from pydantic import BaseModel, Field


class User(BaseModel):
    """User model for multizone."""
    
    id: int = Field(..., description="Numeric surrogate identifier")
    email: str = Field(..., description="User email address (unique)")
    name: str = Field(..., description="User display name")
    created_at: datetime = Field(..., alias="createdAt", description="User creation timestamp")
    updated_at: datetime = Field(..., alias="updatedAt", description="User last update timestamp")
    
    class Config:
        """Pydantic configuration."""
        populate_by_name = True
