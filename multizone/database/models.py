"""SQLAlchemy database models for multizone."""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime

from multizone.database.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values; SQLite drops the offset on read."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from multizone.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


class FeatureFlagDB(Base):
    """Database model for FeatureFlag."""

    __tablename__ = "feature_flags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True, default="")
    enabled = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # Columns a partial update may touch
    MUTABLE_FIELDS = ("name", "description", "enabled")

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from multizone.models.feature_flag import FeatureFlag
        return FeatureFlag(
            id=self.id,
            key=self.key,
            name=self.name,
            description=self.description or "",
            enabled=bool(self.enabled),
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )
