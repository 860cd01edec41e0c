"""Repository for FeatureFlag database operations."""

import logging
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from multizone.errors import DuplicateError, InternalError, InvalidError, NotFoundError
from multizone.models.feature_flag import FeatureFlag
from multizone.database.models import FeatureFlagDB

logger = logging.getLogger(__name__)


class FeatureFlagRepository:
    """Repository for FeatureFlag database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, key: str) -> Optional[FeatureFlagDB]:
        try:
            return self.db.query(FeatureFlagDB).filter(FeatureFlagDB.key == key).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InternalError(str(e)) from e

    def create(self, key: str, name: str, description: Optional[str] = "") -> FeatureFlag:
        """Create a new feature flag; new flags always start disabled.

        Raises:
            InvalidError: If key or name is empty
            DuplicateError: If a flag with this key already exists
        """
        if not key or not key.strip() or not name or not name.strip():
            raise InvalidError("Key and name are required")

        try:
            flag_db = FeatureFlagDB(key=key, name=name, description=description or "", enabled=False)
            self.db.add(flag_db)
            self.db.commit()
            self.db.refresh(flag_db)
            logger.debug(f"Created feature flag {flag_db.id}: {key}")
            return flag_db.to_pydantic()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Duplicate key on feature flag create: {key}")
            raise DuplicateError(f"feature flag with key {key} already exists: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create feature flag {key}: {type(e).__name__}: {str(e)}")
            raise InternalError(str(e)) from e

    def get_all(self) -> List[FeatureFlag]:
        """Get all feature flags ordered by ID."""
        try:
            flags_db = self.db.query(FeatureFlagDB).order_by(FeatureFlagDB.id).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to list feature flags: {type(e).__name__}: {str(e)}")
            raise InternalError(str(e)) from e
        return [flag_db.to_pydantic() for flag_db in flags_db]

    def get_by_key(self, key: str) -> FeatureFlag:
        """Get feature flag by key.

        Raises:
            NotFoundError: If no flag has this key
        """
        flag_db = self._get_db(key)
        if not flag_db:
            raise NotFoundError("Feature flag not found")
        return flag_db.to_pydantic()

    def update(self, key: str, fields: Dict[str, Any]) -> FeatureFlag:
        """Apply a partial update; fields not supplied keep their values.

        Raises:
            InvalidError: On an unknown field or an empty name
            NotFoundError: If no flag has this key
        """
        unknown = sorted(set(fields) - set(FeatureFlagDB.MUTABLE_FIELDS))
        if unknown:
            raise InvalidError(f"Unknown or immutable fields: {', '.join(unknown)}")
        if "name" in fields and (not fields["name"] or not str(fields["name"]).strip()):
            raise InvalidError("Name must not be empty")

        flag_db = self._get_db(key)
        if not flag_db:
            raise NotFoundError("Feature flag not found")

        for field, value in fields.items():
            if field == "description" and value is None:
                value = ""
            setattr(flag_db, field, value)

        try:
            self.db.commit()
            self.db.refresh(flag_db)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update feature flag {key}: {type(e).__name__}: {str(e)}")
            raise InternalError(str(e)) from e

        logger.debug(f"Updated feature flag {key}: {sorted(fields)}")
        return flag_db.to_pydantic()

    def delete(self, key: str) -> None:
        """Delete feature flag by key.

        Raises:
            NotFoundError: If no row was affected
        """
        try:
            deleted = self.db.query(FeatureFlagDB).filter(FeatureFlagDB.key == key).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete feature flag {key}: {type(e).__name__}: {str(e)}")
            raise InternalError(str(e)) from e
        if deleted == 0:
            raise NotFoundError("Feature flag not found")
        logger.debug(f"Deleted feature flag {key}")

    def find_or_create(self, key: str, name: str, description: str = "") -> Tuple[FeatureFlag, bool]:
        """Return the flag with this key, creating it (disabled) when absent."""
        existing = self._get_db(key)
        if existing:
            return existing.to_pydantic(), False

        try:
            return self.create(key, name, description), True
        except DuplicateError:
            existing = self._get_db(key)
            if existing is None:
                raise
            return existing.to_pydantic(), False
