"""Feature flag service: read-through cache policy over the repository."""

import logging
from typing import Any, Dict, List, Optional

from multizone.cache import FlagCache
from multizone.database.feature_flag_repository import FeatureFlagRepository
from multizone.models.feature_flag import FeatureFlag

logger = logging.getLogger(__name__)


class FeatureFlagService:
    """Coordinates the flag repository and the shared FlagCache.

    Point lookups prefer the cache; list requests always hit the datastore and
    refresh the cache. Writes update the cache only after the datastore
    operation succeeded.
    """

    def __init__(self, repository: FeatureFlagRepository, cache: FlagCache):
        self.repository = repository
        self.cache = cache

    def list_flags(self) -> List[FeatureFlag]:
        flags = self.repository.get_all()
        for flag in flags:
            self.cache.put(flag.key, flag)
        return flags

    def get_flag(self, key: str) -> FeatureFlag:
        """Return a flag from cache, falling back to the datastore on a miss."""
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        flag = self.repository.get_by_key(key)
        self.cache.put(key, flag)
        logger.debug(f"Feature flag cache miss filled: {key}")
        return flag

    def create_flag(self, key: str, name: str, description: Optional[str] = "") -> FeatureFlag:
        flag = self.repository.create(key, name, description)
        self.cache.put(flag.key, flag)
        return flag

    def update_flag(self, key: str, fields: Dict[str, Any]) -> FeatureFlag:
        flag = self.repository.update(key, fields)
        self.cache.put(key, flag)
        return flag

    def delete_flag(self, key: str) -> None:
        self.repository.delete(key)
        self.cache.remove(key)
