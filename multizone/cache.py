"""In-process cache of feature flags keyed by flag key."""

import threading
from typing import Dict, Optional

from multizone.models.feature_flag import FeatureFlag


class FlagCache:
    """Thread-safe mapping from flag key to the last observed FeatureFlag.

    Entries never expire. The datastore stays the source of truth; this is a
    best-effort copy that may briefly lag a concurrent writer.
    """

    def __init__(self) -> None:
        self._flags: Dict[str, FeatureFlag] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[FeatureFlag]:
        """Return the cached flag, or None. Never touches the datastore."""
        # Single dict lookups are atomic; readers don't take the lock.
        return self._flags.get(key)

    def put(self, key: str, flag: FeatureFlag) -> None:
        """Store a flag, overwriting any previous entry (last writer wins)."""
        with self._lock:
            self._flags[key] = flag

    def remove(self, key: str) -> None:
        with self._lock:
            self._flags.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._flags.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._flags

    def __len__(self) -> int:
        return len(self._flags)
