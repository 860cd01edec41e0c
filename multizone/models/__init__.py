"""Data models for multizone."""

from multizone.models.user import User
from multizone.models.feature_flag import FeatureFlag
from multizone.models.zone_status import ZoneStatus, ZoneHealth

__all__ = [
    "User",
    "FeatureFlag",
    "ZoneStatus",
    "ZoneHealth",
]
