"""Zone health checking."""

from multizone.health.zone_checker import ZoneHealthChecker, ZONE_CHECK_TIMEOUT_SEC

__all__ = ["ZoneHealthChecker", "ZONE_CHECK_TIMEOUT_SEC"]
