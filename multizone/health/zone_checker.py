"""HTTP health checks against the front-end zones."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, List, Tuple
import requests

from multizone.models.zone_status import ZoneHealth, ZoneStatus

logger = logging.getLogger(__name__)

ZONE_CHECK_TIMEOUT_SEC = 5.0


class ZoneHealthChecker:
    """Checks a fixed set of zones and classifies each response."""

    def __init__(self, zones: Iterable[Tuple[str, str]], timeout: float = ZONE_CHECK_TIMEOUT_SEC):
        """Initialize the checker.

        Args:
            zones: (name, url) pairs, fixed for the lifetime of the process
            timeout: Per-zone timeout in seconds
        """
        self.zones: Tuple[Tuple[str, str], ...] = tuple(zones)
        self.timeout = timeout

    def check_zone(self, name: str, url: str) -> ZoneStatus:
        """GET the zone URL and classify the outcome.

        Transport failures yield UNHEALTHY, HTTP 200 yields HEALTHY and any
        other status code yields DEGRADED. Never raises for check failures.
        """
        last_check = datetime.now(timezone.utc)
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Zone {name} unreachable at {url}: {e}")
            return ZoneStatus(
                name=name,
                url=url,
                status=ZoneHealth.UNHEALTHY,
                last_check=last_check,
                message=f"Connection failed: {e}",
            )

        try:
            if response.status_code == 200:
                status, message = ZoneHealth.HEALTHY, "Zone is responding"
            else:
                status, message = ZoneHealth.DEGRADED, f"HTTP {response.status_code}"
        finally:
            response.close()

        return ZoneStatus(name=name, url=url, status=status, last_check=last_check, message=message)

    def check_all_zones(self) -> List[ZoneStatus]:
        """Check every configured zone concurrently; results keep configuration order."""
        if not self.zones:
            return []
        with ThreadPoolExecutor(max_workers=len(self.zones)) as executor:
            futures = [executor.submit(self.check_zone, name, url) for name, url in self.zones]
            return [future.result() for future in futures]
