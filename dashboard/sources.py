"""Injectable snapshot data sources for the dashboard controller."""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Protocol

from dashboard.client import HttpSnapshotSource
from dashboard.config import DashboardConfig

FIXTURE_STATUS = "Your garden is healthy and productive!"


class SnapshotSource(Protocol):
    def fetch_latest(self, device_id: str, token: Optional[str]) -> Dict[str, Any]: ...

    def close(self) -> None: ...


class FixtureSnapshotSource:
    """Offline source that fabricates a plausible snapshot after a short delay."""

    def __init__(
        self,
        delay: float = 0.0,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.delay = delay
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def close(self) -> None:
        return None

    def fetch_latest(self, device_id: str, token: Optional[str]) -> Dict[str, Any]:
        if self.delay:
            time.sleep(self.delay)
        now = self._clock()
        # Last watering on the hour, three hours back.
        last_watering = (now - timedelta(hours=3)).replace(minute=0, second=0, microsecond=0)
        return {
            "timestamp": now.isoformat(),
            "soilHumidity": 72,
            "temperature": 26,
            "airHumidity": 85,
            "generalStatus": FIXTURE_STATUS,
            "lastWatering": last_watering.isoformat(),
        }


def build_snapshot_source(config: DashboardConfig) -> SnapshotSource:
    if config.data_source == "fixture":
        return FixtureSnapshotSource(delay=config.fixture_delay)
    return HttpSnapshotSource(config)
