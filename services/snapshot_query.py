"""Latest-snapshot lookup behind ``GET /snapshot/{deviceId}``."""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Optional

from app.schemas import SensorSnapshot
from datastore.mock_cosmos import MockCosmosContainer, build_default_container
from settings import get_settings

logger = logging.getLogger(__name__)


class SnapshotNotFound(LookupError):
    """No snapshot has been stored for the requested device yet."""

    def __init__(self, device_id: str) -> None:
        super().__init__(f"no document found for device {device_id}")
        self.device_id = device_id
        self.message = str(self)


class BackendFailure(RuntimeError):
    """The backing store could not answer the query."""


class SnapshotQueryService:
    """Stateless query against the backing container.

    Each call issues exactly one ``query_latest`` request. Nothing is cached
    and failures are never retried.
    """

    def __init__(self, container: MockCosmosContainer, scope_by_device: bool = True) -> None:
        self.container = container
        self.scope_by_device = scope_by_device

    def latest(self, device_id: str) -> SensorSnapshot:
        start_time = time.perf_counter()
        device_filter: Optional[str] = device_id if self.scope_by_device else None
        try:
            results = self.container.query_latest(device_filter)
            snapshot = results[0].to_snapshot() if results else None
        except Exception as exc:
            logger.exception(
                "Snapshot query failed",
                extra={"device_id": device_id, "error_type": type(exc).__name__},
            )
            raise BackendFailure("Snapshot query failed.") from exc

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        if snapshot is None:
            logger.info(
                "No snapshot stored",
                extra={"device_id": device_id, "status": 404, "duration_ms": duration_ms},
            )
            raise SnapshotNotFound(device_id)

        logger.info(
            "Snapshot served",
            extra={"device_id": device_id, "status": 200, "duration_ms": duration_ms},
        )
        return snapshot


@lru_cache
def build_default_query_service() -> SnapshotQueryService:
    """Factory that wires the query service with the default container."""
    settings = get_settings()
    return SnapshotQueryService(
        container=build_default_container(),
        scope_by_device=settings.scope_by_device,
    )
