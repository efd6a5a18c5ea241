from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from dashboard.config import DashboardConfig
from dashboard.errors import (
    BackendFailureError,
    NetworkFailureError,
    SnapshotNotFoundError,
    UnauthorizedError,
)

AUTH_FAILURE_STATUSES = frozenset({401, 403})


def bearer_headers(token: Optional[str]) -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


class HttpSnapshotSource:
    """Fetches the latest snapshot from the snapshot service over HTTP."""

    def __init__(self, config: DashboardConfig, client: Optional[httpx.Client] = None) -> None:
        self._config = config
        self._client = client or httpx.Client(
            base_url=config.base_url, timeout=config.request_timeout
        )

    def close(self) -> None:
        self._client.close()

    def fetch_latest(self, device_id: str, token: Optional[str]) -> Dict[str, Any]:
        path = f"/snapshot/{quote(device_id, safe='')}"
        try:
            response = self._client.get(path, headers=bearer_headers(token))
        except httpx.TimeoutException as exc:
            raise NetworkFailureError(
                f"Timed out after {self._config.request_timeout}s waiting for the snapshot service."
            ) from exc
        except httpx.RequestError as exc:
            raise NetworkFailureError("Could not reach the snapshot service.") from exc

        if response.status_code in AUTH_FAILURE_STATUSES:
            raise UnauthorizedError(f"Snapshot request rejected with {response.status_code}.")
        if response.status_code == 404:
            raise SnapshotNotFoundError(
                response.text.strip() or f"no document found for device {device_id}"
            )
        if response.is_error:
            raise BackendFailureError(
                f"Snapshot service answered with status {response.status_code}."
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendFailureError("Snapshot service returned a non-JSON body.") from exc
        if not isinstance(payload, dict):
            raise BackendFailureError("Snapshot service returned an unexpected payload.")
        return payload
