"""Manual irrigation command issuers.

No command protocol exists on the device side yet. The simulated issuer
acknowledges immediately; the HTTP issuer posts to a configured endpoint.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

import httpx

from dashboard.client import AUTH_FAILURE_STATUSES, bearer_headers
from dashboard.config import DashboardConfig
from dashboard.errors import CommandError, UnauthorizedError
from dashboard.session import Session


@dataclass(frozen=True)
class IrrigationAck:
    device_id: str
    message: str
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class IrrigationCommandIssuer(Protocol):
    def trigger(self, device_id: str) -> IrrigationAck:
        """Return an acknowledgment or raise :class:`CommandError`."""
        ...

    def close(self) -> None: ...


class SimulatedIrrigationIssuer:

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay

    def close(self) -> None:
        return None

    def trigger(self, device_id: str) -> IrrigationAck:
        if self.delay:
            time.sleep(self.delay)
        return IrrigationAck(
            device_id=device_id,
            message="Manual watering command sent (simulated).",
        )


class HttpIrrigationIssuer:

    def __init__(
        self,
        url: str,
        token_provider: Callable[[], Optional[str]],
        timeout: float,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self._token_provider = token_provider
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def trigger(self, device_id: str) -> IrrigationAck:
        try:
            response = self._client.post(
                self.url,
                json={"deviceId": device_id},
                headers=bearer_headers(self._token_provider()),
            )
        except httpx.HTTPError as exc:
            raise CommandError("Connection error while requesting manual watering.") from exc

        if response.status_code in AUTH_FAILURE_STATUSES:
            raise UnauthorizedError(
                f"Manual watering rejected with {response.status_code}."
            )
        if response.is_error:
            raise CommandError(self._error_message(response))
        return IrrigationAck(device_id=device_id, message="Manual watering command sent.")

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return "Unknown error."
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return "Unknown error."


def build_irrigation_issuer(
    config: DashboardConfig, session: Session
) -> IrrigationCommandIssuer:
    if config.irrigation_url:
        return HttpIrrigationIssuer(
            url=config.irrigation_url,
            token_provider=session.token,
            timeout=config.request_timeout,
        )
    return SimulatedIrrigationIssuer()
