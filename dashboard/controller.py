"""Dashboard state machine.

States move ``unauthenticated`` (terminal) or ``loading`` to ``loaded`` or
``error``. Display fields are written only after a successful fetch; a failed
fetch leaves whatever is on screen untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from enum import Enum
from typing import Callable, Optional, Protocol

from dashboard.errors import (
    BackendFailureError,
    CommandError,
    NetworkFailureError,
    SnapshotNotFoundError,
    UnauthorizedError,
)
from dashboard.formatting import DEFAULT_DATE_FORMAT, DashboardFields, reconcile
from dashboard.irrigation import IrrigationCommandIssuer
from dashboard.session import Session
from dashboard.sources import SnapshotSource

logger = logging.getLogger(__name__)

SESSION_EXPIRED_NOTICE = "Session expired or not authorized. Please log in again."
NOT_FOUND_NOTICE = "No readings have been received from device {device_id} yet."
BACKEND_FAILURE_NOTICE = "Could not load the dashboard data."
NETWORK_FAILURE_NOTICE = "Connection error while loading the dashboard."
WATERING_PROMPT = "Start manual watering now?"
LOGOUT_PROMPT = "Are you sure you want to log out?"


class DashboardState(str, Enum):
    unauthenticated = "unauthenticated"
    loading = "loading"
    loaded = "loaded"
    error = "error"


class DashboardView(Protocol):
    def render(self, fields: DashboardFields) -> None: ...

    def notify(self, message: str) -> None: ...

    def confirm(self, message: str) -> bool: ...

    def redirect_to_login(self) -> None: ...


class DashboardController:
    """Gates the dashboard on the session and keeps the view in sync."""

    def __init__(
        self,
        session: Session,
        source: SnapshotSource,
        issuer: IrrigationCommandIssuer,
        view: DashboardView,
        device_id: str,
        date_format: str = DEFAULT_DATE_FORMAT,
        clock: Optional[Callable[[], datetime]] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.session = session
        self.source = source
        self.issuer = issuer
        self.view = view
        self.device_id = device_id
        self.date_format = date_format
        self._clock = clock
        self._tz = tz
        self._state: Optional[DashboardState] = None
        self._fetching = False
        self._expiry_notified = False
        self.fields: Optional[DashboardFields] = None

    @property
    def state(self) -> Optional[DashboardState]:
        return self._state

    def load(self) -> DashboardState:
        """Entry point on page load: redirect or fetch."""
        if not self.session.token():
            self._transition(DashboardState.unauthenticated)
            self.view.redirect_to_login()
            return self._state
        return self.refresh()

    def refresh(self) -> DashboardState:
        if self._state is DashboardState.unauthenticated:
            return self._state
        if self._fetching:
            raise RuntimeError("A snapshot request is already in flight.")

        self._fetching = True
        self._transition(DashboardState.loading)
        try:
            payload = self.source.fetch_latest(self.device_id, self.session.token())
        except UnauthorizedError:
            self._expire_session()
            return self._state
        except SnapshotNotFoundError:
            return self._fail(NOT_FOUND_NOTICE.format(device_id=self.device_id), "not_found")
        except BackendFailureError:
            return self._fail(BACKEND_FAILURE_NOTICE, "backend_failure")
        except NetworkFailureError:
            return self._fail(NETWORK_FAILURE_NOTICE, "network_failure")
        finally:
            self._fetching = False

        now = self._clock() if self._clock else None
        self.fields = reconcile(
            payload, now=now, tz=self._tz, date_format=self.date_format
        )
        self.view.render(self.fields)
        self._transition(DashboardState.loaded)
        return self._state

    def trigger_manual_watering(self, confirmed: bool = False) -> DashboardState:
        """Issue the manual command, then always re-sync from the backend."""
        if self._state not in (DashboardState.loaded, DashboardState.error):
            return self._state
        if not confirmed and not self.view.confirm(WATERING_PROMPT):
            return self._state

        try:
            ack = self.issuer.trigger(self.device_id)
        except UnauthorizedError:
            self._expire_session()
            return self._state
        except CommandError as exc:
            logger.warning(
                "Manual watering failed",
                extra={"device_id": self.device_id, "reason": str(exc)},
            )
            self.view.notify(f"Manual watering failed: {exc}")
        else:
            self.view.notify(ack.message)
        return self.refresh()

    def logout(self, confirmed: bool = False) -> DashboardState:
        if not confirmed and not self.view.confirm(LOGOUT_PROMPT):
            return self._state
        self.session.clear()
        self._transition(DashboardState.unauthenticated)
        self.view.redirect_to_login()
        return self._state

    def _fail(self, notice: str, reason: str) -> DashboardState:
        logger.warning(
            "Snapshot fetch failed",
            extra={"device_id": self.device_id, "reason": reason},
        )
        self._transition(DashboardState.error)
        self.view.notify(notice)
        return self._state

    def _expire_session(self) -> None:
        self.session.clear()
        self._transition(DashboardState.unauthenticated)
        if not self._expiry_notified:
            self._expiry_notified = True
            self.view.notify(SESSION_EXPIRED_NOTICE)
        self.view.redirect_to_login()

    def _transition(self, state: DashboardState) -> None:
        logger.debug(
            "Dashboard state change",
            extra={"device_id": self.device_id, "state": state.value},
        )
        self._state = state
