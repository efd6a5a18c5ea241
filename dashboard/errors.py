"""Failures the dashboard can observe while talking to its collaborators."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for failures handled by the dashboard controller."""


class SnapshotNotFoundError(DashboardError):
    """The service has no snapshot for the device yet."""


class BackendFailureError(DashboardError):
    """The service answered with a server error or an unusable body."""


class UnauthorizedError(DashboardError):
    """The session was rejected with 401 or 403."""


class NetworkFailureError(DashboardError):
    """The request could not complete (connection error or timeout)."""


class CommandError(DashboardError):
    """A manual irrigation command was not accepted."""
