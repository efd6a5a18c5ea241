"""HTTP route definitions for the service."""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import PlainTextResponse

from app.schemas import SensorSnapshot
from services.snapshot_query import (
    BackendFailure,
    SnapshotNotFound,
    SnapshotQueryService,
    build_default_query_service,
)
from settings import get_settings

GENERIC_FAILURE_MESSAGE = "Internal error while querying the database."

router = APIRouter()


def get_query_service() -> SnapshotQueryService:
    return build_default_query_service()


def require_api_token(authorization: Optional[str] = Header(default=None)) -> None:
    """Enforce a bearer token only when ``SNAPSHOT_API_TOKEN`` is configured."""
    expected = get_settings().api_token
    if expected is None:
        return
    scheme, _, credentials = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(credentials, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.get(
    "/snapshot/{device_id}",
    response_model=SensorSnapshot,
    summary="Fetch the most recent sensor snapshot for a device.",
    dependencies=[Depends(require_api_token)],
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "No snapshot stored for the device."},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "Backing store failure."},
    },
)
async def get_latest_snapshot(
    device_id: str,
    service: SnapshotQueryService = Depends(get_query_service),
):
    try:
        return service.latest(device_id)
    except SnapshotNotFound as exc:
        return PlainTextResponse(exc.message, status_code=status.HTTP_404_NOT_FOUND)
    except BackendFailure:
        return PlainTextResponse(
            GENERIC_FAILURE_MESSAGE,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
