from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_DEVICE_ID = "esp32-garden"
DEFAULT_DATA_SOURCE = "http"
DEFAULT_TIMEOUT = 10.0
DEFAULT_SESSION_PATH = "~/.irrigation-dashboard/session.json"
DEFAULT_DATE_FORMAT = "%d/%m/%Y"
DEFAULT_FIXTURE_DELAY = 0.5

DATA_SOURCES = ("http", "fixture")

_BASE_URL_ENV = "API_BASE_URL"
_DEVICE_ID_ENV = "DASHBOARD_DEVICE_ID"
_DATA_SOURCE_ENV = "DASHBOARD_DATA_SOURCE"
_TIMEOUT_ENV = "DASHBOARD_REQUEST_TIMEOUT"
_SESSION_PATH_ENV = "DASHBOARD_SESSION_PATH"
_DATE_FORMAT_ENV = "DASHBOARD_DATE_FORMAT"
_FIXTURE_DELAY_ENV = "DASHBOARD_FIXTURE_DELAY"
_IRRIGATION_URL_ENV = "DASHBOARD_IRRIGATION_URL"


@dataclass(frozen=True)
class DashboardConfig:
    base_url: str = DEFAULT_BASE_URL
    device_id: str = DEFAULT_DEVICE_ID
    data_source: str = DEFAULT_DATA_SOURCE
    request_timeout: float = DEFAULT_TIMEOUT
    session_path: str = DEFAULT_SESSION_PATH
    date_format: str = DEFAULT_DATE_FORMAT
    fixture_delay: float = DEFAULT_FIXTURE_DELAY
    irrigation_url: Optional[str] = None


def _read_float(value: Optional[str], default: float, allow_zero: bool = False) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if parsed > 0 or (allow_zero and parsed == 0):
        return parsed
    return default


def _read_str(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _read_data_source(value: Optional[str]) -> str:
    candidate = (value or "").strip().lower()
    return candidate if candidate in DATA_SOURCES else DEFAULT_DATA_SOURCE


def load_config(
    base_url: Optional[str] = None,
    device_id: Optional[str] = None,
    data_source: Optional[str] = None,
    request_timeout: Optional[float] = None,
    session_path: Optional[str] = None,
) -> DashboardConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    device = device_id or _read_str(os.getenv(_DEVICE_ID_ENV)) or DEFAULT_DEVICE_ID
    source = _read_data_source(data_source or os.getenv(_DATA_SOURCE_ENV))
    if request_timeout is None:
        request_timeout = _read_float(os.getenv(_TIMEOUT_ENV), DEFAULT_TIMEOUT)
    session = session_path or _read_str(os.getenv(_SESSION_PATH_ENV)) or DEFAULT_SESSION_PATH
    return DashboardConfig(
        base_url=url.rstrip("/"),
        device_id=device,
        data_source=source,
        request_timeout=request_timeout,
        session_path=session,
        date_format=_read_str(os.getenv(_DATE_FORMAT_ENV)) or DEFAULT_DATE_FORMAT,
        fixture_delay=_read_float(
            os.getenv(_FIXTURE_DELAY_ENV), DEFAULT_FIXTURE_DELAY, allow_zero=True
        ),
        irrigation_url=_read_str(os.getenv(_IRRIGATION_URL_ENV)),
    )
