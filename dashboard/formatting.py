"""Reconciliation of a snapshot payload into display strings.

Everything here is pure: the clock and the timezone are parameters so the
rules can be checked without a network or a real wall clock.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping, Optional

NOT_AVAILABLE = "N/A"
STATUS_PLACEHOLDER = "Loading..."
TODAY_PREFIX = "Today"
DEFAULT_DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M"


@dataclass(slots=True, frozen=True)
class DashboardFields:
    """Display values for every field on the dashboard."""

    general_status: str
    soil_humidity: str
    temperature: str
    air_humidity: str
    last_watering: str
    last_reading: str


def local_timezone() -> tzinfo:
    zone = datetime.now().astimezone().tzinfo
    return zone if zone is not None else timezone.utc


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Return an aware datetime for ``value`` or ``None`` when it is unusable.

    Accepts datetimes, ISO-8601 strings (``Z`` suffix included) and epoch
    seconds. Naive values are taken as UTC.
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return None
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(
    value: Any,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """Render ``Today, HH:MM`` for the current local day, else ``<date> HH:MM``."""
    moment = parse_timestamp(value)
    if moment is None:
        return NOT_AVAILABLE

    zone = tz or local_timezone()
    try:
        local = moment.astimezone(zone)
    except (OverflowError, ValueError):
        return NOT_AVAILABLE
    current = (now or datetime.now(zone)).astimezone(zone)
    time_part = local.strftime(TIME_FORMAT)
    if local.date() == current.date():
        return f"{TODAY_PREFIX}, {time_part}"
    return f"{local.strftime(date_format)} {time_part}"


def _coerce_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def format_measurement(value: Any, unit: str) -> str:
    """Render a measurement with its unit, using zero when it is missing."""
    number = _coerce_number(value)
    if number.is_integer():
        return f"{int(number)}{unit}"
    return f"{number:g}{unit}"


def format_status(value: Any) -> str:
    if value is None:
        return STATUS_PLACEHOLDER
    text = str(value).strip()
    return text or STATUS_PLACEHOLDER


def reconcile(
    payload: Mapping[str, Any],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> DashboardFields:
    """Map a snapshot payload onto the dashboard fields."""
    zone = tz or local_timezone()
    current = now or datetime.now(zone)
    reading_time = payload.get("timestamp")
    if reading_time is None:
        reading_time = payload.get("lastReading")

    return DashboardFields(
        general_status=format_status(payload.get("generalStatus")),
        soil_humidity=format_measurement(payload.get("soilHumidity"), "%"),
        temperature=format_measurement(payload.get("temperature"), "°C"),
        air_humidity=format_measurement(payload.get("airHumidity"), "%"),
        last_watering=format_timestamp(
            payload.get("lastWatering"), now=current, tz=zone, date_format=date_format
        ),
        last_reading=format_timestamp(
            reading_time, now=current, tz=zone, date_format=date_format
        ),
    )
