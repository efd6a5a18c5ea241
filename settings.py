from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_CONTAINER_NAME_ENV = "MOCK_COSMOS_CONTAINER_NAME"
_CONTAINER_PATH_ENV = "MOCK_COSMOS_PERSISTENCE_PATH"
_SCOPE_BY_DEVICE_ENV = "SNAPSHOT_SCOPE_BY_DEVICE"
_API_TOKEN_ENV = "SNAPSHOT_API_TOKEN"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    container_name: str
    container_persistence_path: Optional[str]
    scope_by_device: bool
    api_token: Optional[str]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        container_name=_read_str_env(_CONTAINER_NAME_ENV, "readings"),
        container_persistence_path=_read_optional_env(
            _CONTAINER_PATH_ENV, "./tmp/mock_cosmos.json"
        ),
        scope_by_device=_read_bool_env(_SCOPE_BY_DEVICE_ENV, True),
        api_token=_read_optional_env(_API_TOKEN_ENV, None),
        log_level=_read_log_level("INFO"),
    )
