from __future__ import annotations

from typing import Iterable

from dashboard.config import DEFAULT_TIMEOUT, load_config
from datastore.mock_cosmos import build_default_container
from services.snapshot_query import build_default_query_service
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    container_path = tmp_path / "db.json"

    monkeypatch.setenv("MOCK_COSMOS_CONTAINER_NAME", "custom-container")
    monkeypatch.setenv("MOCK_COSMOS_PERSISTENCE_PATH", str(container_path))
    monkeypatch.setenv("SNAPSHOT_SCOPE_BY_DEVICE", "false")
    monkeypatch.setenv("SNAPSHOT_API_TOKEN", "  secret  ")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    caches = (get_settings, build_default_container, build_default_query_service)
    _clear_caches(caches)

    try:
        settings = get_settings()
        service = build_default_query_service()

        assert settings.api_token == "secret"
        assert settings.log_level == "DEBUG"
        assert service.scope_by_device is False
        assert service.container.name == "custom-container"
        assert service.container.persistence_path == container_path
    finally:
        _clear_caches(caches)


def test_invalid_scope_flag_keeps_default(monkeypatch) -> None:
    monkeypatch.setenv("SNAPSHOT_SCOPE_BY_DEVICE", "sometimes")
    get_settings.cache_clear()

    try:
        assert get_settings().scope_by_device is True
    finally:
        get_settings.cache_clear()


def test_dashboard_config_precedence(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env-host:9000/")
    monkeypatch.setenv("DASHBOARD_DEVICE_ID", "env-device")
    monkeypatch.setenv("DASHBOARD_DATA_SOURCE", "FIXTURE")
    monkeypatch.setenv("DASHBOARD_REQUEST_TIMEOUT", "-3")
    monkeypatch.setenv("DASHBOARD_FIXTURE_DELAY", "0")
    monkeypatch.setenv("DASHBOARD_IRRIGATION_URL", "  ")

    from_env = load_config()
    explicit = load_config(base_url="http://cli-host", device_id="cli-device", request_timeout=4.0)

    assert from_env.base_url == "http://env-host:9000"
    assert from_env.device_id == "env-device"
    assert from_env.data_source == "fixture"
    assert from_env.request_timeout == DEFAULT_TIMEOUT
    assert from_env.fixture_delay == 0
    assert from_env.irrigation_url is None
    assert explicit.base_url == "http://cli-host"
    assert explicit.device_id == "cli-device"
    assert explicit.request_timeout == 4.0
