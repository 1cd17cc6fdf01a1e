from __future__ import annotations

from typing import Iterable

from datastore.alert_store import build_default_alert_store
from services.pipeline import build_default_pipeline
from settings import get_settings
from storage.sensor_store import build_default_sensor_store


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


_CACHES = (
    get_settings,
    build_default_sensor_store,
    build_default_alert_store,
    build_default_pipeline,
)


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("INFLUX_URL", "https://influx.example.com:8181/")
    monkeypatch.setenv("INFLUX_SENSOR_TOKEN", "sensor-token")
    monkeypatch.setenv("INFLUX_ALERTS_TOKEN", "alerts-token")
    monkeypatch.setenv("INFLUX_SENSOR_DB", "mesh")
    monkeypatch.setenv("INFLUX_ALERTS_DB", "mesh_alerting")
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    _clear_caches(_CACHES)

    try:
        settings = get_settings()
        pipeline = build_default_pipeline()

        assert settings.influx_url == "https://influx.example.com:8181"
        assert settings.log_level == "DEBUG"

        sensor_factory = pipeline.gateway._client_factory
        assert pipeline.gateway.database == "mesh"
        assert sensor_factory.keywords["host"] == "https://influx.example.com:8181"
        assert sensor_factory.keywords["token"] == "sensor-token"

        alert_factory = pipeline.alert_store._client_factory
        assert pipeline.alert_store.database == "mesh_alerting"
        assert alert_factory.keywords["token"] == "alerts-token"
        assert alert_factory.keywords["database"] == "mesh_alerting"
    finally:
        _clear_caches(_CACHES)


def test_defaults_apply_for_blank_values(monkeypatch) -> None:
    monkeypatch.setenv("INFLUX_SENSOR_DB", "   ")
    monkeypatch.setenv("INFLUX_SENSOR_TOKEN", "")
    monkeypatch.delenv("INFLUX_URL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    _clear_caches(_CACHES)

    try:
        settings = get_settings()

        assert settings.sensor_database == "mesh_sensors"
        assert settings.sensor_token is None
        assert settings.influx_url == "http://localhost:8181"
        assert settings.log_level == "INFO"
    finally:
        _clear_caches(_CACHES)
