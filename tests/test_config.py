import logging

from engine.config import DEFAULT_LOG_FORMAT, Settings
from engine.exceptions import ForecastDashboardError, SchemaMismatchError
from engine.logging_setup import configure_logging


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("FORECAST_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FORECAST_BRIEFING_MODEL", "gpt-4o")
    monkeypatch.delenv("FORECAST_DATA_SOURCE", raising=False)

    settings = Settings.from_env()

    assert settings.log_level == "DEBUG"
    assert settings.briefing_model == "gpt-4o"
    assert settings.data_source == Settings.data_source
    assert settings.log_format == DEFAULT_LOG_FORMAT


def test_configure_logging_does_not_stack_handlers():
    root = logging.getLogger()
    saved = (root.level, root.handlers[:])
    try:
        configure_logging("debug")
        configure_logging("warning")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved[1]
        root.setLevel(saved[0])


def test_error_formatting():
    err = ForecastDashboardError("boom", code="x", details={"a": 1})
    assert str(err) == "[x] boom"
    assert err.to_dict() == {"error": "ForecastDashboardError", "message": "boom", "code": "x", "details": {"a": 1}}
    assert str(ForecastDashboardError()) == "An error occurred in the forecasting dashboard"

    mismatch = SchemaMismatchError(["date", "sku"], ["date"])
    assert mismatch.missing == ["sku"]
