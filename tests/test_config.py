"""Configuration tests."""

from fastapi_dhltrack.config import DHL_TRACKING_URL, TrackerConfig


def test_defaults() -> None:
    config = TrackerConfig()
    assert config.dhl_api_url == DHL_TRACKING_URL
    assert config.request_timeout_seconds == 15.0
    assert config.request_interval_seconds == 1.2
    assert config.shipment_list_limit == 100
    assert config.log_list_limit == 100
    assert config.use_mock_client is False


def test_env_prefix(monkeypatch) -> None:
    monkeypatch.setenv("DHLTRACK_DHL_API_KEY", "abc")
    monkeypatch.setenv("DHLTRACK_REQUEST_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("DHLTRACK_USE_MOCK_CLIENT", "true")

    config = TrackerConfig()
    assert config.dhl_api_key == "abc"
    assert config.request_interval_seconds == 2.5
    assert config.use_mock_client is True


def test_custom_settings() -> None:
    config = TrackerConfig(
        request_interval_seconds=0,
        log_list_limit=10,
        database_url="sqlite+aiosqlite:///:memory:",
    )
    assert config.request_interval_seconds == 0
    assert config.log_list_limit == 10
    assert config.database_url == "sqlite+aiosqlite:///:memory:"
