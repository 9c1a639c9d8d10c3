"""Tracker configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

DHL_TRACKING_URL = "https://api-eu.dhl.com/track/shipments"


class TrackerConfig(BaseSettings):
    """Runtime config for the shipment tracker."""

    model_config = SettingsConfigDict(env_prefix="DHLTRACK_")

    dhl_api_key: str = ""
    dhl_api_url: str = DHL_TRACKING_URL
    request_timeout_seconds: float = 15.0
    request_interval_seconds: float = 1.2
    shipment_list_limit: int = 100
    log_list_limit: int = 100
    use_mock_client: bool = False
    database_url: str = "sqlite+aiosqlite:///./dhltrack.db"
