"""Configuration and environment settings for the Finance Tracker."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the Finance Tracker API and client."""

    database_url: str = "sqlite:///finance.db"
    client_url: str = "http://localhost:5173"
    server_host: str = "127.0.0.1"
    port: int = 5000
    rate_limit_requests: int = 300
    rate_limit_window_seconds: int = 15 * 60
    log_level: str = "INFO"
    api_base_url: str = "http://localhost:5000"
    request_timeout: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def rate_limit(self) -> str:
        """Rate limit expressed in the `limits` notation, e.g. ``300 per 900 seconds``."""
        return f"{self.rate_limit_requests} per {self.rate_limit_window_seconds} seconds"


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
