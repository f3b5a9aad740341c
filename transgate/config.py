"""Application configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "AI Translation Gateway"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    # Overrides the port from the models config file when set (PORT=9000)
    port: Optional[int] = None
    default_port: int = 8080
    keep_alive_timeout: int = 120  # seconds
    shutdown_timeout: float = 5.0  # drain deadline after an interrupt

    # Provider configuration file (created with defaults when missing)
    models_config_file: Path = Path("./config.json")

    # Request limits
    max_request_body_size: int = 1024 * 1024  # 1MB
    request_timeout: float = 30.0  # ceiling for one translation request

    # Upstream transport
    upstream_timeout: float = 25.0
    upstream_max_connections: int = 10
    upstream_keepalive_expiry: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def resolve_port(self, configured_port: Optional[int] = None) -> int:
        """Pick the listen port: environment, then config file, then default."""
        if self.port is not None:
            return self.port
        if configured_port is not None:
            return configured_port
        return self.default_port


@lru_cache
def get_settings() -> Settings:
    return Settings()
