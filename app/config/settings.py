from typing import Literal

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Office Weather Proxy"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: Literal["development", "production"] = "development"

    host: str = "0.0.0.0"
    port: int = 8787
    workers: int = 1

    openweather_api_key: str = Field(
        default="", description="OpenWeatherMap API key (proxy secret)"
    )
    weather_api_url: HttpUrl = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        description="Weather API base URL",
    )
    weather_api_timeout: int = Field(
        default=30, description="Weather API request timeout in seconds"
    )

    cache_ttl_seconds: int = Field(default=600, description="Cache TTL in seconds")
    cache_schema_version: str = Field(
        default="2",
        description="Cache key version tag; bump to invalidate every entry",
    )

    provider_mode: Literal["aws", "local"] = Field(
        default="local",
        description="Provider mode: aws for DynamoDB cache, local for in-memory cache",
    )

    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None

    dynamodb_cache_table_name: str = Field(
        default="weather-cache", description="DynamoDB table used as the edge cache"
    )

    proxy_base_url: str = Field(
        default="http://localhost:8787",
        description="Base URL of the weather proxy used by the fleet fetcher",
    )
    refresh_interval_seconds: int = Field(
        default=600, description="Periodic fleet refresh interval in seconds"
    )
    fleet_request_timeout_seconds: float | None = Field(
        default=30.0,
        description="Per-location proxy request timeout; None waits indefinitely",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_aws_services(self) -> bool:
        return self.provider_mode == "aws"

    @property
    def use_local_services(self) -> bool:
        return self.provider_mode == "local"

    @property
    def has_provider_credential(self) -> bool:
        return bool(self.openweather_api_key and self.openweather_api_key.strip())


settings = Settings()
