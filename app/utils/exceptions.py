from typing import Any


class WeatherAPIError(Exception):
    """Base exception for weather API related errors"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = 500
        self.error_code = "WEATHER_API_ERROR"


class ClientInputError(WeatherAPIError):
    """Exception raised for a bad method, route or coordinate pair"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = "CLIENT_INPUT_ERROR"


class ConfigurationError(WeatherAPIError):
    """Exception raised when configuration is invalid"""

    def __init__(self, message: str):
        super().__init__(message)
        self.error_code = "CONFIGURATION_ERROR"


class UpstreamError(WeatherAPIError):
    """Exception raised when the upstream weather provider fails or is unreachable"""

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = 502
        self.error_code = "UPSTREAM_ERROR"
        self.upstream_status = upstream_status
        self.response_body = response_body


class CacheError(WeatherAPIError):
    """Exception raised when cache operations fail"""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.error_code = "CACHE_ERROR"
        self.operation = operation


class PerLocationFetchError(WeatherAPIError):
    """Exception raised when the proxy answers a single location's request badly"""

    def __init__(self, location_id: str, message: str):
        super().__init__(message)
        self.error_code = "LOCATION_FETCH_ERROR"
        self.location_id = location_id
