import logging
from typing import Any

import httpx

from app.config.settings import Settings
from app.utils.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class WeatherClient:
    """
    Async client for the upstream weather provider (OpenWeatherMap current weather)
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.weather_api_timeout),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=20),
                transport=self._transport,
            )

    async def aclose(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> "WeatherClient":
        """Async context manager entry"""
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit"""
        await self.aclose()

    async def fetch_current_weather(
        self, latitude: float, longitude: float
    ) -> dict[str, Any]:
        """
        Fetch the raw provider payload for an exact coordinate pair.

        Raises:
            UpstreamError: the provider answered non-2xx, was unreachable,
                or returned a body that is not a JSON object
        """
        if not self.client:
            raise ConfigurationError(
                "Weather client not initialized. Use async context manager."
            )

        params = {
            "lat": str(latitude),
            "lon": str(longitude),
            "appid": self.settings.openweather_api_key,
            "units": "metric",
        }

        logger.info(f"Fetching upstream weather for lat={latitude} lon={longitude}")

        try:
            response = await self.client.get(
                str(self.settings.weather_api_url), params=params
            )
        except httpx.TimeoutException as e:
            logger.error(f"Upstream request timed out for lat={latitude} lon={longitude}")
            raise UpstreamError(
                "OpenWeatherMap request failed: timed out after "
                f"{self.settings.weather_api_timeout} seconds"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Upstream request error for lat={latitude} lon={longitude}: {e}")
            raise UpstreamError(f"OpenWeatherMap request failed: {str(e)}") from e

        if not response.is_success:
            detail = response.text
            logger.warning(
                f"Upstream returned {response.status_code} for lat={latitude} lon={longitude}"
            )
            raise UpstreamError(
                f"OpenWeatherMap request failed: {response.status_code} {detail}",
                upstream_status=response.status_code,
                response_body=detail,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse upstream JSON: {e}")
            raise UpstreamError(f"OpenWeatherMap request failed: invalid JSON ({e})") from e

        if not isinstance(data, dict):
            raise UpstreamError("OpenWeatherMap request failed: unexpected payload shape")

        return data

    async def health_check(self) -> bool:
        """Report whether the client is ready to send requests"""
        return self.client is not None and not self.client.is_closed
