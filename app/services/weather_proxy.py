"""
Cache-aside weather proxy orchestrating the provider client and the cache store.

A request for a coordinate pair is answered from the cache when a fresh
entry exists. Otherwise the upstream provider is called, its payload is
normalized into a NormalizedReading, and the serialized reading is handed
back together with a deferred cache write that the host runs after the
response has been sent.
"""

import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from app.config.settings import Settings
from app.models.weather import NormalizedReading
from app.providers.cache.base import CacheStore
from app.providers.cache.factory import create_cache_store
from app.services.weather_client import WeatherClient
from app.utils.exceptions import (
    CacheError,
    ClientInputError,
    ConfigurationError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

CACHE_HIT = "HIT"
CACHE_MISS = "MISS"

INVALID_COORDINATES_MESSAGE = "Valid lat and lon query parameters are required."
OUT_OF_RANGE_MESSAGE = "lat/lon are out of range."
MISSING_CREDENTIAL_MESSAGE = "Worker secret OPENWEATHER_API_KEY is not configured."

DEFAULT_CONDITION = "Unknown"
DEFAULT_ICON = "01d"

BackgroundWrite = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class ProxyResult:
    """Serialized reading plus the cache status it was served with"""

    body: str
    cache_status: str


def parse_coordinate(raw: str | None) -> float:
    """Parse a query parameter as a finite float or reject the request"""
    # float() also accepts digit separators such as "4_1".
    if raw is None or not raw.strip() or "_" in raw:
        raise ClientInputError(INVALID_COORDINATES_MESSAGE)
    try:
        value = float(raw)
    except ValueError as e:
        raise ClientInputError(INVALID_COORDINATES_MESSAGE) from e
    if not math.isfinite(value):
        raise ClientInputError(INVALID_COORDINATES_MESSAGE)
    return value


def validate_coordinates(latitude: float, longitude: float) -> None:
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise ClientInputError(INVALID_COORDINATES_MESSAGE)
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        raise ClientInputError(OUT_OF_RANGE_MESSAGE)


def build_cache_key(latitude: float, longitude: float, schema_version: str) -> str:
    """Cache key from coordinates rounded to 4 decimals and the schema version"""
    return f"weather?lat={latitude:.4f}&lon={longitude:.4f}&v={schema_version}"


def to_iso_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a 'Z' suffix"""
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def normalize_provider_payload(
    source: dict[str, Any], now: datetime | None = None
) -> NormalizedReading:
    """
    Map an upstream payload onto a NormalizedReading.

    Every field tolerates being absent:
    - condition: first entry's description, then its main category, then "Unknown"
    - icon: first entry's icon, then "01d"
    - temperature, humidity, wind speed: 0
    - timezone offset and observation time: None
    """
    main = source.get("main") or {}
    wind = source.get("wind") or {}
    conditions = source.get("weather") or []
    first = conditions[0] if conditions and isinstance(conditions[0], dict) else {}

    condition = first.get("description")
    if condition is None:
        condition = first.get("main")
    if condition is None:
        condition = DEFAULT_CONDITION

    icon = first.get("icon")
    if icon is None:
        icon = DEFAULT_ICON

    temperature = main.get("temp")
    humidity = main.get("humidity")
    wind_speed = wind.get("speed")

    observed_epoch = source.get("dt")
    observed_at = (
        to_iso_timestamp(datetime.fromtimestamp(observed_epoch, tz=timezone.utc))
        if observed_epoch
        else None
    )

    return NormalizedReading(
        temperature_c=temperature if temperature is not None else 0,
        condition=condition,
        icon=icon,
        humidity=humidity if humidity is not None else 0,
        wind_speed_mps=wind_speed if wind_speed is not None else 0,
        timezone_offset_seconds=source.get("timezone"),
        observed_at=observed_at,
        updated_at=to_iso_timestamp(now or datetime.now(timezone.utc)),
    )


class WeatherProxyService:
    """
    Weather proxy handling the cache-aside flow:
    1. Validate coordinates and the provider credential
    2. Serve a fresh cached reading verbatim (HIT)
    3. Otherwise fetch upstream, normalize and return (MISS)
    4. Hand back the cache write as a background task for the host
    """

    def __init__(
        self,
        settings: Settings,
        cache_store: CacheStore | None = None,
        weather_client: WeatherClient | None = None,
    ):
        self.settings = settings
        self._cache_store = (
            cache_store if cache_store is not None else create_cache_store(settings)
        )
        self._weather_client = (
            weather_client if weather_client is not None else WeatherClient(settings)
        )
        self._initialized = False

    async def initialize(self) -> None:
        """Open the upstream client"""
        if self._initialized:
            return

        await self._weather_client.open()
        self._initialized = True
        logger.info("Weather proxy service initialized successfully")

    async def cleanup(self) -> None:
        """Cleanup resources"""
        await self._weather_client.aclose()
        self._initialized = False
        logger.info("Weather proxy service cleanup completed")

    def cache_key(self, latitude: float, longitude: float) -> str:
        return build_cache_key(latitude, longitude, self.settings.cache_schema_version)

    async def get_weather(
        self, latitude: float, longitude: float
    ) -> tuple[ProxyResult, BackgroundWrite | None]:
        """
        Resolve a coordinate pair into a serialized NormalizedReading.

        Returns:
            Tuple of (result, background_write). background_write is None on
            a HIT; on a MISS the caller must await it once the response is
            out, so the cache entry gets stored exactly once.
        """
        validate_coordinates(latitude, longitude)

        if not self.settings.has_provider_credential:
            raise ConfigurationError(MISSING_CREDENTIAL_MESSAGE)

        key = self.cache_key(latitude, longitude)

        cached = await self._check_cache(key)
        if cached is not None:
            logger.info(f"Cache hit for {key}")
            return ProxyResult(body=cached, cache_status=CACHE_HIT), None

        logger.info(f"Cache miss for {key}")
        source = await self._fetch_from_api(latitude, longitude)
        body = normalize_provider_payload(source).to_json()

        async def background_write() -> None:
            await self._store(key, body)

        return ProxyResult(body=body, cache_status=CACHE_MISS), background_write

    async def _check_cache(self, key: str) -> str | None:
        """Look up a cache entry; a failing store counts as a miss"""
        try:
            return await self._cache_store.get(key)
        except CacheError as e:
            logger.warning(f"Cache check failed for {key}: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error checking cache for {key}: {e}")
            return None

    async def _fetch_from_api(self, latitude: float, longitude: float) -> dict[str, Any]:
        try:
            return await self._weather_client.fetch_current_weather(latitude, longitude)
        except (UpstreamError, ConfigurationError):
            raise
        except Exception as e:
            logger.error(f"Unexpected error fetching upstream weather: {e}")
            raise UpstreamError(f"OpenWeatherMap request failed: {str(e)}") from e

    async def _store(self, key: str, body: str) -> None:
        """Runs after the response is sent, so failures are only logged"""
        try:
            await self._cache_store.put(key, body, self.settings.cache_ttl_seconds)
            logger.info(f"Stored cache entry {key}")
        except CacheError as e:
            logger.error(f"Cache write failed for {key}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error writing cache entry {key}: {e}")

    async def health_check(self) -> dict[str, Any]:
        """Health of the upstream client and the cache store"""
        health_status = {
            "service": "healthy",
            "components": {},
            "timestamp": to_iso_timestamp(datetime.now(timezone.utc)),
        }

        try:
            client_healthy = await self._weather_client.health_check()
            health_status["components"]["weather_client"] = {
                "status": "healthy" if client_healthy else "unhealthy"
            }

            cache_healthy = await self._cache_store.health_check()
            health_status["components"]["cache_store"] = {
                "status": "healthy" if cache_healthy else "unhealthy"
            }

            health_status["components"]["provider_credential"] = {
                "status": "healthy"
                if self.settings.has_provider_credential
                else "unhealthy"
            }

            all_healthy = all(
                component["status"] == "healthy"
                for component in health_status["components"].values()
            )
            health_status["service"] = "healthy" if all_healthy else "degraded"

        except Exception as e:
            logger.error(f"Health check failed: {e}")
            health_status["service"] = "unhealthy"
            health_status["error"] = str(e)

        return health_status


async def create_weather_proxy_service(
    settings: Settings, cache_store: CacheStore | None = None
) -> WeatherProxyService:
    """
    Factory function to create and initialize a weather proxy service.

    Usage:
        service = await create_weather_proxy_service(settings)
        try:
            result, background_write = await service.get_weather(41.3, -81.3)
        finally:
            await service.cleanup()
    """
    service = WeatherProxyService(settings, cache_store=cache_store)
    await service.initialize()
    return service
