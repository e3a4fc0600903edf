import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from app.config.settings import Settings
from app.providers.cache.memory import InMemoryCacheStore
from app.services.weather_client import WeatherClient
from app.services.weather_proxy import (
    CACHE_HIT,
    CACHE_MISS,
    WeatherProxyService,
    build_cache_key,
    normalize_provider_payload,
    parse_coordinate,
)
from app.utils.exceptions import (
    CacheError,
    ClientInputError,
    ConfigurationError,
    UpstreamError,
)


class TestCacheKey:
    """Test suite for cache key derivation"""

    def test_rounds_to_four_decimals(self):
        assert build_cache_key(41.27814, -81.3289235, "2") == (
            "weather?lat=41.2781&lon=-81.3289&v=2"
        )

    def test_differences_beyond_fourth_decimal_share_a_key(self):
        assert build_cache_key(41.30001, -81.30004, "2") == build_cache_key(
            41.30004, -81.29996, "2"
        )

    def test_schema_version_changes_key(self):
        assert build_cache_key(41.3, -81.3, "2") != build_cache_key(41.3, -81.3, "3")


class TestCoordinateParsing:
    """Test suite for query parameter parsing"""

    def test_parses_finite_numbers(self):
        assert parse_coordinate("41.3") == 41.3
        assert parse_coordinate(" -81.3 ") == -81.3
        assert parse_coordinate("0") == 0.0

    @pytest.mark.parametrize(
        "raw", [None, "", "   ", "abc", "nan", "inf", "-Infinity", "4_1", "-81_3"]
    )
    def test_rejects_invalid_values(self, raw):
        with pytest.raises(ClientInputError) as exc_info:
            parse_coordinate(raw)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Valid lat and lon query parameters are required."


class TestNormalization:
    """Test suite for provider payload normalization"""

    def test_full_payload(self, sample_provider_payload):
        now = datetime(2023, 11, 14, 22, 15, 2, 417000, tzinfo=timezone.utc)

        reading = normalize_provider_payload(sample_provider_payload, now=now)

        assert reading.temperature_c == 25.2
        assert reading.condition == "clear sky"
        assert reading.icon == "01d"
        assert reading.humidity == 36
        assert reading.wind_speed_mps == 2.6
        assert reading.timezone_offset_seconds == -18000
        assert reading.observed_at == "2023-11-14T22:13:20.000Z"
        assert reading.updated_at == "2023-11-14T22:15:02.417Z"

    def test_empty_payload_uses_fallbacks(self):
        reading = normalize_provider_payload({})

        assert reading.temperature_c == 0
        assert reading.condition == "Unknown"
        assert reading.icon == "01d"
        assert reading.humidity == 0
        assert reading.wind_speed_mps == 0
        assert reading.timezone_offset_seconds is None
        assert reading.observed_at is None
        assert reading.updated_at.endswith("Z")

    def test_condition_falls_back_to_main_category(self):
        reading = normalize_provider_payload({"weather": [{"main": "Clouds", "icon": "03n"}]})

        assert reading.condition == "Clouds"
        assert reading.icon == "03n"

    def test_empty_condition_list(self):
        assert normalize_provider_payload({"weather": []}).condition == "Unknown"

    def test_serialized_with_camel_case_keys(self, sample_provider_payload):
        payload = json.loads(normalize_provider_payload(sample_provider_payload).to_json())

        assert set(payload) == {
            "temperatureC",
            "condition",
            "icon",
            "humidity",
            "windSpeedMps",
            "timezoneOffsetSeconds",
            "observedAt",
            "updatedAt",
        }


class TestWeatherProxyService:
    """Test suite for WeatherProxyService"""

    @pytest.fixture
    def mock_weather_client(self, sample_provider_payload):
        client = AsyncMock(spec=WeatherClient)
        client.fetch_current_weather.return_value = sample_provider_payload
        return client

    @pytest.fixture
    def service(self, test_settings, cache_store, mock_weather_client):
        return WeatherProxyService(
            test_settings, cache_store=cache_store, weather_client=mock_weather_client
        )

    @pytest.mark.parametrize("provider_mode", ["local", "aws"])
    def test_injected_empty_store_is_used(self, provider_mode, mock_weather_client):
        settings = Settings(openweather_api_key="key", provider_mode=provider_mode)
        store = InMemoryCacheStore()

        service = WeatherProxyService(
            settings, cache_store=store, weather_client=mock_weather_client
        )

        assert len(store) == 0
        assert service._cache_store is store
        assert service._weather_client is mock_weather_client

    async def test_cache_miss_fetches_and_defers_store(
        self, service, cache_store, mock_weather_client
    ):
        result, background_write = await service.get_weather(41.3, -81.3)

        assert result.cache_status == CACHE_MISS
        mock_weather_client.fetch_current_weather.assert_called_once_with(41.3, -81.3)
        assert background_write is not None
        assert cache_store.put_calls == []

        await background_write()

        assert len(cache_store.put_calls) == 1
        key, value, ttl = cache_store.put_calls[0]
        assert key == "weather?lat=41.3000&lon=-81.3000&v=2"
        assert value == result.body
        assert ttl == 600

    async def test_cache_hit_returns_stored_body(
        self, service, cache_store, mock_weather_client
    ):
        miss, background_write = await service.get_weather(41.3, -81.3)
        await background_write()

        hit, hit_write = await service.get_weather(41.30004, -81.29996)

        assert hit.cache_status == CACHE_HIT
        assert hit.body == miss.body
        assert hit_write is None
        assert mock_weather_client.fetch_current_weather.call_count == 1
        assert len(cache_store.put_calls) == 1

    async def test_out_of_range_rejected_before_upstream(
        self, service, mock_weather_client
    ):
        for lat, lon in [(90.5, 0), (-91, 0), (0, 180.01), (0, -181)]:
            with pytest.raises(ClientInputError) as exc_info:
                await service.get_weather(lat, lon)
            assert exc_info.value.message == "lat/lon are out of range."

        mock_weather_client.fetch_current_weather.assert_not_called()

    async def test_boundaries_are_valid(self, service):
        result, _ = await service.get_weather(90, -180)

        assert result.cache_status == CACHE_MISS

    async def test_missing_credential(self, cache_store, mock_weather_client):
        service = WeatherProxyService(
            Settings(openweather_api_key=""),
            cache_store=cache_store,
            weather_client=mock_weather_client,
        )

        with pytest.raises(ConfigurationError) as exc_info:
            await service.get_weather(41.3, -81.3)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == (
            "Worker secret OPENWEATHER_API_KEY is not configured."
        )
        mock_weather_client.fetch_current_weather.assert_not_called()
        assert cache_store.get_calls == []

    async def test_upstream_failure_is_not_cached(
        self, service, cache_store, mock_weather_client, sample_provider_payload
    ):
        mock_weather_client.fetch_current_weather.side_effect = [
            UpstreamError("OpenWeatherMap request failed: 503 busy", upstream_status=503),
            sample_provider_payload,
        ]

        with pytest.raises(UpstreamError):
            await service.get_weather(41.3, -81.3)
        assert cache_store.put_calls == []

        result, _ = await service.get_weather(41.3, -81.3)

        assert result.cache_status == CACHE_MISS
        assert mock_weather_client.fetch_current_weather.call_count == 2

    async def test_unexpected_client_error_becomes_upstream_error(
        self, service, mock_weather_client
    ):
        mock_weather_client.fetch_current_weather.side_effect = KeyError("boom")

        with pytest.raises(UpstreamError):
            await service.get_weather(41.3, -81.3)

    async def test_cache_read_failure_degrades_to_miss(
        self, test_settings, mock_weather_client
    ):
        failing_store = AsyncMock()
        failing_store.get.side_effect = CacheError("unreachable", operation="get")
        service = WeatherProxyService(
            test_settings, cache_store=failing_store, weather_client=mock_weather_client
        )

        result, _ = await service.get_weather(41.3, -81.3)

        assert result.cache_status == CACHE_MISS
        mock_weather_client.fetch_current_weather.assert_called_once()

    async def test_cache_write_failure_is_contained(
        self, test_settings, mock_weather_client
    ):
        failing_store = AsyncMock()
        failing_store.get.return_value = None
        failing_store.put.side_effect = CacheError("throttled", operation="put")
        service = WeatherProxyService(
            test_settings, cache_store=failing_store, weather_client=mock_weather_client
        )

        _, background_write = await service.get_weather(41.3, -81.3)
        await background_write()

        failing_store.put.assert_awaited_once()

    async def test_health_check(self, service, mock_weather_client):
        mock_weather_client.health_check.return_value = True

        health_status = await service.health_check()

        assert health_status["service"] == "healthy"
        assert health_status["components"]["cache_store"]["status"] == "healthy"

    async def test_health_check_exception_handling(self, service, mock_weather_client):
        mock_weather_client.health_check.side_effect = Exception("Health check failed")

        health_status = await service.health_check()

        assert health_status["service"] == "unhealthy"
        assert "error" in health_status

    async def test_initialize_and_cleanup(self, service, mock_weather_client):
        await service.initialize()
        assert service._initialized
        mock_weather_client.open.assert_awaited_once()

        await service.cleanup()
        assert not service._initialized
        mock_weather_client.aclose.assert_awaited_once()
