import pytest

from app.config.settings import Settings
from app.providers.cache.memory import InMemoryCacheStore


class RecordingCacheStore(InMemoryCacheStore):
    """In-memory cache store that records every get/put"""

    def __init__(self) -> None:
        super().__init__()
        self.get_calls: list[str] = []
        self.put_calls: list[tuple[str, str, int]] = []

    async def get(self, key: str) -> str | None:
        self.get_calls.append(key)
        return await super().get(key)

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.put_calls.append((key, value, ttl_seconds))
        await super().put(key, value, ttl_seconds)


@pytest.fixture
def test_settings():
    """Settings with a provider credential and the default cache policy"""
    return Settings(
        openweather_api_key="test-api-key",
        cache_ttl_seconds=600,
        cache_schema_version="2",
        provider_mode="local",
        proxy_base_url="http://proxy.test",
    )


@pytest.fixture
def cache_store():
    return RecordingCacheStore()


@pytest.fixture
def sample_provider_payload():
    """Sample current-weather payload from OpenWeatherMap"""
    return {
        "weather": [{"main": "Clear", "description": "clear sky", "icon": "01d"}],
        "wind": {"speed": 2.6, "deg": 180},
        "main": {"temp": 25.2, "humidity": 36, "pressure": 1013},
        "dt": 1700000000,
        "timezone": -18000,
    }
