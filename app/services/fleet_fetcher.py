"""
Fan-out weather fetcher for a fleet of office locations.

Every refresh cycle issues one proxy request per location concurrently,
waits for all of them to settle and then publishes the cycle's results by
replacing the weather and error maps wholesale. Overlapping cycles are not
deduplicated: whichever cycle finishes last owns the published maps.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from app.config.settings import Settings
from app.models.weather import DisplayReading, FetchState, Location, NormalizedReading
from app.services.units import to_display_reading
from app.utils.exceptions import ConfigurationError, PerLocationFetchError

logger = logging.getLogger(__name__)

UNKNOWN_FETCH_ERROR = "Unknown weather fetch error"

FetchOutcome = tuple[str, DisplayReading | None, str | None]


class FleetWeatherFetcher:
    """
    Client-side orchestrator querying the weather proxy for every location.

    Use as an async context manager; `start()` runs the first refresh and
    schedules the periodic one, `refresh()` can be called at any time.
    """

    def __init__(
        self,
        settings: Settings,
        locations: Sequence[Location],
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.locations = list(locations)
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

        self._weather_by_location: dict[str, DisplayReading] = {}
        self._errors_by_location: dict[str, str] = {}
        self._loading_by_location: dict[str, bool] = {}
        self._is_initial_loading = True

        # Cycles currently fetching each location id.
        self._pending_by_location: dict[str, int] = {}
        self._cycles_completed = 0
        self._periodic_task: asyncio.Task | None = None

    async def __aenter__(self) -> "FleetWeatherFetcher":
        """Async context manager entry"""
        if self.client is None:
            timeout = self.settings.fleet_request_timeout_seconds
            self.client = httpx.AsyncClient(
                base_url=self.settings.proxy_base_url,
                timeout=httpx.Timeout(timeout),
                transport=self._transport,
            )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit"""
        await self.stop()
        if self.client:
            await self.client.aclose()
            self.client = None

    @property
    def weather_by_location(self) -> dict[str, DisplayReading]:
        return dict(self._weather_by_location)

    @property
    def errors_by_location(self) -> dict[str, str]:
        return dict(self._errors_by_location)

    @property
    def loading_by_location(self) -> dict[str, bool]:
        return dict(self._loading_by_location)

    @property
    def is_initial_loading(self) -> bool:
        return self._is_initial_loading

    @property
    def cycles_completed(self) -> int:
        return self._cycles_completed

    def snapshot(self) -> FetchState:
        """Copy of the current observable state"""
        return FetchState(
            weather_by_location=dict(self._weather_by_location),
            errors_by_location=dict(self._errors_by_location),
            loading_by_location=dict(self._loading_by_location),
            is_initial_loading=self._is_initial_loading,
        )

    async def refresh(self, locations: Sequence[Location] | None = None) -> None:
        """
        Run one refresh cycle over every location.

        Prior weather and error maps stay visible while the cycle runs; they
        are replaced, not merged, once every request has settled.
        """
        if self.client is None:
            raise ConfigurationError(
                "Fleet fetcher not started. Use async context manager."
            )

        targets = list(locations) if locations is not None else self.locations
        self._begin_loading(targets)

        logger.info(f"Refreshing weather for {len(targets)} locations")

        try:
            outcomes = await asyncio.gather(
                *(self._fetch_location(location) for location in targets)
            )
        finally:
            # Also runs on cancellation, so no flag stays stuck at True.
            self._end_loading(targets)

        next_weather: dict[str, DisplayReading] = {}
        next_errors: dict[str, str] = {}
        for location_id, reading, error in outcomes:
            if reading is not None:
                next_weather[location_id] = reading
            else:
                next_errors[location_id] = error or UNKNOWN_FETCH_ERROR

        # Single synchronous step: no other cycle can interleave here.
        self._weather_by_location = next_weather
        self._errors_by_location = next_errors
        self._is_initial_loading = False
        self._cycles_completed += 1

        logger.info(
            f"Weather refresh finished: {len(next_weather)} ok, {len(next_errors)} failed"
        )

    def _begin_loading(self, targets: Sequence[Location]) -> None:
        for location in targets:
            pending = self._pending_by_location.get(location.id, 0) + 1
            self._pending_by_location[location.id] = pending
            self._loading_by_location[location.id] = True

    def _end_loading(self, targets: Sequence[Location]) -> None:
        """A location stops loading once no cycle is still fetching it"""
        for location in targets:
            pending = self._pending_by_location.get(location.id, 0) - 1
            if pending > 0:
                self._pending_by_location[location.id] = pending
            else:
                self._pending_by_location.pop(location.id, None)
                self._loading_by_location[location.id] = False

    async def _fetch_location(self, location: Location) -> FetchOutcome:
        """Fetch one location; every failure becomes that location's error string"""
        try:
            reading = await self._request_reading(location)
            return location.id, to_display_reading(reading), None
        except PerLocationFetchError as e:
            logger.warning(f"Weather fetch failed for {location.id}: {e.message}")
            return location.id, None, e.message
        except httpx.TimeoutException:
            message = (
                "Request timed out after "
                f"{self.settings.fleet_request_timeout_seconds} seconds"
            )
            logger.warning(f"Weather fetch failed for {location.id}: {message}")
            return location.id, None, message
        except Exception as e:
            message = str(e) or UNKNOWN_FETCH_ERROR
            logger.warning(f"Weather fetch failed for {location.id}: {message}")
            return location.id, None, message

    async def _request_reading(self, location: Location) -> NormalizedReading:
        response = await self.client.get(
            "/weather",
            params={"lat": str(location.latitude), "lon": str(location.longitude)},
            headers={"Accept": "application/json"},
        )

        if not response.is_success:
            raise PerLocationFetchError(
                location.id, f"Request failed ({response.status_code})"
            )

        try:
            return NormalizedReading.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise PerLocationFetchError(
                location.id, f"Invalid weather payload: {str(e)}"
            ) from e

    async def start(self) -> None:
        """Run the initial refresh and schedule the periodic one"""
        await self.refresh()
        if self._periodic_task is None or self._periodic_task.done():
            self._periodic_task = asyncio.create_task(self._run_periodic())

    async def stop(self) -> None:
        """Stop the periodic refresh loop"""
        if self._periodic_task is None:
            return

        self._periodic_task.cancel()
        try:
            await self._periodic_task
        except asyncio.CancelledError:
            pass
        self._periodic_task = None

    async def _run_periodic(self) -> None:
        interval = self.settings.refresh_interval_seconds
        while True:
            await asyncio.sleep(interval)
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"Periodic weather refresh failed: {e}")


def create_fleet_fetcher(
    settings: Settings, locations: Sequence[Location] | None = None
) -> FleetWeatherFetcher:
    """Factory function creating a fetcher over the given or default offices"""
    if locations is None:
        from app.config.offices import OFFICES

        locations = OFFICES
    return FleetWeatherFetcher(settings, locations)
