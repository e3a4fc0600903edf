"""Display strings for the dashboard, assembled from the fetcher's state."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel

from app.models.weather import DisplayReading, FetchState, Location
from app.services.units import UNAVAILABLE, format_clock, format_local_time

TemperatureUnit = Literal["F", "C"]
WindSpeedUnit = Literal["mph", "m/s", "km/h"]
CardStatus = Literal["loading", "error", "ready", "pending"]

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class OfficeCard(BaseModel):
    location_id: str
    name: str
    place: str
    status: CardStatus
    error: str | None = None
    temperature: str | None = None
    condition: str | None = None
    icon_url: str | None = None
    humidity: str | None = None
    wind: str | None = None
    local_time: str | None = None


class DashboardView(BaseModel):
    cards: list[OfficeCard]
    last_updated: str
    has_any_error: bool
    is_initial_loading: bool


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def latest_update(weather_by_location: dict[str, DisplayReading]) -> datetime | None:
    """Freshest updatedAt across the fleet; unparsable timestamps are skipped"""
    latest = None
    for reading in weather_by_location.values():
        moment = parse_timestamp(reading.updated_at)
        if moment is None:
            continue
        if latest is None or moment > latest:
            latest = moment
    return latest


def format_last_updated(moment: datetime | None) -> str:
    if moment is None:
        return UNAVAILABLE
    return f"{MONTHS[moment.month - 1]} {moment.day}, {format_clock(moment)}"


def format_temperature(reading: DisplayReading, unit: TemperatureUnit) -> str:
    value = reading.temperature_f if unit == "F" else reading.temperature_c
    return f"{value}°{unit}"


def format_wind(reading: DisplayReading, unit: WindSpeedUnit) -> str:
    if unit == "mph":
        value = reading.wind_speed_mph
    elif unit == "km/h":
        value = reading.wind_speed_kph
    else:
        value = reading.wind_speed_mps
    return f"{value} {unit}"


def build_office_card(
    location: Location,
    state: FetchState,
    temperature_unit: TemperatureUnit,
    wind_speed_unit: WindSpeedUnit,
    now: datetime,
) -> OfficeCard:
    card = OfficeCard(
        location_id=location.id,
        name=location.name or location.id,
        place=", ".join(part for part in (location.city, location.country) if part),
        status="pending",
    )

    if state.loading_by_location.get(location.id):
        card.status = "loading"
        return card

    error = state.errors_by_location.get(location.id)
    if error:
        card.status = "error"
        card.error = error
        return card

    reading = state.weather_by_location.get(location.id)
    if reading is None:
        return card

    card.status = "ready"
    card.temperature = format_temperature(reading, temperature_unit)
    card.condition = reading.condition
    card.icon_url = reading.icon_url
    card.humidity = f"{reading.humidity}%"
    card.wind = format_wind(reading, wind_speed_unit)
    card.local_time = format_local_time(reading.timezone_offset_seconds, now)
    return card


def build_office_cards(
    locations: list[Location],
    state: FetchState,
    temperature_unit: TemperatureUnit,
    wind_speed_unit: WindSpeedUnit,
    now: datetime,
) -> list[OfficeCard]:
    return [
        build_office_card(location, state, temperature_unit, wind_speed_unit, now)
        for location in locations
    ]


def build_dashboard(
    locations: list[Location],
    state: FetchState,
    temperature_unit: TemperatureUnit = "F",
    wind_speed_unit: WindSpeedUnit = "mph",
    now: datetime | None = None,
) -> DashboardView:
    moment = now or datetime.now(timezone.utc)
    return DashboardView(
        cards=build_office_cards(
            locations, state, temperature_unit, wind_speed_unit, moment
        ),
        last_updated=format_last_updated(latest_update(state.weather_by_location)),
        has_any_error=bool(state.errors_by_location),
        is_initial_loading=state.is_initial_loading,
    )
