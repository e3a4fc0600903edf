"""
Unit conversions applied to canonical metric readings.

Every function here is pure and total: the proxy only ever stores metric
values and each display unit is derived on read.
"""

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from app.models.weather import DisplayReading, NormalizedReading

ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{icon}@2x.png"
UNAVAILABLE = "Unavailable"


def round_one(value: float) -> float:
    """Round to one decimal with ties away from zero (12.25 -> 12.3)"""
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def c_to_f(celsius: float) -> float:
    return round_one(celsius * 1.8 + 32)


def mps_to_mph(mps: float) -> float:
    return round_one(mps * 2.23694)


def mps_to_kph(mps: float) -> float:
    return round_one(mps * 3.6)


def capitalize_first(value: str) -> str:
    """Upper-case the first character only; 'scattered clouds' -> 'Scattered clouds'"""
    if not value:
        return value
    return value[0].upper() + value[1:]


def icon_url(icon: str) -> str:
    return ICON_URL_TEMPLATE.format(icon=icon)


def format_clock(moment: datetime) -> str:
    """Render a wall-clock time as 'h:MM AM/PM'"""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_local_time(
    timezone_offset_seconds: int | None, now: datetime | None = None
) -> str:
    """
    Render the local wall-clock time at a location.

    The location time is the UTC instant shifted by the provider's offset.
    Without an offset the sentinel "Unavailable" is returned.
    """
    if timezone_offset_seconds is None:
        return UNAVAILABLE

    instant = now or datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    local = instant.astimezone(timezone.utc) + timedelta(
        seconds=timezone_offset_seconds
    )
    return format_clock(local)


def to_display_reading(reading: NormalizedReading) -> DisplayReading:
    """Expand a normalized reading into every display unit"""
    return DisplayReading(
        temperature_c=round_one(reading.temperature_c),
        temperature_f=c_to_f(reading.temperature_c),
        condition=capitalize_first(reading.condition),
        icon_url=icon_url(reading.icon),
        humidity=reading.humidity,
        wind_speed_mps=round_one(reading.wind_speed_mps),
        wind_speed_mph=mps_to_mph(reading.wind_speed_mps),
        wind_speed_kph=mps_to_kph(reading.wind_speed_mps),
        timezone_offset_seconds=reading.timezone_offset_seconds,
        observed_at=reading.observed_at,
        updated_at=reading.updated_at,
    )
