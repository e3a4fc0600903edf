from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Location(BaseModel):
    """Office location the dashboard tracks"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable unique identifier")
    name: str = Field("", description="Display name")
    city: str = Field("", description="City label")
    country: str = Field("", description="Country label")
    latitude: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class NormalizedReading(BaseModel):
    """Canonical metric reading served by the proxy and stored in the cache"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    temperature_c: float = Field(..., description="Temperature in Celsius")
    condition: str = Field(..., description="Weather condition text")
    icon: str = Field(..., description="Provider icon code")
    humidity: int | float = Field(..., description="Humidity percentage")
    wind_speed_mps: float = Field(..., description="Wind speed in m/s")
    timezone_offset_seconds: int | None = Field(
        None, description="Location UTC offset in seconds"
    )
    observed_at: str | None = Field(
        None, description="Provider observation time (ISO-8601, UTC)"
    )
    updated_at: str = Field(..., description="When the reading was normalized")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class DisplayReading(BaseModel):
    """Normalized reading expanded with every display unit"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    temperature_c: float
    temperature_f: float
    condition: str
    icon_url: str
    humidity: int | float
    wind_speed_mps: float
    wind_speed_mph: float
    wind_speed_kph: float
    timezone_offset_seconds: int | None = None
    observed_at: str | None = None
    updated_at: str


class FetchState(BaseModel):
    """Observable state of the fleet fetcher"""

    weather_by_location: dict[str, DisplayReading] = Field(default_factory=dict)
    errors_by_location: dict[str, str] = Field(default_factory=dict)
    loading_by_location: dict[str, bool] = Field(default_factory=dict)
    is_initial_loading: bool = True
