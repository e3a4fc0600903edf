from typing import Annotated

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from fastapi.responses import Response

from app.api.responses import json_body_response
from app.services.weather_proxy import WeatherProxyService, parse_coordinate

logger = structlog.get_logger(__name__)
router = APIRouter()


def get_weather_proxy_service(request: Request) -> WeatherProxyService:
    """
    Dependency injection for the weather proxy service.

    Retrieves the service instance from the application state.
    This service is initialized during application startup.
    """
    if not hasattr(request.app.state, "weather_service"):
        raise HTTPException(status_code=503, detail="Weather service not available")

    return request.app.state.weather_service


@router.get(
    "/weather",
    summary="Get current weather for a coordinate pair",
    description="""
    Retrieve the current normalized weather reading for a latitude/longitude.

    The proxy implements cache-aside caching:
    - Coordinates are rounded to 4 decimals to build the cache key
    - A fresh cached reading is returned verbatim with `X-Cache: HIT`
    - Otherwise the provider is called, the reading normalized and
      returned with `X-Cache: MISS`; the cache write runs after the response
    """,
    responses={
        200: {
            "description": "Normalized weather reading",
            "content": {
                "application/json": {
                    "example": {
                        "temperatureC": 25.2,
                        "condition": "clear sky",
                        "icon": "01d",
                        "humidity": 36,
                        "windSpeedMps": 2.6,
                        "timezoneOffsetSeconds": -18000,
                        "observedAt": "2023-11-14T22:13:20.000Z",
                        "updatedAt": "2023-11-14T22:15:02.417Z",
                    }
                }
            },
        },
        400: {"description": "Missing, invalid or out-of-range coordinates"},
        500: {"description": "Provider credential is not configured"},
        502: {"description": "Upstream weather provider failed"},
    },
    tags=["Weather"],
)
async def get_weather(
    background_tasks: BackgroundTasks,
    lat: Annotated[str | None, Query(description="Latitude in degrees")] = None,
    lon: Annotated[str | None, Query(description="Longitude in degrees")] = None,
    weather_service: WeatherProxyService = Depends(get_weather_proxy_service),
) -> Response:
    """
    Get the current weather for a coordinate pair.

    Validation failures, missing configuration and upstream failures are
    raised as WeatherAPIError subclasses and rendered by the app's
    exception handlers as an error envelope.
    """
    latitude = parse_coordinate(lat)
    longitude = parse_coordinate(lon)

    result, background_write = await weather_service.get_weather(latitude, longitude)

    if background_write is not None:
        background_tasks.add_task(background_write)

    logger.info(
        "Weather request completed",
        lat=latitude,
        lon=longitude,
        cache=result.cache_status,
    )

    return json_body_response(
        result.body,
        weather_service.settings.cache_ttl_seconds,
        extra_headers={"X-Cache": result.cache_status},
    )
