"""
Console dashboard polling the weather proxy for every configured office.

    python -m app.dashboard            # refresh now and every interval
    python -m app.dashboard --once     # single refresh cycle
"""

import argparse
import asyncio

import structlog

from app.config.offices import OFFICES
from app.config.settings import Settings, settings
from app.main import setup_logging
from app.services.fleet_fetcher import FleetWeatherFetcher, create_fleet_fetcher
from app.services.view_model import build_dashboard


def log_dashboard(
    fetcher: FleetWeatherFetcher, temperature_unit: str, wind_speed_unit: str
) -> None:
    logger = structlog.get_logger(__name__)
    view = build_dashboard(
        fetcher.locations,
        fetcher.snapshot(),
        temperature_unit=temperature_unit,
        wind_speed_unit=wind_speed_unit,
    )

    for card in view.cards:
        if card.status == "ready":
            logger.info(
                card.name,
                temperature=card.temperature,
                condition=card.condition,
                humidity=card.humidity,
                wind=card.wind,
                local_time=card.local_time,
            )
        else:
            logger.warning(card.name, status=card.status, error=card.error)

    logger.info(
        "Dashboard refreshed",
        last_updated=view.last_updated,
        has_any_error=view.has_any_error,
    )


async def run(
    settings_obj: Settings, once: bool, temperature_unit: str, wind_speed_unit: str
) -> None:
    async with create_fleet_fetcher(settings_obj, OFFICES) as fetcher:
        if once:
            await fetcher.refresh()
            log_dashboard(fetcher, temperature_unit, wind_speed_unit)
            return

        await fetcher.start()
        seen = 0
        while True:
            if fetcher.cycles_completed != seen:
                seen = fetcher.cycles_completed
                log_dashboard(fetcher, temperature_unit, wind_speed_unit)
            await asyncio.sleep(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Office weather dashboard")
    parser.add_argument("--once", action="store_true", help="Refresh a single time")
    parser.add_argument("--temperature-unit", choices=["F", "C"], default="F")
    parser.add_argument("--wind-unit", choices=["mph", "m/s", "km/h"], default="mph")
    args = parser.parse_args(argv)

    setup_logging(settings)
    try:
        asyncio.run(run(settings, args.once, args.temperature_unit, args.wind_unit))
    except KeyboardInterrupt:
        structlog.get_logger(__name__).info("Dashboard stopped")


if __name__ == "__main__":
    main()
