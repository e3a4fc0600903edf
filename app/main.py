import logging
import sys
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.responses import edge_headers, error_response, preflight_response
from app.api.routes import router
from app.config.settings import Settings, settings
from app.config.utils import get_config_summary, validate_configuration
from app.providers.cache.base import CacheStore
from app.services.weather_proxy import create_weather_proxy_service
from app.utils.exceptions import WeatherAPIError

ALLOWED_METHODS = {"GET", "OPTIONS"}

HTTP_ERROR_MESSAGES = {
    404: "Not found.",
    405: "Only GET is supported for this endpoint.",
}


def setup_logging(settings_obj: Settings) -> None:
    """Configure structured logging for the application."""

    log_level = getattr(logging, settings_obj.log_level.upper())

    if settings_obj.log_format == "json":
        renderer = (
            structlog.dev.ConsoleRenderer()
            if settings_obj.is_development
            else structlog.processors.JSONRenderer()
        )
    else:
        # Console format for development
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def create_app(
    settings_obj: Settings | None = None, cache_store: CacheStore | None = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings_obj: Settings to use instead of the environment-loaded ones
        cache_store: Cache store to inject instead of the configured provider

    Returns:
        Configured FastAPI application instance
    """
    cfg = settings_obj or settings
    ttl_seconds = cfg.cache_ttl_seconds

    setup_logging(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Manage application lifespan - startup and shutdown events.

        The proxy starts even when the provider credential is missing; each
        weather request then answers with a configuration error.
        """
        logger = structlog.get_logger(__name__)

        logger.info("Starting weather proxy", **get_config_summary(cfg))

        validation = validate_configuration(cfg)
        for warning in validation["warnings"]:
            logger.warning("Configuration warning", warning=warning)
        if not validation["valid"]:
            logger.error("Invalid configuration", errors=validation["errors"])

        try:
            weather_service = await create_weather_proxy_service(
                cfg, cache_store=cache_store
            )
            app.state.weather_service = weather_service

            health_status = await weather_service.health_check()
            if health_status["service"] != "healthy":
                logger.warning("Service startup health check failed", status=health_status)
            else:
                logger.info("Service startup health check passed")

        except Exception as e:
            logger.error("Failed to initialize weather proxy during startup", error=str(e))
            raise

        yield  # Application is running

        logger.info("Shutting down weather proxy")

        try:
            if hasattr(app.state, "weather_service"):
                await app.state.weather_service.cleanup()
            logger.info("Weather proxy cleanup completed")
        except Exception as e:
            logger.error("Error during service cleanup", error=str(e))

    app = FastAPI(
        title=cfg.app_name,
        version=cfg.app_version,
        description="Edge proxy caching current weather per coordinate pair",
        docs_url="/docs" if cfg.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if cfg.debug else None,
        redirect_slashes=False,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def edge_middleware(request: Request, call_next) -> Response:
        """Answer preflights, reject unsupported methods, stamp edge headers."""
        if request.method == "OPTIONS":
            return preflight_response(ttl_seconds)

        if request.method not in ALLOWED_METHODS:
            return error_response(HTTP_ERROR_MESSAGES[405], 405, ttl_seconds)

        response = await call_next(request)
        for name, value in edge_headers(ttl_seconds).items():
            response.headers[name] = value
        return response

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next) -> Response:
        """Log requests and add processing time headers."""
        logger = structlog.get_logger(__name__)

        start_time = time.time()
        request_id = f"req_{int(start_time * 1000000)}"

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        logger.info("Request started")

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            response.headers["X-Process-Time"] = str(process_time)
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "Request completed",
                status_code=response.status_code,
                process_time=process_time,
            )

            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                process_time=process_time,
            )
            raise

    @app.exception_handler(WeatherAPIError)
    async def weather_api_error_handler(
        _request: Request, exc: WeatherAPIError
    ) -> JSONResponse:
        """Render proxy errors as an error envelope."""
        logger = structlog.get_logger(__name__)
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "Weather request rejected",
            error=str(exc),
            error_type=type(exc).__name__,
            status_code=exc.status_code,
        )

        return error_response(exc.message, exc.status_code, ttl_seconds)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Render routing errors (unknown path, wrong method) as an error envelope."""
        message = HTTP_ERROR_MESSAGES.get(exc.status_code, str(exc.detail))
        return error_response(message, exc.status_code, ttl_seconds)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected errors gracefully."""
        logger = structlog.get_logger(__name__)
        logger.error(
            "Unhandled exception", error=str(exc), error_type=type(exc).__name__
        )

        return error_response("An internal server error occurred", 500, ttl_seconds)

    app.include_router(router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
