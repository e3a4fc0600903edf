import os

from .settings import Settings, settings


def validate_configuration(
    settings_obj: Settings | None = None,
) -> dict[str, list[str] | bool]:
    """Validate configuration and return validation results."""
    cfg = settings_obj or settings
    errors = []
    warnings = []

    # The proxy still starts without a key; every weather request answers 500.
    if not cfg.has_provider_credential:
        warnings.append(
            "OPENWEATHER_API_KEY is not set; /weather requests will fail with 500"
        )

    if cfg.use_aws_services:
        if not cfg.aws_region:
            errors.append("AWS_REGION must be set when using AWS services")

        if not cfg.dynamodb_cache_table_name:
            errors.append(
                "DYNAMODB_CACHE_TABLE_NAME must be set when using AWS services"
            )

        if not any(
            [
                cfg.aws_access_key_id,
                os.getenv("AWS_PROFILE"),
                os.getenv("AWS_ROLE_ARN"),
            ]
        ):
            warnings.append(
                "No AWS credentials found. Ensure AWS credentials are available via "
                "environment variables, AWS profile, or IAM role"
            )

    if cfg.cache_ttl_seconds <= 0:
        errors.append("CACHE_TTL_SECONDS must be a positive integer")

    if not cfg.cache_schema_version.strip():
        errors.append("CACHE_SCHEMA_VERSION must not be empty")

    if cfg.weather_api_timeout <= 0:
        errors.append("WEATHER_API_TIMEOUT must be a positive integer")

    if cfg.refresh_interval_seconds <= 0:
        errors.append("REFRESH_INTERVAL_SECONDS must be a positive integer")

    if (
        cfg.fleet_request_timeout_seconds is not None
        and cfg.fleet_request_timeout_seconds <= 0
    ):
        errors.append("FLEET_REQUEST_TIMEOUT_SECONDS must be positive when set")

    if not (1 <= cfg.port <= 65535):
        errors.append("PORT must be between 1 and 65535")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


def get_config_summary(
    settings_obj: Settings | None = None,
) -> dict[str, str | int | bool]:
    """Get a summary of current configuration for logging/debugging."""
    cfg = settings_obj or settings
    return {
        "app_name": cfg.app_name,
        "version": cfg.app_version,
        "environment": cfg.environment,
        "provider_mode": cfg.provider_mode,
        "cache_ttl_seconds": cfg.cache_ttl_seconds,
        "cache_schema_version": cfg.cache_schema_version,
        "debug": cfg.debug,
        "log_level": cfg.log_level,
        "api_endpoint": f"{cfg.host}:{cfg.port}",
        "weather_api_configured": cfg.has_provider_credential,
    }
