import logging

from app.config.settings import Settings
from app.providers.cache.base import CacheStore

logger = logging.getLogger(__name__)


def create_cache_store(settings: Settings) -> CacheStore:
    """Factory function to create the appropriate cache store based on settings"""
    if settings.use_aws_services:
        try:
            from app.providers.cache.dynamodb import DynamoDBCacheStore

            logger.info("Creating DynamoDB cache store")
            return DynamoDBCacheStore(settings)

        except ImportError as e:
            logger.error("AWS dependencies not installed. Install with: pip install aioboto3")
            raise ImportError(
                "AWS dependencies not available. Install with: pip install aioboto3"
            ) from e

    elif settings.use_local_services:
        from app.providers.cache.memory import InMemoryCacheStore

        logger.info("Creating in-memory cache store")
        return InMemoryCacheStore()

    else:
        raise ValueError(
            f"Unsupported provider mode: {settings.provider_mode}. "
            "Supported modes: 'aws', 'local'"
        )
