import time

import aioboto3
import structlog
from botocore.exceptions import ClientError

from app.config.settings import Settings
from app.utils.exceptions import CacheError

from .base import CacheStore

TTL_ATTRIBUTE = "expires_at"


class DynamoDBCacheStore(CacheStore):
    """
    DynamoDB implementation of the cache store.

    Entries carry an epoch `expires_at` attribute registered as the table's
    TTL attribute. DynamoDB removes expired items lazily, so reads also skip
    items whose `expires_at` has passed.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.table_name = settings.dynamodb_cache_table_name
        self.region = settings.aws_region
        self.logger = structlog.get_logger(__name__).bind(
            provider="dynamodb", table=self.table_name
        )

    def _session(self) -> aioboto3.Session:
        return aioboto3.Session(
            aws_access_key_id=self.settings.aws_access_key_id,
            aws_secret_access_key=self.settings.aws_secret_access_key,
            aws_session_token=self.settings.aws_session_token,
            region_name=self.region,
        )

    async def get(self, key: str) -> str | None:
        try:
            async with self._session().client("dynamodb") as dynamodb:
                response = await dynamodb.get_item(
                    TableName=self.table_name,
                    Key={"cache_key": {"S": key}},
                    ConsistentRead=False,
                )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            self.logger.error(
                "dynamodb_get_item_failed", cache_key=key, error_code=error_code
            )
            raise CacheError(
                f"Failed to read cache entry from DynamoDB: {error_code} - {str(e)}",
                operation="get",
            ) from e

        item = response.get("Item")
        if not item:
            return None

        expires_at = int(item.get(TTL_ATTRIBUTE, {}).get("N", "0"))
        if expires_at <= int(time.time()):
            self.logger.debug("cache_entry_expired", cache_key=key)
            return None

        return item["payload"]["S"]

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = int(time.time()) + ttl_seconds
        try:
            async with self._session().client("dynamodb") as dynamodb:
                await dynamodb.put_item(
                    TableName=self.table_name,
                    Item={
                        "cache_key": {"S": key},
                        "payload": {"S": value},
                        TTL_ATTRIBUTE: {"N": str(expires_at)},
                    },
                )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            self.logger.error(
                "dynamodb_put_item_failed", cache_key=key, error_code=error_code
            )
            raise CacheError(
                f"Failed to write cache entry to DynamoDB: {error_code} - {str(e)}",
                operation="put",
            ) from e

        self.logger.debug("cache_entry_stored", cache_key=key, expires_at=expires_at)

    async def health_check(self) -> bool:
        """Check if DynamoDB table is accessible"""
        try:
            async with self._session().client("dynamodb") as dynamodb:
                response = await dynamodb.describe_table(TableName=self.table_name)
                table_status = response["Table"]["TableStatus"]
                is_healthy = table_status == "ACTIVE"

                self.logger.info(
                    "health_check_completed",
                    table_status=table_status,
                    is_healthy=is_healthy,
                )
                return is_healthy

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            self.logger.warning(
                "health_check_failed",
                error_code=error_code,
                table_exists=(error_code != "ResourceNotFoundException"),
            )
            return False
        except Exception as e:
            self.logger.error("health_check_error", error=str(e))
            return False
