from abc import ABC, abstractmethod


class CacheStore(ABC):
    """Abstract base class for key-value cache stores (in-memory, DynamoDB, etc.)"""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Retrieve a cached value if it exists and has not expired

        Args:
            key: Cache key

        Returns:
            The stored value, or None on a miss
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value that expires after ttl_seconds

        Args:
            key: Cache key
            value: Serialized payload
            ttl_seconds: Time-to-live in seconds
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the cache store is healthy and accessible

        Returns:
            True if healthy, False otherwise
        """
        pass
