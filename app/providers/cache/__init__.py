from .base import CacheStore
from .factory import create_cache_store
from .memory import InMemoryCacheStore

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "create_cache_store",
]
