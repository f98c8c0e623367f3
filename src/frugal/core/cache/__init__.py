"""Response cache: key normalization, scored eviction, snapshot persistence."""

from frugal.core.cache.classifier import QueryClass, classify_query
from frugal.core.cache.manager import CacheManager, CacheResult
from frugal.core.cache.normalizer import QueryOptions, compute_key
from frugal.core.cache.store import CacheEntry, CacheStore

__all__ = [
    "CacheEntry",
    "CacheManager",
    "CacheResult",
    "CacheStore",
    "QueryClass",
    "QueryOptions",
    "classify_query",
    "compute_key",
]
