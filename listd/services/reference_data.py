"""
Reference lists - cities, property types, listing types and statuses.

Each list is small and changes rarely, so the whole response is cached in
Redis with a fixed TTL. The cache is best-effort: a miss, a disabled cache
or a cache failure falls back to the store.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import asyncpg
import redis.asyncio as redis

from listd.db import STORE_ERRORS, acquire_connection
from listd.error_handling.errors import ExecutionError
from listd.models import CatalogTerm, City

logger = logging.getLogger(__name__)


REFERENCE_QUERIES = {
    "cities": """
        SELECT
            c.id,
            c.name,
            r.name AS region
        FROM cities AS c
        INNER JOIN regions AS r ON r.id = c.region_id
        ORDER BY c.name ASC
    """,
    "property_types": "SELECT * FROM property_types ORDER BY id",
    "listing_types": "SELECT * FROM listing_types ORDER BY id",
    "property_status": "SELECT * FROM property_status ORDER BY id",
}

REFERENCE_MODELS = {
    "cities": City,
    "property_types": CatalogTerm,
    "listing_types": CatalogTerm,
    "property_status": CatalogTerm,
}


class ReferenceDataService:
    """Serve reference lists through a read-through cache"""

    CACHE_TTL = 60 * 60 * 4  # 4 hours

    def __init__(
        self,
        pool: asyncpg.Pool,
        cache: Optional[redis.Redis] = None,
        acquire_timeout: float = 5.0,
        ttl_seconds: Optional[int] = None
    ):
        self.pool = pool
        self.cache = cache
        self.acquire_timeout = acquire_timeout
        self.ttl_seconds = ttl_seconds or self.CACHE_TTL

    async def get_list(self, name: str) -> List[Dict[str, Any]]:
        """
        Get a reference list by name.

        Args:
            name: One of the keys of REFERENCE_QUERIES; also the cache key

        Returns:
            List of rows as dictionaries

        Raises:
            KeyError: If the list name is unknown
            ExecutionError: If the store fails
        """
        query = REFERENCE_QUERIES[name]

        cached = await self.check_cache(name)
        if cached is not None:
            logger.info(f"Cache hit for reference list: {name}")
            return cached

        try:
            async with acquire_connection(self.pool, self.acquire_timeout) as conn:
                rows = await conn.fetch(query)
        except STORE_ERRORS as e:
            raise ExecutionError(f"Failed to load reference list {name}: {e}") from e

        model = REFERENCE_MODELS[name]
        data = [model.model_validate(dict(row)).model_dump(mode="json") for row in rows]
        await self.cache_results(name, data)
        return data

    async def check_cache(self, key: str) -> Optional[List[Dict[str, Any]]]:
        """
        Check if a reference list is cached.

        Returns:
            Cached rows or None
        """
        if self.cache is None:
            return None
        try:
            cached_data = await self.cache.get(key)
        except (redis.RedisError, OSError) as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        if not cached_data:
            return None
        try:
            return json.loads(cached_data)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding unreadable cache entry for {key}: {e}")
            return None

    async def cache_results(self, key: str, data: List[Dict[str, Any]]) -> None:
        """Cache a reference list for the fixed TTL."""
        if self.cache is None:
            return
        try:
            await self.cache.setex(key, self.ttl_seconds, json.dumps(data, default=str))
        except (redis.RedisError, OSError) as e:
            logger.warning(f"Cache write failed for {key}: {e}")
