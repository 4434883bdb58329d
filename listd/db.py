"""
Database connection and initialization.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg
import redis.asyncio as redis

from listd.config import Settings
from listd.error_handling.errors import ConfigurationError, ExecutionError

logger = logging.getLogger(__name__)

# Global connection pools
pg_pool: Optional[asyncpg.Pool] = None
redis_client: Optional[redis.Redis] = None

# Failures of the listing store that map to ExecutionError
STORE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode json/jsonb columns into Python values."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


async def init_db(settings: Settings):
    """Initialize database connections

    Raises:
        ConfigurationError: If the datastore connection string is missing
    """
    global pg_pool, redis_client

    settings.validate()

    # PostgreSQL
    try:
        pg_pool = await asyncpg.create_pool(
            settings.database.database_url,
            min_size=settings.database.min_pool_size,
            max_size=settings.database.max_pool_size,
            init=_init_connection,
        )
        logger.info("PostgreSQL connection pool created")

        if settings.database.create_schema:
            async with pg_pool.acquire() as conn:
                await create_tables(conn)
    except Exception as e:
        logger.error(f"Failed to connect to PostgreSQL: {e}")
        raise

    # Redis is optional; without it reference lists are read straight from the store
    if not settings.cache.redis_url:
        logger.info("REDIS_URL not set, reference cache disabled")
        return

    try:
        redis_client = redis.from_url(settings.cache.redis_url, decode_responses=True)
        await redis_client.ping()
        logger.info("Redis connection established")
    except (redis.RedisError, OSError) as e:
        logger.warning(f"Redis unavailable, reference cache disabled: {e}")
        redis_client = None


async def close_db():
    """Close database connections"""
    global pg_pool, redis_client

    if pg_pool:
        await pg_pool.close()
        pg_pool = None
        logger.info("PostgreSQL connection pool closed")

    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis connection closed")


SCHEMA_STATEMENTS = (
    "CREATE EXTENSION IF NOT EXISTS pg_trgm",
    "CREATE EXTENSION IF NOT EXISTS postgis",
    """
    CREATE TABLE IF NOT EXISTS regions (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cities (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        region_id INTEGER NOT NULL REFERENCES regions(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS listing_types (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS property_status (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS property_types (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS agents (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS listings (
        id BIGSERIAL PRIMARY KEY,
        listing_title TEXT NOT NULL,
        listing_url TEXT,
        price NUMERIC NOT NULL,
        price_formatted TEXT,
        price_for_rent_per_sqm NUMERIC,
        price_for_sale_per_sqm NUMERIC,
        price_for_rent_per_sqm_formatted TEXT,
        price_for_sale_per_sqm_formatted TEXT,
        listing_type_id INTEGER NOT NULL REFERENCES listing_types(id),
        property_status_id INTEGER NOT NULL REFERENCES property_status(id),
        agent_id INTEGER REFERENCES agents(id),
        sub_category TEXT,
        coordinates GEOMETRY(Point, 4326),
        latitude_in_text TEXT,
        longitude_in_text TEXT,
        description TEXT,
        scraped_property JSONB,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS properties (
        id BIGSERIAL PRIMARY KEY,
        listing_id BIGINT NOT NULL UNIQUE REFERENCES listings(id),
        property_type_id INTEGER NOT NULL REFERENCES property_types(id),
        city_id INTEGER NOT NULL REFERENCES cities(id),
        building_name TEXT,
        subdivision_name TEXT,
        project_name TEXT,
        floor_area NUMERIC,
        lot_area NUMERIC,
        building_size NUMERIC,
        bedrooms INTEGER,
        bathrooms INTEGER,
        parking_space INTEGER,
        area TEXT,
        address TEXT,
        features JSONB,
        equipments JSONB,
        main_image_url TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS property_images (
        id BIGSERIAL PRIMARY KEY,
        property_id BIGINT NOT NULL REFERENCES listings(id),
        url TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id BIGSERIAL PRIMARY KEY,
        clerk_id TEXT NOT NULL UNIQUE,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS valuations (
        id BIGSERIAL PRIMARY KEY,
        user_id BIGINT NOT NULL REFERENCES users(id),
        city_id INTEGER REFERENCES cities(id),
        address TEXT NOT NULL,
        property_size NUMERIC NOT NULL,
        property_type_id INTEGER REFERENCES property_types(id),
        estimated_formatted_average_price_sale TEXT NOT NULL,
        estimated_formatted_average_price_per_sqm_sale TEXT NOT NULL,
        top_ten_similar_properties_sale JSONB NOT NULL DEFAULT '[]',
        estimated_formatted_average_price_rent TEXT NOT NULL,
        estimated_formatted_average_price_per_sqm_rent TEXT NOT NULL,
        top_ten_similar_properties_rent JSONB NOT NULL DEFAULT '[]',
        google_places_data_id TEXT,
        google_places_details_id TEXT,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_cities_name_trgm ON cities USING gin (name gin_trgm_ops)",
    "CREATE INDEX IF NOT EXISTS idx_listings_description_trgm ON listings USING gin (description gin_trgm_ops)",
    "CREATE INDEX IF NOT EXISTS idx_listings_price ON listings(price)",
    "CREATE INDEX IF NOT EXISTS idx_properties_city ON properties(city_id)",
)


async def create_tables(conn: asyncpg.Connection):
    """Create the catalog schema if it doesn't exist"""
    async with conn.transaction():
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)
    logger.info("Database tables created/verified")


def get_pg_pool() -> asyncpg.Pool:
    """Get PostgreSQL connection pool

    Raises:
        ConfigurationError: If the pool was never created
    """
    if pg_pool is None:
        raise ConfigurationError("Database URL not defined.")
    return pg_pool


def get_redis() -> Optional[redis.Redis]:
    """Get Redis client, None when caching is disabled"""
    return redis_client




@asynccontextmanager
async def acquire_connection(pool: asyncpg.Pool, timeout: float) -> AsyncIterator[asyncpg.Connection]:
    """
    Acquire one pooled connection for the span of a request.

    The connection is released on every exit path. Waiting longer than
    `timeout` for a free connection fails closed instead of queuing.

    Raises:
        ExecutionError: If no connection became available in time
    """
    try:
        conn = await pool.acquire(timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ExecutionError(f"Timed out after {timeout}s acquiring a database connection") from e
    except STORE_ERRORS as e:
        raise ExecutionError(f"Failed to acquire a database connection: {e}") from e
    try:
        yield conn
    finally:
        await pool.release(conn)
