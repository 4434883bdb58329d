"""Application settings for the Listd catalog API."""

from dataclasses import dataclass
from typing import Optional
import os

from listd.error_handling.errors import ConfigurationError


@dataclass
class DatabaseConfig:
    """Listing store connection settings."""
    database_url: Optional[str] = None
    min_pool_size: int = 2
    max_pool_size: int = 10
    acquire_timeout_seconds: float = 5.0
    create_schema: bool = False


@dataclass
class CacheConfig:
    """Reference-list cache settings."""
    redis_url: Optional[str] = None
    reference_ttl_seconds: int = 60 * 60 * 4


@dataclass
class QueryConfig:
    """Query and valuation constants."""
    page_size: int = 10
    minimum_price: int = 5000
    location_similarity_threshold: float = 0.5
    area_tolerance: str = "0.2"
    comparables_limit: int = 10


@dataclass
class Settings:
    """Main application settings."""
    version: str = "0.1.0"
    log_level: str = "INFO"
    database: DatabaseConfig = None
    cache: CacheConfig = None
    query: QueryConfig = None

    def __post_init__(self):
        """Initialize nested configs if not provided."""
        if self.database is None:
            self.database = DatabaseConfig()
        if self.cache is None:
            self.cache = CacheConfig()
        if self.query is None:
            self.query = QueryConfig()

    def validate(self) -> None:
        """Fail before any I/O when a required endpoint is missing.

        Raises:
            ConfigurationError: If the datastore connection string is absent
        """
        if not self.database.database_url:
            raise ConfigurationError("Database URL not defined.")
        if self.database.max_pool_size < self.database.min_pool_size:
            raise ConfigurationError(
                f"Pool max size {self.database.max_pool_size} is below "
                f"min size {self.database.min_pool_size}."
            )


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def load_settings() -> Settings:
    """Build settings from environment variables.

    Reads the environment at call time so a `.env` file loaded beforehand
    is honoured.
    """
    return Settings(
        version=os.getenv("LISTD_VERSION", "0.1.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database=DatabaseConfig(
            database_url=os.getenv("NEON_LISTD_DATABASE_URL") or None,
            min_pool_size=int(os.getenv("DB_POOL_MIN_SIZE", "2")),
            max_pool_size=int(os.getenv("DB_POOL_MAX_SIZE", "10")),
            acquire_timeout_seconds=float(os.getenv("DB_ACQUIRE_TIMEOUT_SECONDS", "5")),
            create_schema=_env_flag("LISTD_CREATE_SCHEMA"),
        ),
        cache=CacheConfig(
            redis_url=os.getenv("REDIS_URL") or None,
            reference_ttl_seconds=int(os.getenv("REFERENCE_CACHE_TTL_SECONDS", str(60 * 60 * 4))),
        ),
        query=QueryConfig(),
    )
