"""
Request-scoped service construction.
"""

import asyncpg
from fastapi import Depends, Request

from listd.config import Settings, load_settings
from listd.db import get_pg_pool, get_redis
from listd.query import PredicateComposer, QueryCompiler
from listd.services import (
    ListingSearchService,
    ReferenceDataService,
    ValuationEstimator,
    ValuationRecorder,
    ValuationService,
)


def get_settings(request: Request) -> Settings:
    """Settings the application was started with."""
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else load_settings()


def get_listing_service(
    settings: Settings = Depends(get_settings),
    pool: asyncpg.Pool = Depends(get_pg_pool),
) -> ListingSearchService:
    compiler = QueryCompiler(
        composer=PredicateComposer(minimum_price=settings.query.minimum_price),
        page_size=settings.query.page_size,
    )
    return ListingSearchService(
        pool,
        acquire_timeout=settings.database.acquire_timeout_seconds,
        compiler=compiler,
    )


def get_valuation_service(
    settings: Settings = Depends(get_settings),
    pool: asyncpg.Pool = Depends(get_pg_pool),
) -> ValuationService:
    return ValuationService(
        pool,
        acquire_timeout=settings.database.acquire_timeout_seconds,
        estimator=ValuationEstimator(settings.query),
        recorder=ValuationRecorder(settings.query),
    )


def get_reference_service(
    settings: Settings = Depends(get_settings),
    pool: asyncpg.Pool = Depends(get_pg_pool),
) -> ReferenceDataService:
    return ReferenceDataService(
        pool,
        cache=get_redis(),
        acquire_timeout=settings.database.acquire_timeout_seconds,
        ttl_seconds=settings.cache.reference_ttl_seconds,
    )
