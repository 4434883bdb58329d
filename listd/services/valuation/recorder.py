"""
Persistence of valuation snapshots for identified requesters.
"""

import logging
from typing import Optional

import asyncpg

from listd.config import QueryConfig
from listd.db import STORE_ERRORS
from listd.error_handling.errors import RecordingError
from listd.filtering.schemas import ValuationRequest
from listd.models import ValuationRecord, ValuationResult

logger = logging.getLogger(__name__)


# First existing match wins over the attempted insert
UPSERT_USER_SQL = """
WITH upsert AS (
    INSERT INTO users (clerk_id)
    VALUES ($1)
    ON CONFLICT (clerk_id) DO NOTHING
    RETURNING id
)
SELECT id FROM upsert
UNION ALL
SELECT id FROM users WHERE clerk_id = $1
LIMIT 1
"""

RESOLVE_CITY_SQL = """
WITH similar_city AS (
    SELECT
        id,
        STRICT_WORD_SIMILARITY(name, $1) AS city_name_similarity
    FROM cities
    WHERE STRICT_WORD_SIMILARITY(name, $1) > $2
)
SELECT id FROM similar_city
ORDER BY city_name_similarity DESC
LIMIT 1
"""

INSERT_VALUATION_SQL = """
INSERT INTO valuations (
    user_id,
    city_id,
    address,
    property_size,
    property_type_id,
    estimated_formatted_average_price_sale,
    estimated_formatted_average_price_per_sqm_sale,
    top_ten_similar_properties_sale,
    estimated_formatted_average_price_rent,
    estimated_formatted_average_price_per_sqm_rent,
    top_ten_similar_properties_rent,
    google_places_data_id,
    google_places_details_id
) VALUES (
    $1, $2, $3, $4,
    (SELECT id FROM property_types WHERE slug = $5),
    $6, $7, $8, $9, $10, $11, $12, $13
)
RETURNING id
"""


class ValuationRecorder:
    """
    Records a valuation against the requester who asked for it.

    Every statement runs on the caller's connection and transaction, so a
    failure at any step leaves nothing behind.
    """

    def __init__(self, config: Optional[QueryConfig] = None):
        self.config = config or QueryConfig()

    async def upsert_user(self, conn: asyncpg.Connection, external_id: str) -> int:
        """Resolve or create the requester's identity row."""
        user_id = await conn.fetchval(UPSERT_USER_SQL, external_id)
        if user_id is None:
            raise RecordingError(f"Could not resolve requester {external_id!r}")
        return user_id

    async def resolve_city(self, conn: asyncpg.Connection, city: str) -> Optional[int]:
        """Best-matching city id above the similarity threshold, if any."""
        return await conn.fetchval(
            RESOLVE_CITY_SQL,
            city,
            self.config.location_similarity_threshold,
        )

    def build_record(
        self,
        user_id: int,
        city_id: Optional[int],
        request: ValuationRequest,
        result: ValuationResult
    ) -> ValuationRecord:
        return ValuationRecord(
            user_id=user_id,
            city_id=city_id,
            address=request.address,
            property_size=request.sqm,
            property_type=request.property_type,
            estimated_formatted_average_price_sale=result.sale.average_price,
            estimated_formatted_average_price_per_sqm_sale=result.sale.price_per_sqm,
            top_ten_similar_properties_sale=[c.model_dump() for c in result.sale.similar_properties],
            estimated_formatted_average_price_rent=result.rent.average_price,
            estimated_formatted_average_price_per_sqm_rent=result.rent.price_per_sqm,
            top_ten_similar_properties_rent=[c.model_dump() for c in result.rent.similar_properties],
            google_places_data_id=request.google_places_data_id,
            google_places_details_id=request.google_places_details_id,
        )

    async def insert(self, conn: asyncpg.Connection, record: ValuationRecord) -> int:
        return await conn.fetchval(
            INSERT_VALUATION_SQL,
            record.user_id,
            record.city_id,
            record.address,
            record.property_size,
            record.property_type.value,
            record.estimated_formatted_average_price_sale,
            record.estimated_formatted_average_price_per_sqm_sale,
            record.top_ten_similar_properties_sale,
            record.estimated_formatted_average_price_rent,
            record.estimated_formatted_average_price_per_sqm_rent,
            record.top_ten_similar_properties_rent,
            record.google_places_data_id,
            record.google_places_details_id,
        )

    async def record(
        self,
        conn: asyncpg.Connection,
        request: ValuationRequest,
        result: ValuationResult
    ) -> int:
        """
        Persist a valuation for the request's requester.

        Args:
            conn: Connection inside the transaction that produced `result`
            request: Validated request carrying `user_id`
            result: Computed estimate

        Returns:
            Id of the inserted valuation row

        Raises:
            RecordingError: If any step fails; the caller's transaction
                must roll back
        """
        if not request.user_id:
            raise RecordingError("Valuations are only recorded for identified requesters")

        try:
            user_id = await self.upsert_user(conn, request.user_id)
            city_id = await self.resolve_city(conn, request.city)
            record = self.build_record(user_id, city_id, request, result)
            valuation_id = await self.insert(conn, record)
        except STORE_ERRORS as e:
            raise RecordingError(f"Failed to record valuation: {e}") from e

        logger.info(f"Recorded valuation {valuation_id} for user {user_id} (city_id={city_id})")
        return valuation_id
