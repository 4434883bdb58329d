"""
Listing search and lookup against the catalog store.
"""

import logging
from typing import Optional

import asyncpg

from listd.db import STORE_ERRORS, acquire_connection
from listd.error_handling.errors import ExecutionError, NotFoundError
from listd.filtering.schemas import ListingCriteria
from listd.models import Listing, ListingDetail, ListingPage
from listd.query import PaginationController, QueryCompiler

logger = logging.getLogger(__name__)


FIND_ONE_LISTING_SQL = """
WITH listing_details AS (
    SELECT
        listing.id,
        INITCAP(listing.listing_title) AS listing_title,
        listing.listing_url,
        listing.price,
        listing.price_formatted,
        listing.price_for_rent_per_sqm,
        listing.price_for_sale_per_sqm,
        listing.price_for_rent_per_sqm_formatted,
        listing.price_for_sale_per_sqm_formatted,
        listing_type.name AS listing_type,
        property_status.name AS property_status,
        property_type.name AS property_type,
        listing.sub_category,
        property.building_name,
        property.subdivision_name,
        property.project_name,
        property.floor_area,
        property.lot_area,
        property.building_size,
        property.bedrooms,
        property.bathrooms,
        property.parking_space,
        city.name AS city,
        property.area,
        property.address,
        property.features,
        property.equipments,
        property.main_image_url,
        agent.name AS agent_name,
        ST_AsGeoJSON(listing.coordinates)::json->'coordinates' AS coordinates,
        listing.latitude_in_text,
        listing.longitude_in_text,
        listing.description,
        listing.scraped_property,
        listing.created_at
    FROM listings AS listing
    INNER JOIN listing_types AS listing_type ON listing_type.id = listing.listing_type_id
    INNER JOIN property_status ON property_status.id = listing.property_status_id
    INNER JOIN properties AS property ON property.listing_id = listing.id
    INNER JOIN property_types AS property_type ON property_type.id = property.property_type_id
    INNER JOIN cities AS city ON city.id = property.city_id
    LEFT JOIN agents AS agent ON agent.id = listing.agent_id
    WHERE listing.id = $1
),
property_images_agg AS (
    SELECT
        property_id,
        JSON_AGG(JSON_BUILD_OBJECT('id', id, 'url', url)) AS property_images
    FROM property_images
    WHERE property_id = $1
    GROUP BY property_id
)
SELECT
    ld.*,
    pia.property_images
FROM listing_details ld
LEFT JOIN property_images_agg pia ON pia.property_id = ld.id
"""


class ListingSearchService:
    """
    Runs filtered, keyset-paginated listing searches.

    The page and its count execute inside one transaction on one pooled
    connection so both observe the same snapshot.
    """

    def __init__(
        self,
        pool: asyncpg.Pool,
        acquire_timeout: float = 5.0,
        compiler: Optional[QueryCompiler] = None,
        paginator: Optional[PaginationController] = None
    ):
        self.pool = pool
        self.acquire_timeout = acquire_timeout
        self.compiler = compiler or QueryCompiler()
        self.paginator = paginator or PaginationController(self.compiler.page_size)

    async def search(self, criteria: ListingCriteria) -> ListingPage:
        """
        Fetch one page of listings matching the criteria.

        Args:
            criteria: Validated listing criteria

        Returns:
            ListingPage with the rows, the total matching count and the
            cursor bounds for the neighbouring pages

        Raises:
            ExecutionError: If the store fails; the transaction is rolled back
        """
        plan, page_query, count_query = self.compiler.compile(criteria)

        try:
            async with acquire_connection(self.pool, self.acquire_timeout) as conn:
                async with conn.transaction():
                    rows = await conn.fetch(page_query.sql, *page_query.params)
                    count = await conn.fetchval(count_query.sql, *count_query.params)
        except STORE_ERRORS as e:
            raise ExecutionError(f"Listing search failed: {e}") from e

        window = self.paginator.window(rows, plan.ordering, plan.direction)
        logger.info(
            f"Listing search returned {len(window.rows)} of {count} rows "
            f"(ordering={plan.ordering.value}, direction={plan.direction.value})"
        )

        return ListingPage(
            before=window.before,
            after=window.after,
            count=int(count or 0),
            data=[Listing.model_validate(dict(row)) for row in window.rows],
        )

    async def get_listing(self, listing_id: int) -> ListingDetail:
        """
        Fetch one listing with its images.

        Raises:
            NotFoundError: If no listing has this id
            ExecutionError: If the store fails
        """
        try:
            async with acquire_connection(self.pool, self.acquire_timeout) as conn:
                row = await conn.fetchrow(FIND_ONE_LISTING_SQL, listing_id)
        except STORE_ERRORS as e:
            raise ExecutionError(f"Listing lookup failed: {e}") from e

        if row is None:
            raise NotFoundError("Listing not found.")

        return ListingDetail.model_validate(dict(row))
