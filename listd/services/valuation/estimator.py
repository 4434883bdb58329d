"""
Comparable-sales valuation for an arbitrary property description.

Pipeline per market segment (sale, rent):
1. SELECT - available listings of the same type whose area lies within the
   tolerance band and whose city is similar to the requested one
2. AVERAGE - mean asking price of that set, zero when it is empty
3. NORMALIZE - divide by the requested area
4. RANK - up to ten comparables by location similarity
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional, Tuple

import asyncpg

from listd.config import QueryConfig
from listd.filtering.schemas import ValuationRequest
from listd.formatting import format_currency, to_decimal
from listd.models import Comparable, ListingType, PropertyStatus, SegmentValuation, ValuationResult
from listd.query import CATALOG_JOINS, CompiledQuery, ParameterList, Predicate, area_column, render_where
from listd.query.predicates import (
    CITY_NAME,
    LISTING_PRICE,
    LISTING_TYPE_SLUG,
    PROPERTY_TYPE_SLUG,
    STATUS_SLUG,
    STRICT_WORD_SIMILARITY,
)

logger = logging.getLogger(__name__)


@dataclass
class SegmentEstimate:
    """Raw figures of one segment before formatting"""
    listing_type: ListingType
    average_price: Decimal
    price_per_sqm: Decimal
    comparables: List[Comparable]

    def to_valuation(self) -> SegmentValuation:
        return SegmentValuation(
            average_price=format_currency(self.average_price),
            price_per_sqm=format_currency(self.price_per_sqm),
            similar_properties=self.comparables,
        )


class ValuationEstimator:
    """
    Estimates sale and rent value from comparable listings.

    Runs on a connection supplied by the caller so the reads can share a
    transaction with the recording of the result.
    """

    def __init__(self, config: Optional[QueryConfig] = None):
        self.config = config or QueryConfig()

    def area_band(self, sqm: Decimal) -> Tuple[Decimal, Decimal]:
        """
        Inclusive area bounds around the target size.

        Computed in decimal arithmetic so that a comparable sized exactly
        at a bound is never lost to float rounding.
        """
        tolerance = Decimal(self.config.area_tolerance)
        sqm = Decimal(sqm)
        return sqm * (1 - tolerance), sqm * (1 + tolerance)

    def compose(self, request: ValuationRequest, listing_type: ListingType) -> Tuple[Predicate, ...]:
        """Predicates selecting the comparables of one segment."""
        low, high = self.area_band(request.sqm)
        return (
            Predicate.equality(STATUS_SLUG, PropertyStatus.AVAILABLE.value),
            Predicate.equality(PROPERTY_TYPE_SLUG, request.property_type.value),
            Predicate.equality(LISTING_TYPE_SLUG, listing_type.value),
            Predicate.between(area_column(request.property_type), low, high),
            Predicate.similar(
                STRICT_WORD_SIMILARITY,
                CITY_NAME,
                request.city,
                self.config.location_similarity_threshold,
            ),
            Predicate.at_least(LISTING_PRICE, Decimal(self.config.minimum_price)),
        )

    def average_query(self, request: ValuationRequest, listing_type: ListingType) -> CompiledQuery:
        params = ParameterList()
        where = render_where(self.compose(request, listing_type), params)
        sql = "\n".join([
            f"SELECT AVG({LISTING_PRICE}) AS average_price",
            CATALOG_JOINS,
            where,
        ])
        return CompiledQuery(sql=sql, params=params.values())

    def comparables_query(self, request: ValuationRequest, listing_type: ListingType) -> CompiledQuery:
        params = ParameterList()
        similarity = f"STRICT_WORD_SIMILARITY({CITY_NAME}, {params.add(request.city)}) AS city_name_similarity"
        where = render_where(self.compose(request, listing_type), params)
        limit = params.add(self.config.comparables_limit)
        sql = "\n".join([
            "WITH comparables AS (",
            "SELECT",
            "listing.id,",
            "listing.listing_title,",
            "listing.listing_url,",
            "listing.price_formatted,",
            similarity,
            CATALOG_JOINS,
            where,
            ")",
            "SELECT * FROM comparables",
            "ORDER BY city_name_similarity DESC",
            f"LIMIT {limit}",
        ])
        return CompiledQuery(sql=sql, params=params.values())

    async def estimate_segment(
        self,
        conn: asyncpg.Connection,
        request: ValuationRequest,
        listing_type: ListingType
    ) -> SegmentEstimate:
        """
        Estimate one market segment.

        Args:
            conn: Connection, typically inside an open transaction
            request: Validated valuation request
            listing_type: Segment to estimate

        Returns:
            SegmentEstimate; an empty comparable set yields zeros
        """
        average_query = self.average_query(request, listing_type)
        comparables_query = self.comparables_query(request, listing_type)

        average = await conn.fetchval(average_query.sql, *average_query.params)
        rows = await conn.fetch(comparables_query.sql, *comparables_query.params)

        average_price = to_decimal(average)
        price_per_sqm = self.price_per_sqm(average_price, request.sqm)

        logger.info(
            f"Valuation {listing_type.value}: {len(rows)} comparables near "
            f"'{request.city}', average {average_price}"
        )

        return SegmentEstimate(
            listing_type=listing_type,
            average_price=average_price,
            price_per_sqm=price_per_sqm,
            comparables=[Comparable.model_validate(dict(row)) for row in rows],
        )

    @staticmethod
    def price_per_sqm(average_price: Any, sqm: Any) -> Decimal:
        """Average price over area; zero whenever the division is meaningless."""
        area = to_decimal(sqm)
        if area <= 0:
            return Decimal(0)
        return to_decimal(to_decimal(average_price) / area)

    async def estimate(self, conn: asyncpg.Connection, request: ValuationRequest) -> ValuationResult:
        """Estimate both segments and assemble the formatted result."""
        sale = await self.estimate_segment(conn, request, ListingType.FOR_SALE)
        rent = await self.estimate_segment(conn, request, ListingType.FOR_RENT)

        return ValuationResult(
            sale=sale.to_valuation(),
            rent=rent.to_valuation(),
            property_type=request.property_type,
            sqm=float(request.sqm),
        )
