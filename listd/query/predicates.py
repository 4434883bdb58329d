"""
Predicate composition for listing queries.

A predicate is a pure value: what it filters on, how, and which values it
binds. Nothing here produces query text, so composing the same criteria
twice always yields equal predicates.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Tuple

from listd.filtering.schemas import ListingCriteria
from listd.models.enums import Ordering, PropertyStatus, PropertyType
from .pagination import Cursor


MINIMUM_PRICE = 5000

# Column targets, qualified by the aliases of the catalog joins
LISTING_ID = "listing.id"
LISTING_PRICE = "listing.price"
LISTING_DESCRIPTION = "listing.description"
STATUS_SLUG = "property_status.slug"
PROPERTY_TYPE_SLUG = "property_type.slug"
LISTING_TYPE_SLUG = "listing_type.slug"
BEDROOMS = "property.bedrooms"
BATHROOMS = "property.bathrooms"
PARKING_SPACE = "property.parking_space"
FLOOR_AREA = "property.floor_area"
LOT_AREA = "property.lot_area"
BUILDING_SIZE = "property.building_size"
CITY_NAME = "city.name"
RELEVANCE_SCORE = "description_similarity"

WORD_SIMILARITY = "word_similarity"
STRICT_WORD_SIMILARITY = "strict_word_similarity"


class PredicateKind(str, Enum):
    """Shape of a filter condition"""
    EQUALITY = "equality"
    RANGE = "range"
    FUZZY_THRESHOLD = "fuzzy-threshold"
    CURSOR_BOUND = "cursor-bound"


@dataclass(frozen=True)
class Predicate:
    """
    One composable filter condition.

    Attributes:
        kind: Condition shape
        target: Column the condition applies to
        values: Bound values; RANGE holds (low, high) with high None for an
            open upper bound, FUZZY_THRESHOLD holds (term, threshold)
        operator: Comparison for CURSOR_BOUND ("<" or ">"), similarity
            function name for FUZZY_THRESHOLD
    """
    kind: PredicateKind
    target: str
    values: Tuple[Any, ...]
    operator: str = ""

    @classmethod
    def equality(cls, target: str, value: Any) -> 'Predicate':
        return cls(PredicateKind.EQUALITY, target, (value,))

    @classmethod
    def between(cls, target: str, low: Any, high: Any) -> 'Predicate':
        return cls(PredicateKind.RANGE, target, (low, high))

    @classmethod
    def at_least(cls, target: str, low: Any) -> 'Predicate':
        return cls(PredicateKind.RANGE, target, (low, None))

    @classmethod
    def similar(cls, function: str, target: str, term: str, threshold: float) -> 'Predicate':
        return cls(PredicateKind.FUZZY_THRESHOLD, target, (term, threshold), function)

    @classmethod
    def cursor_bound(cls, target: str, cursor: Cursor) -> 'Predicate':
        return cls(PredicateKind.CURSOR_BOUND, target, (cursor.key,), cursor.operator)


def area_column(property_type: Optional[PropertyType]) -> str:
    """Column holding the authoritative area for a property type.

    Condominiums are sized by floor area, warehouses by building size and
    every other type by lot area.
    """
    if property_type is PropertyType.CONDOMINIUM:
        return FLOOR_AREA
    if property_type is PropertyType.WAREHOUSE:
        return BUILDING_SIZE
    return LOT_AREA


def ordering_for(criteria: ListingCriteria) -> Ordering:
    """Search criteria rank by relevance, everything else by identity."""
    return Ordering.RELEVANCE if criteria.is_search else Ordering.IDENTITY


class PredicateComposer:
    """Maps listing criteria to an ordered tuple of predicates.

    Order is fixed: status, price floor, property type, listing type, text
    relevance, bedrooms, bathrooms, parking, price, area, cursor.
    """

    RANGES = (
        ("min_bedrooms", "max_bedrooms", BEDROOMS),
        ("min_bathrooms", "max_bathrooms", BATHROOMS),
        ("min_car_spaces", "max_car_spaces", PARKING_SPACE),
        ("min_price", "max_price", LISTING_PRICE),
    )

    def __init__(self, minimum_price: int = MINIMUM_PRICE):
        self.minimum_price = minimum_price

    def compose(self, criteria: ListingCriteria) -> Tuple[Predicate, ...]:
        """
        Compose every predicate a listing query needs, cursor included.

        Args:
            criteria: Validated listing criteria

        Returns:
            Predicates in evaluation order
        """
        predicates = [
            Predicate.equality(STATUS_SLUG, PropertyStatus.AVAILABLE.value),
            Predicate.at_least(LISTING_PRICE, Decimal(self.minimum_price)),
        ]

        if criteria.property_type is not None:
            predicates.append(
                Predicate.equality(PROPERTY_TYPE_SLUG, criteria.property_type.value)
            )

        if criteria.listing_type is not None:
            predicates.append(
                Predicate.equality(LISTING_TYPE_SLUG, criteria.listing_type.value)
            )

        if criteria.is_search:
            predicates.append(
                Predicate.similar(WORD_SIMILARITY, LISTING_DESCRIPTION, criteria.search, 0.0)
            )

        # A lone bound is ignored; ranges only apply in pairs
        for low_field, high_field, target in self.RANGES:
            if criteria.has_range(low_field, high_field):
                predicates.append(
                    Predicate.between(
                        target,
                        getattr(criteria, low_field),
                        getattr(criteria, high_field),
                    )
                )

        if criteria.property_type is not None and criteria.has_range("min_sqm", "max_sqm"):
            predicates.append(
                Predicate.between(
                    area_column(criteria.property_type),
                    criteria.min_sqm,
                    criteria.max_sqm,
                )
            )

        cursor = self.cursor(criteria)
        if cursor is not None:
            target = LISTING_ID if ordering_for(criteria) is Ordering.IDENTITY else RELEVANCE_SCORE
            predicates.append(Predicate.cursor_bound(target, cursor))

        return tuple(predicates)

    def cursor(self, criteria: ListingCriteria) -> Optional[Cursor]:
        """Cursor of the request under its active ordering."""
        return Cursor.from_markers(criteria.before, criteria.after, ordering_for(criteria))
