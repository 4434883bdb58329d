"""Data models for the Listd catalog API"""

from .enums import PropertyType, ListingType, PropertyStatus, Ordering
from .listing import Listing, ListingDetail, ListingPage, PropertyImage
from .valuation import Comparable, SegmentValuation, ValuationResult, ValuationRecord
from .reference import City, CatalogTerm

__all__ = [
    "PropertyType",
    "ListingType",
    "PropertyStatus",
    "Ordering",
    "Listing",
    "ListingDetail",
    "ListingPage",
    "PropertyImage",
    "Comparable",
    "SegmentValuation",
    "ValuationResult",
    "ValuationRecord",
    "City",
    "CatalogTerm",
]
