"""Enumerations shared by criteria, predicates and valuations"""

from enum import Enum


class PropertyType(str, Enum):
    """Property type slug"""
    CONDOMINIUM = "condominium"
    HOUSE = "house"
    WAREHOUSE = "warehouse"
    LAND = "land"


class ListingType(str, Enum):
    """Market segment a listing is published in"""
    FOR_SALE = "for-sale"
    FOR_RENT = "for-rent"


class PropertyStatus(str, Enum):
    """Listing availability slug"""
    AVAILABLE = "available"


class Ordering(str, Enum):
    """Active ordering key of a listing page"""
    IDENTITY = "identity"
    RELEVANCE = "relevance"
