"""Valuation data models"""

from pydantic import BaseModel, ConfigDict
from decimal import Decimal
from typing import List, Optional

from .enums import PropertyType


class Comparable(BaseModel):
    """Listing used as evidence for a valuation"""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int
    listing_title: Optional[str] = None
    listing_url: Optional[str] = None
    price_formatted: Optional[str] = None
    city_name_similarity: float


class SegmentValuation(BaseModel):
    """Valuation of one market side (sale or rent)"""
    average_price: str
    price_per_sqm: str
    similar_properties: List[Comparable] = []


class ValuationResult(BaseModel):
    """Estimate for both market segments"""
    sale: SegmentValuation
    rent: SegmentValuation
    property_type: PropertyType
    sqm: float


class ValuationRecord(BaseModel):
    """Snapshot of a valuation persisted for an identified requester"""
    user_id: int
    city_id: Optional[int] = None
    address: str
    property_size: Decimal
    property_type: PropertyType
    estimated_formatted_average_price_sale: str
    estimated_formatted_average_price_per_sqm_sale: str
    top_ten_similar_properties_sale: List[dict] = []
    estimated_formatted_average_price_rent: str
    estimated_formatted_average_price_per_sqm_rent: str
    top_ten_similar_properties_rent: List[dict] = []
    google_places_data_id: Optional[str] = None
    google_places_details_id: Optional[str] = None
