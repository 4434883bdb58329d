"""Listing data models"""

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Union


class Listing(BaseModel):
    """Listing row as projected by the catalog queries"""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int
    listing_title: Optional[str] = None
    listing_url: Optional[str] = None
    price: Optional[Decimal] = None
    price_formatted: Optional[str] = None
    price_for_rent_per_sqm: Optional[Decimal] = None
    price_for_sale_per_sqm: Optional[Decimal] = None
    price_for_rent_per_sqm_formatted: Optional[str] = None
    price_for_sale_per_sqm_formatted: Optional[str] = None
    listing_type: Optional[str] = None
    property_status: Optional[str] = None
    property_type: Optional[str] = None
    sub_category: Optional[str] = None
    building_name: Optional[str] = None
    subdivision_name: Optional[str] = None
    project_name: Optional[str] = None
    floor_area: Optional[Decimal] = None
    lot_area: Optional[Decimal] = None
    building_size: Optional[Decimal] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    parking_space: Optional[int] = None
    city: Optional[str] = None
    area: Optional[str] = None
    address: Optional[str] = None
    features: Optional[Any] = None
    main_image_url: Optional[str] = None
    coordinates: Optional[List[float]] = None
    latitude_in_text: Optional[str] = None
    longitude_in_text: Optional[str] = None
    description: Optional[str] = None
    description_similarity: Optional[float] = None
    created_at: Optional[datetime] = None


class PropertyImage(BaseModel):
    """Image attached to a listing"""
    id: int
    url: str


class ListingDetail(Listing):
    """Single-listing view with images and agent"""
    equipments: Optional[Any] = None
    agent_name: Optional[str] = None
    scraped_property: Optional[Any] = None
    property_images: Optional[List[PropertyImage]] = None


class ListingPage(BaseModel):
    """One keyset page of listings with the bounds of the next request"""
    before: Optional[Union[int, float]] = None
    after: Optional[Union[int, float]] = None
    count: int
    data: List[Listing]
