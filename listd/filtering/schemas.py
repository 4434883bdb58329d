"""
Typed criteria validated from raw request parameters.

Numeric fields accept loosely formatted input ("₱1,500,000", "3 br") and are
normalized by stripping everything that cannot be part of a number before
the type is enforced. Enumerations are never coerced.
"""

import re
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from listd.models.enums import ListingType, PropertyType


# Digits, the decimal point and a sign survive; everything else is noise
_NON_NUMERIC = re.compile(r"[^0-9.\-]")

# Upper bounds of the INTEGER count columns and the BIGINT listing id
MAX_INTEGER = 2_147_483_647
MAX_BIGINT = 9_223_372_036_854_775_807


def process_number(value: Any) -> Any:
    """Strip non-numeric characters from a raw parameter value.

    Values that are already numbers pass through untouched. The result is
    handed to the field's type validator, which rejects anything that is
    still not a number (e.g. an empty string or "1.2.3").

    Args:
        value: Raw parameter value

    Returns:
        The cleaned string, or the value itself when it is not a string
    """
    if value is None or isinstance(value, (int, float, Decimal)):
        return value
    return _NON_NUMERIC.sub("", str(value))


class ListingCriteria(BaseModel):
    """Validated listing search criteria.

    Attributes:
        search: Free-text term ranked against listing descriptions
        property_type: Property type slug
        listing_type: Market segment slug
        min_*/max_*: Inclusive range bounds, applied only in pairs
        before/after: Keyset cursor markers; `after` wins when both are set
    """
    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    search: Optional[str] = None
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    min_bedrooms: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    max_bedrooms: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    min_bathrooms: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    max_bathrooms: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    min_car_spaces: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    max_car_spaces: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    min_sqm: Optional[Decimal] = Field(None, ge=0)
    max_sqm: Optional[Decimal] = Field(None, ge=0)
    before: Optional[Decimal] = Field(None, ge=0, le=MAX_BIGINT)
    after: Optional[Decimal] = Field(None, ge=0, le=MAX_BIGINT)

    @field_validator(
        "min_price", "max_price",
        "min_bedrooms", "max_bedrooms",
        "min_bathrooms", "max_bathrooms",
        "min_car_spaces", "max_car_spaces",
        "min_sqm", "max_sqm",
        "before", "after",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        return process_number(value)

    def has_range(self, low_field: str, high_field: str) -> bool:
        """Whether both bounds of a range pair are present."""
        return getattr(self, low_field) is not None and getattr(self, high_field) is not None

    @property
    def is_search(self) -> bool:
        return bool(self.search)


class ValuationRequest(BaseModel):
    """Validated property description for a valuation.

    Attributes:
        user_id: External identity of the requester; enables persistence
        property_type: Property type slug
        sqm: Target area in square meters (minimum 20)
        city: City or locality text matched fuzzily against known cities
        address: Street address, stored verbatim
        google_places_data_id: Optional external place reference
        google_places_details_id: Optional external place reference
    """
    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    user_id: Optional[str] = None
    property_type: PropertyType
    sqm: Decimal = Field(..., ge=20)
    city: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    google_places_data_id: Optional[str] = None
    google_places_details_id: Optional[str] = None

    @field_validator("sqm", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        return process_number(value)
