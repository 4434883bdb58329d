"""Catalog services"""

from .listing_search import ListingSearchService
from .reference_data import ReferenceDataService
from .valuation import ValuationEstimator, ValuationRecorder, ValuationService

__all__ = [
    "ListingSearchService",
    "ReferenceDataService",
    "ValuationEstimator",
    "ValuationRecorder",
    "ValuationService",
]
