"""
Request criteria parsing for the catalog.

This module validates raw request parameters into typed listing criteria
and valuation requests.
"""

from .schemas import ListingCriteria, ValuationRequest, process_number
from .criteria_parser import CriteriaParser

__all__ = [
    'ListingCriteria',
    'ValuationRequest',
    'process_number',
    'CriteriaParser',
]
