"""API routers"""

from . import listings, reference, valuation

__all__ = ["listings", "reference", "valuation"]
