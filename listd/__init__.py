"""Listd catalog API: listing search and comparable-sales valuation."""

__version__ = "0.1.0"
