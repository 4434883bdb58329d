"""Valuation services"""

from .estimator import ValuationEstimator, SegmentEstimate
from .recorder import ValuationRecorder
from .service import ValuationService

__all__ = ["ValuationEstimator", "SegmentEstimate", "ValuationRecorder", "ValuationService"]
