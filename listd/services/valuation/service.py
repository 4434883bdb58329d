"""
Valuation workflow: estimate, then record for identified requesters.
"""

import logging
from typing import Optional

import asyncpg

from listd.db import STORE_ERRORS, acquire_connection
from listd.error_handling.error_handler import log_error
from listd.error_handling.errors import ExecutionError, RecordingError
from listd.filtering.schemas import ValuationRequest
from listd.models import ValuationResult
from .estimator import ValuationEstimator
from .recorder import ValuationRecorder

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Runs the valuation reads and the optional recording in one transaction.

    A failed recording rolls the whole transaction back but does not fail
    the request: the computed estimate is still returned, unpersisted.
    """

    def __init__(
        self,
        pool: asyncpg.Pool,
        acquire_timeout: float = 5.0,
        estimator: Optional[ValuationEstimator] = None,
        recorder: Optional[ValuationRecorder] = None
    ):
        self.pool = pool
        self.acquire_timeout = acquire_timeout
        self.estimator = estimator or ValuationEstimator()
        self.recorder = recorder or ValuationRecorder()

    async def valuate(self, request: ValuationRequest) -> ValuationResult:
        """
        Estimate a property's value and record it when a requester is known.

        Args:
            request: Validated valuation request

        Returns:
            The computed estimate

        Raises:
            ExecutionError: If the estimation reads fail
        """
        result = None

        try:
            async with acquire_connection(self.pool, self.acquire_timeout) as conn:
                try:
                    async with conn.transaction():
                        result = await self.estimator.estimate(conn, request)
                        if request.user_id:
                            await self.recorder.record(conn, request, result)
                except RecordingError as e:
                    log_error(
                        "valuation.record",
                        e,
                        {'user_id': request.user_id, 'city': request.city},
                    )
        except STORE_ERRORS as e:
            raise ExecutionError(f"Valuation failed: {e}") from e

        return result
