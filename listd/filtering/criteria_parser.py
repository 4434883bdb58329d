"""
Criteria parsing for raw query parameters.

Turns the string-keyed parameters of a request into typed criteria, or
fails with the first offending field.
"""

from typing import Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from listd.error_handling.errors import ValidationError
from .schemas import ListingCriteria, ValuationRequest

CriteriaT = TypeVar("CriteriaT", bound=BaseModel)

class CriteriaParser:
    """Validates raw request parameters into typed criteria.

    Errors are not aggregated: the first failing field in declaration
    order is reported.
    """

    def parse_listing_criteria(self, params: Mapping[str, str]) -> ListingCriteria:
        """Validate listing search parameters.

        Args:
            params: Raw query-string parameters

        Returns:
            Fully typed listing criteria

        Raises:
            ValidationError: On the first malformed or out-of-domain field
        """
        return self._parse(ListingCriteria, params)

    def parse_valuation_request(self, params: Mapping[str, str]) -> ValuationRequest:
        """Validate valuation parameters.

        Raises:
            ValidationError: On the first missing, malformed or out-of-domain field
        """
        return self._parse(ValuationRequest, params)

    def _parse(self, schema: Type[CriteriaT], params: Mapping[str, str]) -> CriteriaT:
        cleaned = self._drop_blank(params)
        try:
            return schema.model_validate(cleaned)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first.get("loc") else "query"
            raise ValidationError(field, first["msg"]) from e

    @staticmethod
    def _drop_blank(params: Mapping[str, str]) -> dict:
        """Treat empty parameters (`?min_price=`) as absent."""
        cleaned = {}
        for key, value in params.items():
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        return cleaned
