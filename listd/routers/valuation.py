"""
Property valuation route.
"""

from fastapi import APIRouter, Depends, Request

from listd.filtering import CriteriaParser
from listd.services import ValuationService
from .dependencies import get_valuation_service

router = APIRouter()


@router.get("/property-valuation")
async def property_valuation(
    request: Request,
    service: ValuationService = Depends(get_valuation_service)
):
    """
    Estimate sale and rent value of a property from comparable listings.

    1. Validates the property description
    2. Averages comparable asking prices per market segment
    3. Ranks the ten most location-similar comparables
    4. Records the valuation when `user_id` is supplied
    """
    valuation_request = CriteriaParser().parse_valuation_request(dict(request.query_params))
    result = await service.valuate(valuation_request)
    return {"data": {"valuation": result.model_dump(mode="json")}}
