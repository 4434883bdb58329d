"""
Reference list routes.
"""

from fastapi import APIRouter, Depends

from listd.services import ReferenceDataService
from .dependencies import get_reference_service

router = APIRouter()


@router.get("/listing-cities")
async def listing_cities(service: ReferenceDataService = Depends(get_reference_service)):
    """Cities with their region, alphabetical"""
    return {"data": await service.get_list("cities")}


@router.get("/property-types")
async def property_types(service: ReferenceDataService = Depends(get_reference_service)):
    return {"data": await service.get_list("property_types")}


@router.get("/listing-types")
async def listing_types(service: ReferenceDataService = Depends(get_reference_service)):
    return {"data": await service.get_list("listing_types")}


@router.get("/property-status")
async def property_status(service: ReferenceDataService = Depends(get_reference_service)):
    return {"data": await service.get_list("property_status")}
