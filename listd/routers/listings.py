"""
Listing search and lookup routes.
"""

from fastapi import APIRouter, Depends, Request

from listd.filtering import CriteriaParser
from listd.models import ListingPage
from listd.services import ListingSearchService
from .dependencies import get_listing_service

router = APIRouter()


@router.get("/property-listings", response_model=ListingPage)
async def search_listings(
    request: Request,
    service: ListingSearchService = Depends(get_listing_service)
):
    """
    Browse or search available listings.

    Accepts the listing criteria as query-string parameters. Without
    `search` the page is ordered newest first; with it, by description
    relevance. Page through with the returned `before`/`after` values.
    """
    criteria = CriteriaParser().parse_listing_criteria(dict(request.query_params))
    return await service.search(criteria)


@router.get("/property-listings/{listing_id}")
async def get_listing(
    listing_id: int,
    service: ListingSearchService = Depends(get_listing_service)
):
    """
    Get a single listing with its images.
    """
    listing = await service.get_listing(listing_id)
    return {"data": listing.model_dump(mode="json")}
