"""
Listing Routes

GET /listings - List all listings (newest first, optional ?q= search)
POST /listings - Create listing (admin only)
GET /listings/{listing_id} - Get listing with its rendered outline
PUT /listings/{listing_id} - Update listing (admin only)
DELETE /listings/{listing_id} - Delete listing (admin only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from listingboard.core.auth import get_app_settings, get_current_admin
from listingboard.core.config import Settings
from listingboard.db.postgres import Database, get_database
from listingboard.schemas.schemas import (
    ListingDetailEnvelope, ListingEnvelope, ListingListResponse, ListingUpdate, ListingWrite,
    SuccessResponse,
)
from listingboard.services.details_parser import parse_details
from listingboard.services.listing_service import ListingService

router = APIRouter(prefix="/listings", tags=["Listings"])


def get_listing_service(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
) -> ListingService:
    return ListingService(database, max_listings=settings.max_listings)


@router.get("", response_model=ListingListResponse)
async def list_listings(
    q: Optional[str] = Query(None, description="Search in title and short description"),
    service: ListingService = Depends(get_listing_service),
):
    """List all listings, newest first."""
    listings = service.list_all(search=q)
    return ListingListResponse(listings=listings, total=len(listings))


@router.post("", response_model=ListingEnvelope, status_code=201)
async def create_listing(
    data: ListingWrite,
    admin: dict = Depends(get_current_admin),
    service: ListingService = Depends(get_listing_service),
):
    """Create a new listing. Only admins can create listings."""
    listing = service.create(data, created_by=admin["id"])
    return ListingEnvelope(listing=listing)


@router.get("/{listing_id}", response_model=ListingDetailEnvelope)
async def get_listing(listing_id: str, service: ListingService = Depends(get_listing_service)):
    """Get details of a specific listing."""
    listing = service.get(listing_id)
    return ListingDetailEnvelope(listing=listing, sections=parse_details(listing["full_details"]))


@router.put("/{listing_id}", response_model=ListingEnvelope)
async def update_listing(
    listing_id: str,
    data: ListingUpdate,
    admin: dict = Depends(get_current_admin),
    service: ListingService = Depends(get_listing_service),
):
    """Update a listing. Every editable field is replaced; created_by is rejected."""
    listing = service.update(listing_id, data)
    return ListingEnvelope(listing=listing)


@router.delete("/{listing_id}", response_model=SuccessResponse)
async def delete_listing(
    listing_id: str,
    admin: dict = Depends(get_current_admin),
    service: ListingService = Depends(get_listing_service),
):
    """Delete a listing. Unknown ids are a 404."""
    service.delete(listing_id)
    return SuccessResponse()
