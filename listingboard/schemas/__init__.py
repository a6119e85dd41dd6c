"""
Schemas module - Request/Response schemas for API endpoints.
"""

from listingboard.schemas.schemas import (
    SignupRequest, LoginRequest, UserResponse, LoginResponse, SignupResponse,
    ListingUpdate, ListingWrite, ListingResponse, ListingListResponse, SuccessResponse, ErrorResponse,
)

__all__ = [
    "SignupRequest", "LoginRequest", "UserResponse", "LoginResponse", "SignupResponse",
    "ListingUpdate", "ListingWrite", "ListingResponse", "ListingListResponse", "SuccessResponse", "ErrorResponse",
]
