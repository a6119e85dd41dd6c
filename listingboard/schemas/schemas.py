"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Request bodies accept snake_case names and the camelCase names used by the
web client; unknown fields are rejected.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
SHORT_DESCRIPTION_MAX = 200


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    user = "user"
    admin = "admin"


# ============================================================
# BASE
# ============================================================

class RequestSchema(BaseModel):
    """Strict request body: camelCase or snake_case keys, nothing extra."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


def _required(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValueError("Missing required fields")
    return value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ============================================================
# AUTH SCHEMAS
# ============================================================

class SignupRequest(RequestSchema):
    email: str
    password: str
    first_name: str
    last_name: str
    phone: Optional[str] = None

    @field_validator("email", "password", "first_name", "last_name", mode="before")
    @classmethod
    def not_blank(cls, v):
        return _required(v)

    @field_validator("email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v.strip()):
            raise ValueError("Invalid email format")
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v

    @field_validator("phone")
    @classmethod
    def empty_phone(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class LoginRequest(RequestSchema):
    email: str
    password: str

    @field_validator("email", "password", mode="before")
    @classmethod
    def not_blank(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Email and password are required")
        return v


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: UserRole
    name: str
    created_at: Optional[datetime] = None


class UserEnvelope(BaseModel):
    user: UserResponse


class LoginResponse(BaseModel):
    success: bool = True
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class SignupResponse(BaseModel):
    success: bool = True
    user: UserResponse


# ============================================================
# LISTING SCHEMAS
# ============================================================

class ListingUpdate(RequestSchema):
    """Body for update; PUT replaces every editable field. The creator is fixed at create time."""

    title: str = Field(..., max_length=255)
    short_description: str = Field(..., max_length=SHORT_DESCRIPTION_MAX)
    full_details: str
    apply_url: str = Field(..., max_length=500)
    has_certification: bool = False
    location: Optional[str] = Field(None, max_length=255)
    duration: Optional[str] = Field(None, max_length=100)
    deadline: Optional[date] = None

    @field_validator("title", "short_description", "full_details", "apply_url", mode="before")
    @classmethod
    def not_blank(cls, v):
        return _required(v)

    @field_validator("has_certification", mode="before")
    @classmethod
    def null_is_false(cls, v):
        return False if v is None else v

    @field_validator("location", "duration", "deadline", mode="before")
    @classmethod
    def empty_is_absent(cls, v):
        return _blank_to_none(v)


class ListingWrite(ListingUpdate):
    """Body for create."""

    created_by: Optional[str] = None

    @field_validator("created_by", mode="before")
    @classmethod
    def empty_creator_is_absent(cls, v):
        return _blank_to_none(v)


class ListingResponse(BaseModel):
    id: str
    title: str
    short_description: str
    full_details: str
    has_certification: bool
    apply_url: str
    location: Optional[str] = None
    duration: Optional[str] = None
    deadline: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None


class ListingEnvelope(BaseModel):
    listing: ListingResponse


class DetailSection(BaseModel):
    heading: Optional[str] = None
    level: int = 2
    paragraphs: List[str] = []
    bullets: List[str] = []


class ListingDetailEnvelope(BaseModel):
    listing: ListingResponse
    sections: List[DetailSection] = []


class ListingListResponse(BaseModel):
    listings: List[ListingResponse]
    total: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
