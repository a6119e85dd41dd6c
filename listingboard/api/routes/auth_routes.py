"""
Authentication Routes

POST /auth/signup - Register new user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, Depends

from listingboard.core.auth import (
    create_access_token, get_app_settings, get_current_user, hash_password,
    matches_override_password, verify_password,
)
from listingboard.core.config import Settings
from listingboard.core.errors import AuthError
from listingboard.core.logging_config import get_logger
from listingboard.db.postgres import Database, get_database
from listingboard.schemas.schemas import (
    LoginRequest, LoginResponse, SignupRequest, SignupResponse, UserEnvelope,
)
from listingboard.services.user_service import UserService, public_user

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = get_logger(__name__)


@router.post("/signup", response_model=SignupResponse, status_code=201)
async def signup(
    request: SignupRequest,
    settings: Settings = Depends(get_app_settings),
    database: Database = Depends(get_database),
):
    """
    Register a new user account.

    The role is derived from the admin allow-list; the password is only
    ever stored as a bcrypt hash.
    """
    role = "admin" if settings.is_admin_email(request.email) else "user"
    user = UserService(database).create(
        email=request.email,
        password_hash=hash_password(request.password),
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone,
        role=role,
    )
    logger.info("User registered: id=%s role=%s", user["id"], role)
    return SignupResponse(user=public_user(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    settings: Settings = Depends(get_app_settings),
    database: Database = Depends(get_database),
):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    row = UserService(database).get_by_email(request.email, include_hash=True)
    if not row:
        raise AuthError("Invalid email or password")

    user = public_user(row)
    claims = {"sub": str(user["id"])}

    if matches_override_password(request.email, request.password, settings):
        logger.warning("Admin override password used for %s", user["email"])
        user["role"] = "admin"
        claims["override"] = True
    elif not verify_password(request.password, row["password_hash"]):
        raise AuthError("Invalid email or password")

    claims["role"] = user["role"]
    token = create_access_token(claims, settings)
    return LoginResponse(user=user, access_token=token)


@router.get("/me", response_model=UserEnvelope)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return UserEnvelope(user=public_user(user))
