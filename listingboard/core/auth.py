"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes

The role carried by a token is never trusted on its own: every protected
request re-reads the user row and checks the stored role.
"""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from listingboard.core.config import Settings, get_settings
from listingboard.core.errors import AuthError, ForbiddenError
from listingboard.db.postgres import Database, get_database
from listingboard.services.user_service import UserService

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; missing headers are reported as 401 below
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash. Malformed hashes never verify."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def is_override_email(email: str, settings: Settings) -> bool:
    """True when the break-glass admin login is configured for this email."""
    if not (settings.admin_email and settings.admin_password):
        return False
    return email.strip().lower() == settings.admin_email.strip().lower()


def matches_override_password(email: str, password: str, settings: Settings) -> bool:
    return is_override_email(email, settings) and hmac.compare_digest(
        password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_app_settings(request: Request) -> Settings:
    """Settings bound to the running app (falls back to the environment)."""
    return getattr(request.app.state, "settings", None) or get_settings()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    database: Database = Depends(get_database),
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise AuthError("Not authenticated")

    payload = decode_token(credentials.credentials, settings)
    if not payload or not payload.get("sub"):
        raise AuthError("Invalid or expired token")

    user = UserService(database).get_by_id(payload["sub"])
    if not user:
        raise AuthError("Invalid or expired token")

    # Break-glass logins carry the admin role in the token
    if payload.get("override") and is_override_email(user["email"], settings):
        user["role"] = "admin"
    return user


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require admin role."""
    if user["role"] != "admin":
        raise ForbiddenError("Admins only")
    return user
