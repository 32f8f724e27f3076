"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (sub = profile id)
- FastAPI dependencies for protected routes

A missing, malformed or expired token is always 401 so the client knows
to send the user back to sign-in.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import get_settings
from app.core.errors import Forbidden, Unauthenticated
from app.db.postgres import fetch_one, get_db_session

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; missing header is handled below as 401
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise Unauthenticated()

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise Unauthenticated("Invalid or expired token")

    # Verify user exists
    with get_db_session() as db:
        user = fetch_one(
            db,
            "SELECT id, email, role, account_type FROM profiles WHERE id = :id",
            {"id": payload["sub"]}
        )

    if not user:
        raise Unauthenticated("Invalid or expired token")

    return user


async def get_current_student(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require student role."""
    if user["role"] != "student":
        raise Forbidden("Students only")
    return user


async def get_current_employer(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require employer role."""
    if user["role"] != "employer":
        raise Forbidden("Employers only")
    return user
