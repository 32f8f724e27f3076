"""
Authentication Routes

POST /auth/register - Register new user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
POST /auth/logout - End session (clears onboarding wizard state)
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text

from app.db.postgres import fetch_one, get_db_session, new_id, utcnow
from app.core.auth import hash_password, verify_password, create_access_token, get_current_user
from app.core.errors import Conflict, Unauthenticated
from app.services.onboarding import OnboardingService
from app.services.profile_service import get_profile
from app.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new account.

    The student/employer profile is created on first use; login next.
    """
    with get_db_session() as db:
        # Check email exists
        if fetch_one(db, "SELECT id FROM profiles WHERE email = :email", {"email": request.email}):
            raise Conflict("Email already registered")

        now = utcnow()
        db.execute(
            text("""
                INSERT INTO profiles (id, email, password_hash, role, account_type, onboarding_completed,
                                      created_at, updated_at)
                VALUES (:id, :email, :password_hash, :role, 'free', :done, :now, :now)
            """),
            {
                "id": new_id(),
                "email": request.email,
                "password_hash": hash_password(request.password),
                "role": request.role.value,
                "done": False,
                "now": now,
            }
        )

    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        user = fetch_one(
            db,
            "SELECT id, password_hash, role FROM profiles WHERE email = :email",
            {"email": request.email}
        )

    if not user or not verify_password(request.password, user["password_hash"]):
        raise Unauthenticated("Invalid email or password")

    token = create_access_token(data={"sub": user["id"], "role": user["role"]})

    return TokenResponse(access_token=token, user_id=user["id"], role=user["role"])


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return UserResponse(**get_profile(user["id"]))


@router.post("/logout", response_model=MessageResponse)
async def logout(user: dict = Depends(get_current_user)):
    """
    Tokens are stateless, so the client just drops its token; the server
    side of sign-out is forgetting where the user was in the wizard.
    """
    OnboardingService(user["id"], user["role"]).reset()
    return MessageResponse(message="Logged out")
