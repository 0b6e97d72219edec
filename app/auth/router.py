"""Auth API router: register, login, logout, profile."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import service
from app.auth.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_db_user,
)
from app.core.config import settings
from app.core.database import get_db
from app.core.security import verify_password
from app.models.core import User
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserProfileResponse,
)
from app.schemas.common import MessageResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.APP_ENV == "production",
        "samesite": "strict",
    }


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create an account. Email and username must both be unused."""
    existing = await service.find_by_email_or_username(db, body.email, body.username)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        )

    try:
        user = await service.create_user(db, body)
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email or username
        await db.rollback()
        logger.info("register_conflict", username=body.username)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        ) from exc
    return RegisterResponse(
        message="User registered successfully",
        user=UserProfileResponse.model_validate(user),
    )


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    """Exchange email-or-username and password for an access token."""
    if not (body.email or body.username) or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="All fields are required",
        )

    user = await service.find_by_email_or_username(db, body.email, body.username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if not verify_password(body.password, user.password_hash):
        logger.info("login_rejected", user_id=str(user.id))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token, refresh_token = await service.issue_tokens(db, user)

    options = _cookie_options()
    response.set_cookie(ACCESS_TOKEN_COOKIE, access_token, **options)
    response.set_cookie(REFRESH_TOKEN_COOKIE, refresh_token, **options)

    logger.info("user_logged_in", user_id=str(user.id))
    return LoginResponse(
        message="User logged in successfully",
        user=UserProfileResponse.model_validate(user),
        access_token=access_token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    user: User = Depends(get_db_user),
    db: AsyncSession = Depends(get_db),
):
    """Forget the stored refresh token and clear both auth cookies."""
    await service.clear_refresh_token(db, user)

    options = _cookie_options()
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **options)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, **options)

    logger.info("user_logged_out", user_id=str(user.id))
    return MessageResponse(message="User logged out successfully")


@router.get("/me", response_model=UserProfileResponse)
async def get_me(user: User = Depends(get_db_user)):
    """Return the current user's profile."""
    return UserProfileResponse.model_validate(user)
