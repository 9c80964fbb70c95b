"""Auth API router: Google sign-in, token refresh, me, logout."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_active_user
from app.auth.jwt import create_token_pair, decode_token
from app.auth.oauth import GoogleAuthError, fetch_google_user_info, get_google_user_info, oauth
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    GoogleTokenRequest,
    MessageResponse,
    RefreshRequest,
    TokenResponse,
    UserResponse,
)
from app.services.user_service import find_or_create_oauth_user, get_user_by_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _tokens_for(user: User) -> dict[str, str]:
    return create_token_pair(str(user.id), email=user.email, role=user.role.value)


# ---------------------------------------------------------------------------
# POST /google (client-side sign-in, token exchange)
# ---------------------------------------------------------------------------


@router.post("/google", response_model=AuthResponse)
async def google_token_login(body: GoogleTokenRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Authenticate with a Google access token obtained by the client."""
    try:
        user_info = await fetch_google_user_info(body.token)
    except GoogleAuthError as exc:
        logger.warning("Google token exchange failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from None

    user, _created = await find_or_create_oauth_user(
        db=db,
        email=user_info["email"],
        name=user_info["name"],
        avatar_url=user_info.get("avatar_url"),
        provider="google",
        provider_id=user_info["provider_id"],
    )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**_tokens_for(user)),
    )


# ---------------------------------------------------------------------------
# Google OAuth redirect flow
# ---------------------------------------------------------------------------


@router.get("/google")
async def google_login(request: Request) -> RedirectResponse:
    """Redirect to Google's OAuth consent screen."""
    return await oauth.google.authorize_redirect(request, settings.google_redirect_uri)  # type: ignore[return-value]


@router.get("/google/callback")
async def google_callback(request: Request, db: AsyncSession = Depends(get_db)) -> RedirectResponse:
    """Handle Google OAuth callback: find or create user, redirect to frontend with tokens."""
    try:
        token = await oauth.google.authorize_access_token(request)
    except Exception as exc:
        logger.warning("Google OAuth callback failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Google authentication failed. Please try again.",
        ) from None

    try:
        user_info = await get_google_user_info(token)
    except GoogleAuthError as exc:
        logger.warning("Google OAuth callback returned no profile: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from None

    user, _created = await find_or_create_oauth_user(
        db=db,
        email=user_info["email"],
        name=user_info["name"],
        avatar_url=user_info.get("avatar_url"),
        provider="google",
        provider_id=user_info["provider_id"],
    )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    tokens = _tokens_for(user)
    redirect_url = (
        f"{settings.frontend_url}/auth/callback"
        f"?access_token={tokens['access_token']}"
        f"&refresh_token={tokens['refresh_token']}"
    )
    return RedirectResponse(url=redirect_url)


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired refresh token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_token(body.refresh_token)
    except JWTError:
        raise invalid from None

    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise invalid from None

    user = await get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(**_tokens_for(user))


# ---------------------------------------------------------------------------
# GET /me, POST /logout
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    """Return the currently authenticated user's profile."""
    return UserResponse.model_validate(current_user)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request) -> MessageResponse:
    """Clear the server-side OAuth session.

    JWTs are stateless; clients discard their tokens.
    """
    request.session.clear()
    return MessageResponse(message="User logged out successfully")
