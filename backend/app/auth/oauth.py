"""Google sign-in: authlib redirect flow plus access-token exchange."""

import httpx
from authlib.integrations.starlette_client import OAuth

from app.config import settings

oauth = OAuth()

# Google OAuth via OpenID Connect (auto-discovers endpoints)
oauth.register(
    name="google",
    client_id=settings.google_client_id,
    client_secret=settings.google_client_secret,
    server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
    client_kwargs={"scope": "openid email profile"},
)


class GoogleAuthError(Exception):
    """Google rejected the token or returned an unusable profile."""


def _standardize(userinfo: dict) -> dict:
    return {
        "email": userinfo.get("email", ""),
        "name": userinfo.get("name", ""),
        "avatar_url": userinfo.get("picture"),
        "provider": "google",
        "provider_id": userinfo.get("sub", ""),
    }


async def get_google_user_info(token: dict) -> dict:
    """Extract standardized user info from an authlib token response.

    Returns:
        dict with keys: email, name, avatar_url, provider, provider_id

    Raises:
        GoogleAuthError: If the token carries no userinfo email.
    """
    info = _standardize(token.get("userinfo") or {})
    if not info["email"]:
        raise GoogleAuthError("Invalid Google token")
    return info


async def fetch_google_user_info(access_token: str, client: httpx.AsyncClient | None = None) -> dict:
    """Exchange a Google access token for the user's profile.

    Used by clients that complete Google sign-in themselves and post the
    token to the API.

    Raises:
        GoogleAuthError: If Google rejects the token or the profile has no email.
    """
    headers = {"Authorization": f"Bearer {access_token}"}
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=10.0) as owned:
                response = await owned.get(settings.google_userinfo_url, headers=headers)
        else:
            response = await client.get(settings.google_userinfo_url, headers=headers)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise GoogleAuthError("Failed to fetch Google user info.") from exc

    info = _standardize(response.json())
    if not info["email"]:
        raise GoogleAuthError("Invalid Google token")
    return info
