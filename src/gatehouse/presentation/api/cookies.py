"""Token delivery via HttpOnly cookies.

Both tokens travel as cookies readable by the browser only when sending
requests, never from JavaScript:
- accessToken: short-lived, read by /self and /logout
- refreshToken: long-lived, read by /refresh and /logout
"""

from fastapi import Response

from gatehouse_auth import TokenPair
from gatehouse_config.settings import Settings

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"  # NOQA: S105


def _set_cookie(
    response: Response,
    key: str,
    value: str,
    max_age: int,
    settings: Settings,
) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        httponly=True,
        secure=settings.api_cookie_secure,
        samesite=settings.api_cookie_samesite,
        domain=settings.api_cookie_domain,
        path="/",
    )


def set_auth_cookies(response: Response, tokens: TokenPair, settings: Settings) -> None:
    """Set both token cookies on the response."""
    _set_cookie(
        response,
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        settings.access_token_max_age,
        settings,
    )
    _set_cookie(
        response,
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        settings.refresh_token_max_age,
        settings,
    )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    """Clear both token cookies (for logout)."""
    for key in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            key=key,
            path="/",
            domain=settings.api_cookie_domain,
            secure=settings.api_cookie_secure,
            httponly=True,
            samesite=settings.api_cookie_samesite,
        )
