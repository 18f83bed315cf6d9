"""Authentication router for registration, login and session management."""

import logging

from fastapi import APIRouter, Response, status

from gatehouse.presentation.api.cookies import clear_auth_cookies, set_auth_cookies
from gatehouse.presentation.api.dependencies import (
    AuthService,
    CurrentClaims,
    DBSession,
    RefreshClaims,
    SettingsDep,
)
from gatehouse.presentation.api.schemas.auth import (
    IdResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

MASKED = "******"


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={
        201: {"description": "User registered, token cookies set"},
        400: {"description": "Invalid input or email already registered"},
    },
)
async def register(
    request: RegisterRequest,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
) -> IdResponse:
    """
    Create a customer account and sign it in.

    Both tokens are returned as HttpOnly cookies.
    """
    logger.debug(
        "Register request: %s",
        {**request.model_dump(exclude={"password"}), "password": MASKED},
    )
    user, tokens = await auth_service.register(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    await session.commit()

    set_auth_cookies(response, tokens, settings)
    return IdResponse(id=user.id)


@router.post(
    "/login",
    summary="Authenticate user",
    responses={
        200: {"description": "Login successful, token cookies set"},
        400: {"description": "Email or password does not match"},
    },
)
async def login(
    request: LoginRequest,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
) -> IdResponse:
    """Authenticate with email and password."""
    logger.debug("Login request: %s", {"email": request.email, "password": MASKED})
    user, tokens = await auth_service.login(
        email=request.email,
        password=request.password,
    )
    await session.commit()

    set_auth_cookies(response, tokens, settings)
    return IdResponse(id=user.id)


@router.get(
    "/self",
    summary="Get current user",
    responses={
        200: {"description": "Current user data"},
        401: {"description": "Not authenticated"},
    },
)
async def get_self(claims: CurrentClaims, auth_service: AuthService) -> UserResponse:
    """
    Get the authenticated user's information.

    The access token is read from the Authorization header, falling back
    to the accessToken cookie.
    """
    user = await auth_service.get_self(claims)
    return UserResponse.from_user(user)


@router.post(
    "/refresh",
    summary="Rotate the refresh token",
    responses={
        200: {"description": "Tokens rotated, new cookies set"},
        401: {"description": "Missing or invalid refresh token"},
    },
)
async def refresh(
    claims: RefreshClaims,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
) -> IdResponse:
    """
    Exchange the refresh cookie for a new token pair.

    The presented refresh session is revoked; the new refresh token is
    backed by a fresh one.
    """
    user, tokens = await auth_service.refresh(claims)
    await session.commit()

    set_auth_cookies(response, tokens, settings)
    return IdResponse(id=user.id)


@router.post(
    "/logout",
    summary="Logout user",
    responses={
        200: {"description": "Logged out, cookies cleared"},
        401: {"description": "Not authenticated, or tokens of different users"},
    },
)
async def logout(
    claims: CurrentClaims,
    refresh_claims: RefreshClaims,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
) -> dict:
    """Revoke the refresh session of this device and clear both cookies."""
    await auth_service.logout(claims, refresh_claims)
    await session.commit()

    clear_auth_cookies(response, settings)
    return {}
