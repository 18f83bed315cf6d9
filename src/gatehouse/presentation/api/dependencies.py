"""FastAPI dependency injection for the Gatehouse API.

Provides dependencies for:
- Database sessions
- Shared services built once at startup (kept on ``app.state``)
- Per-request authentication service
- Session claims from the access token and the refresh cookie
"""

import logging
from pathlib import Path
from typing import Annotated, AsyncGenerator

from fastapi import Cookie, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gatehouse.application.context import SessionClaims
from gatehouse.application.services import AuthenticationService
from gatehouse.presentation.api.config import get_api_settings
from gatehouse.presentation.api.cookies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
)
from gatehouse_auth import (
    AccessTokenVerifier,
    JWTService,
    MissingTokenError,
    PasswordHashingService,
    RefreshSessionService,
)
from gatehouse_auth.persistence.sqlalchemy import RefreshSessionRepositorySQLAlchemy
from gatehouse_config.settings import Settings
from gatehouse_identity.infrastructure.persistence.sqlalchemy import (
    UserRepositorySQLAlchemy,
)

logger = logging.getLogger(__name__)

# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)

SettingsDep = Annotated[Settings, Depends(get_api_settings)]


# -----------------------------------------------------------------------------
# Database Engine & Session
# -----------------------------------------------------------------------------


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the async database engine for the application.

    The engine manages the connection pool and is reused across all requests.

    Parameters
    ----------
    settings
        Application settings carrying ``database_url``

    Returns
    -------
    AsyncEngine instance
    """
    url = settings.database_url

    # Ensure data directory exists for SQLite
    if url.startswith("sqlite") and ":memory:" not in url:
        db_path = url.split("///")[-1]
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before use
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency.

    Nothing is committed here: routers commit on success, and a session
    closed without commit rolls back whatever the request did.

    Yields
    ------
    AsyncSession for database operations
    """
    async with request.app.state.session_maker() as session:
        yield session


# Type alias for injected session
DBSession = Annotated[AsyncSession, Depends(get_db_session)]


# -----------------------------------------------------------------------------
# Authentication Services
# -----------------------------------------------------------------------------


def get_jwt_service(request: Request) -> JWTService:
    """Get the JWT service built at startup."""
    return request.app.state.jwt_service


def get_password_service(request: Request) -> PasswordHashingService:
    """Get the password hashing service built at startup."""
    return request.app.state.password_service


def get_token_verifier(request: Request) -> AccessTokenVerifier:
    """Get the key-set backed access token verifier."""
    return request.app.state.token_verifier


JWTServiceDep = Annotated[JWTService, Depends(get_jwt_service)]
PasswordServiceDep = Annotated[PasswordHashingService, Depends(get_password_service)]
TokenVerifierDep = Annotated[AccessTokenVerifier, Depends(get_token_verifier)]


async def get_authentication_service(
    session: DBSession,
    settings: SettingsDep,
    jwt_service: JWTServiceDep,
    password_service: PasswordServiceDep,
) -> AuthenticationService:
    """
    Get authentication service with all dependencies.

    This service orchestrates registration, login, refresh and logout.
    """
    session_service = RefreshSessionService(
        RefreshSessionRepositorySQLAlchemy(session),
        ttl_days=settings.jwt_refresh_token_expire_days,
    )

    return AuthenticationService(
        user_repository=UserRepositorySQLAlchemy(session),
        session_service=session_service,
        password_service=password_service,
        jwt_service=jwt_service,
        verify_refresh_session=settings.auth_verify_refresh_session,
    )


# Type alias for injected auth service
AuthService = Annotated[AuthenticationService, Depends(get_authentication_service)]


# -----------------------------------------------------------------------------
# Session Claims
# -----------------------------------------------------------------------------


async def get_access_claims(
    verifier: TokenVerifierDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    access_token_cookie: Annotated[
        str | None,
        Cookie(alias=ACCESS_TOKEN_COOKIE),
    ] = None,
) -> SessionClaims:
    """
    Resolve the caller from the access token.

    The Authorization header wins over the accessToken cookie.

    Raises
    ------
    MissingTokenError
        If neither carries a token
    InvalidTokenError
        If the token fails verification
    """
    if credentials is not None:
        token = credentials.credentials
    elif access_token_cookie:
        token = access_token_cookie
    else:
        raise MissingTokenError

    claims = await verifier.verify(token)
    return SessionClaims.from_access_claims(claims)


# Type alias for the authenticated caller
CurrentClaims = Annotated[SessionClaims, Depends(get_access_claims)]


async def get_refresh_claims(
    jwt_service: JWTServiceDep,
    refresh_token_cookie: Annotated[
        str | None,
        Cookie(alias=REFRESH_TOKEN_COOKIE),
    ] = None,
) -> SessionClaims:
    """
    Resolve the caller and its refresh session from the refresh cookie.

    Raises
    ------
    MissingTokenError
        If the cookie is absent
    InvalidTokenError
        If the token fails verification
    """
    if not refresh_token_cookie:
        msg = "Refresh token missing"
        raise MissingTokenError(msg)

    claims = jwt_service.verify_refresh_token(refresh_token_cookie)
    return SessionClaims.from_refresh_claims(claims)


# Type alias for the caller presenting a refresh token
RefreshClaims = Annotated[SessionClaims, Depends(get_refresh_claims)]
