"""FastAPI application factory.

Creates and configures the FastAPI application with all routers,
middleware, and exception handlers.

API Versioning:
    All API endpoints are versioned under /api/v1/ prefix.
    The health check and the published key set remain unversioned.
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from gatehouse import __version__
from gatehouse.presentation.api.dependencies import (
    create_engine_from_settings,
    create_session_maker,
)
from gatehouse.presentation.api.exception_handlers import setup_exception_handlers
from gatehouse.presentation.api.routers import auth_router, well_known_router
from gatehouse_auth import (
    AccessTokenVerifier,
    JWKSProvider,
    JWTService,
    KeyMaterialError,
    PasswordHashingService,
    RemoteJWKSProvider,
    SigningKeyMaterial,
    StaticJWKSProvider,
)
from gatehouse_auth.persistence.sqlalchemy import AuthBase
from gatehouse_config.settings import Settings, get_settings
from gatehouse_identity.infrastructure.persistence.sqlalchemy import IdentityBase


@lru_cache(maxsize=4)
def _configure_logging(log_level_str: str) -> None:
    """Configure application logging.

    Sets up logging for the gatehouse packages with:
    - Console output with timestamps and module names
    - Configurable log level for gatehouse modules (from settings)
    - WARNING level for noisy third-party libraries
    """
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt=date_format,
        stream=sys.stdout,
        force=True,  # Override any existing config
    )

    for name in ("gatehouse", "gatehouse_auth", "gatehouse_identity"):
        logging.getLogger(name).setLevel(log_level)

    # Quiet down noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_V1_PREFIX = "/api/v1"

OPENAPI_TAGS = [
    {
        "name": "Authentication",
        "description": """Registration, login and session management.

**Tokens:**
- Access token: RS256, one hour, verifiable with the published key set
- Refresh token: HS256, one year, rotated on every refresh

Both are delivered as HttpOnly cookies (`accessToken`, `refreshToken`).
""",
    },
    {
        "name": "Keys",
        "description": "Public signing keys for access token verification.",
    },
    {
        "name": "Health",
        "description": "Service health monitoring endpoints.",
    },
]


def load_key_material(settings: Settings) -> SigningKeyMaterial:
    """Load the access token signing key configured in settings.

    Inline PEM (``JWT_PRIVATE_KEY``) wins over ``JWT_PRIVATE_KEY_PATH``.

    Raises
    ------
    KeyMaterialError
        If no key is configured or the configured key is unusable
    """
    if settings.jwt_private_key is not None:
        return SigningKeyMaterial.from_pem(
            settings.jwt_private_key.get_secret_value(),
            key_id=settings.jwt_key_id,
        )
    if settings.jwt_private_key_path is not None:
        return SigningKeyMaterial.from_file(
            settings.jwt_private_key_path,
            key_id=settings.jwt_key_id,
        )
    msg = "Set JWT_PRIVATE_KEY or JWT_PRIVATE_KEY_PATH to an RSA private key"
    raise KeyMaterialError(msg)


def build_jwks_provider(
    settings: Settings,
    key_material: SigningKeyMaterial,
) -> JWKSProvider:
    """Key set used by the API to verify access tokens."""
    if settings.jwks_uri:
        logger.info("Verifying access tokens against %s", settings.jwks_uri)
        return RemoteJWKSProvider(
            settings.jwks_uri,
            cache_seconds=settings.jwks_cache_seconds,
            min_refresh_seconds=settings.jwks_min_refresh_seconds,
        )
    return StaticJWKSProvider(key_material.jwks())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    logger.info("Starting %s API v%s...", app.state.settings.app_name, __version__)
    engine: AsyncEngine = app.state.engine
    await _init_database_schema(engine)
    yield

    # Shutdown - dispose the engine and its connection pool
    logger.info("Shutting down %s API...", app.state.settings.app_name)
    await engine.dispose()
    logger.info("Database connections closed")


async def _init_database_schema(engine: AsyncEngine) -> None:
    """Initialize database schema (if not existent) and verify connectivity."""
    logger.info("Initializing database schema...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(IdentityBase.metadata.create_all)
            await conn.run_sync(AuthBase.metadata.create_all)
    except ConnectionRefusedError:
        logger.critical("Could not connect to the database.")
        raise SystemExit(1) from None

    logger.info("Database schema initialized successfully")


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all endpoints.

    Returns
    -------
    APIRouter with all v1 endpoints mounted.
    """
    v1_router = APIRouter()
    v1_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    return v1_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings
        Optional settings override for testing.

    Returns
    -------
    Configured FastAPI application instance.

    Raises
    ------
    KeyMaterialError
        If the signing key is missing or unusable; the service must not
        start without one.
    """
    if settings is None:
        settings = get_settings()

    # Configure logging on app creation (not on module import)
    _configure_logging(settings.log_level)

    key_material = load_key_material(settings)
    jwt_service = JWTService(
        key_material=key_material,
        refresh_secret=settings.jwt_refresh_secret.get_secret_value(),
        issuer=settings.jwt_issuer,
        access_token_expire_hours=settings.jwt_access_token_expire_hours,
        refresh_token_expire_days=settings.jwt_refresh_token_expire_days,
    )
    engine = create_engine_from_settings(settings)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Multi-tenant identity service issuing RS256 access tokens.",
        version=__version__,
        docs_url="/docs" if settings.api_debug else None,
        redoc_url="/redoc" if settings.api_debug else None,
        openapi_url="/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    # Shared, read-only for the lifetime of the app
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_maker = create_session_maker(engine)
    app.state.key_material = key_material
    app.state.jwt_service = jwt_service
    app.state.password_service = PasswordHashingService(rounds=settings.bcrypt_rounds)
    app.state.token_verifier = AccessTokenVerifier(
        build_jwks_provider(settings, key_material),
        issuer=settings.jwt_issuer,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers for consistent error responses
    setup_exception_handlers(app)

    app.include_router(create_v1_router(), prefix=API_V1_PREFIX)
    app.include_router(well_known_router, prefix="/.well-known", tags=["Keys"])

    # Health check endpoint (unversioned - always accessible)
    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """Health check endpoint.

        Unversioned for load balancer/monitoring compatibility.
        """
        return {
            "status": "healthy",
            "version": __version__,
            "api_versions": ["v1"],
        }

    logger.info("Access token signing key id: %s", key_material.key_id)
    return app


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
