"""Application settings loaded from environment variables.

Configuration file discovery (in priority order):
1. OS environment variables (always highest priority)
2. GATEHOUSE_ENV_FILE environment variable (absolute path to .env file)
3. config/.env.dev - local development
4. config/.env - production/Docker

Uses pydantic-settings for automatic type coercion and validation.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve().parent

    for parent in [current, *current.parents]:
        if (parent / "config").is_dir():
            return parent
        if (parent / ".git").is_dir():
            return parent
        if parent == Path("/app"):
            return parent

    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Get the config directory path (for .env files and key material)."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. GATEHOUSE_ENV_FILE env var (full path)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    env_file_path = os.environ.get("GATEHOUSE_ENV_FILE")
    if env_file_path:
        path = Path(env_file_path)
        if not path.is_absolute():
            path = _find_project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()

    dev_env = config_dir / ".env.dev"
    if dev_env.exists():
        return dev_env

    prod_env = config_dir / ".env"
    if prod_env.exists():
        return prod_env

    return None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Values are loaded from:
    1. OS environment variables (highest priority)
    2. .env file (config/.env.dev or config/.env)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Security (MUST be set - app fails without the refresh secret)
    jwt_refresh_secret: SecretStr  # HS256 secret for refresh tokens

    # Access token key material: inline PEM wins over the file path.
    # Startup aborts if neither yields a valid RSA private key.
    jwt_private_key: SecretStr | None = None
    jwt_private_key_path: Path | None = None
    jwt_key_id: str | None = None

    # Application
    app_name: str = "Gatehouse"

    # Database (asyncpg or aiosqlite URL)
    database_url: str = "sqlite+aiosqlite:///./data/gatehouse.db"

    # JWT
    jwt_issuer: str = "auth-service"
    jwt_access_token_expire_hours: int = 1
    jwt_refresh_token_expire_days: int = 365

    # Published key set used to verify access tokens.
    # None = verify against the in-process public key.
    jwks_uri: str | None = None
    jwks_cache_seconds: int = 300
    # Minimum gap between refetches triggered by an unknown kid
    jwks_min_refresh_seconds: int = 30

    # Credentials
    bcrypt_rounds: int = 10

    # Reject refresh tokens whose session row is gone or expired
    auth_verify_refresh_session: bool = False

    # API (API_ prefix)
    api_host: str = "0.0.0.0"
    api_port: int = 5501
    api_debug: bool = False
    api_cors_origins: str = ""  # Empty = no CORS allowed (secure default)
    api_cookie_secure: bool = True
    api_cookie_samesite: Literal["lax", "strict", "none"] = "strict"
    api_cookie_domain: str | None = None

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @field_validator("api_cors_origins", mode="before")
    @classmethod
    def _validate_cors_origins(cls, v: Any) -> str:
        """Ensure cors_origins is stored as comma-separated string."""
        if isinstance(v, list):
            return ",".join(v)
        return str(v) if v else ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [o.strip() for o in self.api_cors_origins.split(",") if o.strip()]

    @property
    def access_token_max_age(self) -> int:
        """Access token lifetime in seconds."""
        return self.jwt_access_token_expire_hours * 3600

    @property
    def refresh_token_max_age(self) -> int:
        """Refresh token lifetime in seconds."""
        return self.jwt_refresh_token_expire_days * 24 * 60 * 60


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    The required field (jwt_refresh_secret) must be provided via
    environment variables or .env file.
    """
    return Settings()  # type: ignore[call-arg]  # pydantic-settings loads from env


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
