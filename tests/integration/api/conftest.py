"""Pytest fixtures for API integration tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy import create_engine, text

from gatehouse.presentation.api.app import API_V1_PREFIX, create_app
from gatehouse_config.settings import Settings

TEST_REFRESH_SECRET = "test-refresh-secret-for-testing-only-0123456789"


@pytest.fixture
def refresh_secret() -> str:
    """HS256 secret the test app signs refresh tokens with."""
    return TEST_REFRESH_SECRET


@pytest.fixture
def api_v1_prefix() -> str:
    """Get the API v1 prefix for building URLs."""
    return API_V1_PREFIX


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "gatehouse-test.db"


@pytest.fixture
def settings_overrides() -> dict:
    """Per-test settings tweaks; override in a test module or class."""
    return {}


@pytest.fixture
def api_settings(db_path, signing_key, settings_overrides) -> Settings:
    """Test API settings backed by a temporary SQLite file."""
    values = {
        "jwt_refresh_secret": SecretStr(TEST_REFRESH_SECRET),
        "jwt_private_key": SecretStr(signing_key.private_pem().decode()),
        "database_url": f"sqlite+aiosqlite:///{db_path}",
        "bcrypt_rounds": 4,
        "api_debug": True,
        "api_cors_origins": "http://localhost:3000",
        "api_cookie_secure": False,  # Allow HTTP in tests
        "log_level": "WARNING",
        **settings_overrides,
    }
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_client(api_settings):
    """TestClient with lifespan run (tables created) for each test."""
    app = create_app(api_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db(db_path):
    """Synchronous read access to the test database for assertions."""
    engine = create_engine(f"sqlite:///{db_path}")

    class _Db:
        def scalar(self, sql: str, **params):
            with engine.connect() as conn:
                return conn.execute(text(sql), params).scalar_one()

        def column(self, sql: str, **params) -> list:
            with engine.connect() as conn:
                return list(conn.execute(text(sql), params).scalars())

        def execute(self, sql: str, **params) -> None:
            with engine.begin() as conn:
                conn.execute(text(sql), params)

    yield _Db()
    engine.dispose()


@pytest.fixture
def registered_user_data() -> dict:
    """Registration payload as a browser would send it."""
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "password": "SecurePassword123!",
    }
