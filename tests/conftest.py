"""Root pytest configuration for test discovery and shared fixtures.

Test Structure:
    tests/
    ├── unit/                  # Fast, isolated tests (mocks only)
    │   ├── gatehouse_auth/
    │   ├── gatehouse_identity/
    │   ├── application/
    │   ├── presentation/
    │   └── config/
    └── integration/           # SQLite-backed persistence, API and CLI tests
        ├── persistence/
        ├── api/
        └── cli/

Integration tests only need SQLite, so they run by default.

Environment Variables:
    SKIP_INTEGRATION=1    Skip @pytest.mark.integration tests

Pytest Options:
    --skip-integration    Skip integration tests
"""

import os

import pytest

from gatehouse_auth import SigningKeyMaterial
from gatehouse_config import clear_settings_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--skip-integration",
        action="store_true",
        default=False,
        help="Skip tests marked with @pytest.mark.integration",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: Tests that touch a real (SQLite) database",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take more than 1 second",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests when asked to."""
    skip_requested = config.getoption("--skip-integration") or os.environ.get(
        "SKIP_INTEGRATION",
        "",
    ).lower() in ("1", "true", "yes")

    if not skip_requested:
        return

    skip_integration = pytest.mark.skip(
        reason="Integration test - skipped via --skip-integration/SKIP_INTEGRATION",
    )
    for item in items:
        if "integration" in {mark.name for mark in item.iter_markers()}:
            item.add_marker(skip_integration)


@pytest.fixture(scope="session", autouse=True)
def configure_app_settings():
    """Start and finish the session with an empty settings cache."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(scope="session")
def signing_key() -> SigningKeyMaterial:
    """One RSA key pair for the whole test session (generation is slow)."""
    return SigningKeyMaterial.generate()


@pytest.fixture(scope="session")
def other_signing_key() -> SigningKeyMaterial:
    """A second, unrelated key pair for wrong-key scenarios."""
    return SigningKeyMaterial.generate()
