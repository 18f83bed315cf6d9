"""API configuration adapter.

Settings are resolved once in ``create_app`` and kept on ``app.state``;
request handlers read them from there rather than from the process-wide
cache, so tests can run several apps with different settings side by side.
"""

from fastapi import Request

from gatehouse_config.settings import Settings


def get_api_settings(request: Request) -> Settings:
    """Get the settings the running application was created with."""
    return request.app.state.settings
