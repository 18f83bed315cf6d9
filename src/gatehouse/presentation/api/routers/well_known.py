"""Published key set for verifying access tokens."""

from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/jwks.json", summary="Access token signing keys")
async def get_jwks(request: Request) -> dict[str, Any]:
    """Return the public half of the signing key as a JWK Set."""
    return request.app.state.key_material.jwks()
