"""Key listing endpoints.

Only public key material is exposed.
"""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/keys")


@router.get("")
async def list_keys(request: Request) -> list[dict]:
    """List keys held by the signer."""
    keys = await request.app.state.service.signer.list_keys()
    return [key.to_dict() for key in keys]


@router.get("/{name}")
async def get_key(name: str, request: Request) -> dict:
    """Get public information for one key."""
    key = await request.app.state.service.signer.get_key_info(name)
    return key.to_dict()
