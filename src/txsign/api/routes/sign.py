"""Transaction signing endpoint."""

import logging

from fastapi import APIRouter, Depends, Request, Response

from txsign.errors import DecodeError, SignServiceError
from txsign.service import SigningService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(request: Request) -> SigningService:
    """Signing service bound to the application."""
    return request.app.state.service


async def read_body(request: Request) -> bytes:
    """Read the request body, refusing oversized payloads."""
    limit = request.app.state.settings.max_body_bytes
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise DecodeError(f"Request body exceeds {limit} bytes")
    return bytes(body)


@router.post("/tx/sign")
async def sign_tx(
    body: bytes = Depends(read_body),
    service: SigningService = Depends(get_service),
) -> Response:
    """Sign a transaction with a named key.

    Body fields: ``tx``, ``name``, ``password``, ``chain_id``,
    ``account_number`` and ``sequence`` (decimal strings). Returns the
    signed transaction.
    """
    try:
        out = await service.sign(body)
    except SignServiceError:
        raise
    except Exception as e:
        logger.exception("Unexpected error while signing")
        raise SignServiceError(f"Internal error: {e.__class__.__name__}") from e

    return Response(content=out, media_type="application/json")
