"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from txsign.codec import Codec
from txsign.config import Settings, get_settings
from txsign.errors import SignServiceError
from txsign.service import SigningService
from txsign.signing.base import SignerBackend
from txsign.signing.factory import get_signer


async def sign_service_error_handler(request: Request, exc: SignServiceError) -> JSONResponse:
    """Convert a signing service error into a structured response."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(
    settings: Optional[Settings] = None,
    signer: Optional[SignerBackend] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)
        signer: Signer backend to use (defaults to the configured one)
    """
    settings = settings or get_settings()
    signer = signer or get_signer(settings)

    app = FastAPI(
        title="txsign API",
        description="Transaction signing service",
        version="0.1.0",
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.service = SigningService(signer, Codec.from_settings(settings))

    app.add_exception_handler(SignServiceError, sign_service_error_handler)

    # Register routes
    from txsign.api.routes import health, keys, sign

    app.include_router(health.router, tags=["Health"])
    app.include_router(sign.router, tags=["Sign"])
    app.include_router(keys.router, tags=["Keys"])

    return app
