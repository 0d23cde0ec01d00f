"""Health check endpoints."""

from fastapi import APIRouter, Request

from txsign.signing.factory import get_signer_info

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "txsign"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration and signer info."""
    signer = await get_signer_info(request.app.state.service.signer)
    return {
        "status": "healthy" if signer["healthy"] else "degraded",
        "service": "txsign",
        "version": "0.1.0",
        "signer": signer,
        "config": request.app.state.settings.get_safe_dict(),
    }
