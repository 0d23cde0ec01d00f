"""Signer factory.

Creates the signing backend selected by configuration.
"""

import logging
from typing import Optional

from txsign.config import Settings, get_settings
from txsign.signing.base import SignerBackend, SignerType

logger = logging.getLogger(__name__)


def get_signer_type(settings: Settings) -> SignerType:
    """Determine which signer to use from ``SIGNER_BACKEND``.

    Raises:
        ValueError: If the configured backend is unknown
    """
    try:
        return SignerType(settings.signer_backend.lower())
    except ValueError:
        raise ValueError(f"Unknown signer backend: {settings.signer_backend!r}")


_signer_instance: Optional[SignerBackend] = None


def get_signer(settings: Optional[Settings] = None) -> SignerBackend:
    """Get the configured signer instance.

    Returns singleton instance for the configured signer type.
    """
    global _signer_instance

    if _signer_instance is not None:
        return _signer_instance

    settings = settings or get_settings()
    signer_type = get_signer_type(settings)
    logger.info(f"Initializing {signer_type.value} signer")

    if signer_type == SignerType.MEMORY:
        from txsign.signing.memory import MemorySigner
        _signer_instance = MemorySigner(bech32_prefix=settings.bech32_prefix, load_env=True)

    else:  # KEYBASE
        from txsign.signing.keybase import Keybase
        _signer_instance = Keybase(
            key_dir=settings.key_dir,
            kdf_iterations=settings.kdf_iterations,
            bech32_prefix=settings.bech32_prefix,
        )

    return _signer_instance


def reset_signer():
    """Reset the signer instance (for testing)."""
    global _signer_instance
    _signer_instance = None


async def get_signer_info(signer: SignerBackend) -> dict:
    """Get information about a signer.

    Returns:
        Dict with signer type, health status and class
    """
    health = await signer.health_check()

    return {
        "type": signer.signer_type.value,
        "healthy": health,
        "class": signer.__class__.__name__,
    }
