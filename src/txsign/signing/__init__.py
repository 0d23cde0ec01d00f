"""Transaction signing backends.

Provides signer implementations:
- Keybase: passphrase-encrypted key files on disk
- MemorySigner: in-memory keys for development/testing
"""

from txsign.signing.base import (
    KeyInfo,
    SignatureResult,
    SignerBackend,
    SignerType,
)
from txsign.signing.factory import get_signer, reset_signer
from txsign.signing.keybase import Keybase
from txsign.signing.memory import MemorySigner

__all__ = [
    "KeyInfo",
    "SignatureResult",
    "SignerBackend",
    "SignerType",
    "Keybase",
    "MemorySigner",
    "get_signer",
    "reset_signer",
]
