"""Base interfaces for transaction signing.

Signing flow:
1. Build sign bytes for the unsigned transaction
2. Submit them to the signer with a key name and passphrase
3. Signer returns signature and public key (never the private key)
4. Append the signature to the transaction
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from txsign.errors import (  # noqa: F401 - re-exported for backends
    InvalidPassphraseError,
    KeyNotFoundError,
    KeyStoreUnavailableError,
    SigningError,
)

logger = logging.getLogger(__name__)


class SignerType(str, Enum):
    """Type of signing backend."""
    KEYBASE = "keybase"   # Encrypted key files on disk
    MEMORY = "memory"     # Keys held in process memory (dev/testing)


@dataclass(frozen=True)
class SignatureResult:
    """Result of a signing operation.

    Attributes:
        signature: Raw signature bytes (r || s for secp256k1)
        public_key: Compressed public key that created the signature
    """
    signature: bytes
    public_key: bytes


@dataclass(frozen=True)
class KeyInfo:
    """Public information about a stored key."""
    name: str
    public_key: bytes
    address: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "pub_key": self.public_key.hex(),
            "address": self.address,
        }


class SignerBackend(ABC):
    """Abstract base class for signing backends.

    Implementations should NEVER expose raw private keys.
    All signing operations return signatures only.
    """

    def __init__(self, signer_type: SignerType):
        self.signer_type = signer_type

    @abstractmethod
    async def sign(self, name: str, passphrase: str, message: bytes) -> SignatureResult:
        """Sign a message with a named key.

        Args:
            name: Key name
            passphrase: Passphrase unlocking the key
            message: Exact bytes to sign

        Returns:
            SignatureResult with signature and public key

        Raises:
            KeyNotFoundError: No key with this name
            InvalidPassphraseError: Passphrase does not unlock the key
            KeyStoreUnavailableError: Key storage cannot be read
        """
        pass

    @abstractmethod
    async def get_key_info(self, name: str) -> KeyInfo:
        """Get public information for a key.

        Raises:
            KeyNotFoundError: No key with this name
        """
        pass

    @abstractmethod
    async def list_keys(self) -> list[KeyInfo]:
        """List stored keys, sorted by name."""
        pass

    async def health_check(self) -> bool:
        """Check if the signing backend is available.

        Returns:
            True if backend is ready to sign
        """
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.signer_type.value})"


def check_key_name(name: Optional[str]) -> str:
    """Validate a key name for storage.

    Raises:
        ValueError: If the name is empty or unsafe as a file name
    """
    if not name or len(name) > 64 or name.startswith("."):
        raise ValueError(f"Invalid key name: {name!r}")
    if not all((ch.isascii() and ch.isalnum()) or ch in "-_." for ch in name):
        raise ValueError(f"Invalid key name: {name!r}")
    return name
