"""In-memory signing backend.

Keys are held in process memory. Suitable for:
- Development/testing
- Ephemeral signers seeded at startup

WARNING: Private keys live unencrypted in memory. Use the keybase for
anything long-lived.
"""

import hashlib
import hmac
import logging
import os
from typing import Optional

from txsign.crypto import (
    address_from_public_key,
    generate_private_key,
    public_key_from_private,
    sign_secp256k1,
)
from txsign.signing.base import (
    InvalidPassphraseError,
    KeyInfo,
    KeyNotFoundError,
    SignatureResult,
    SignerBackend,
    SignerType,
    check_key_name,
)

logger = logging.getLogger(__name__)


class MemorySigner(SignerBackend):
    """Signing backend using in-memory private keys.

    Keys can be seeded from environment variables
    ``SIGNER_KEY_<NAME>=<private key hex>:<passphrase>``.
    """

    def __init__(self, bech32_prefix: str = "cosmos", load_env: bool = False):
        super().__init__(SignerType.MEMORY)
        self.bech32_prefix = bech32_prefix
        # name -> (passphrase digest, private key)
        self._keys: dict[str, tuple[bytes, bytes]] = {}
        if load_env:
            self._load_keys()

    def _load_keys(self):
        """Load private keys from environment."""
        for key, value in os.environ.items():
            if key.startswith("SIGNER_KEY_"):
                name = key.replace("SIGNER_KEY_", "").lower()
                private_key_hex, _, passphrase = value.partition(":")
                self.add_key(name, passphrase, bytes.fromhex(private_key_hex.replace("0x", "")))

    @staticmethod
    def _digest(passphrase: str) -> bytes:
        return hashlib.sha256(passphrase.encode("utf-8", "surrogatepass")).digest()

    def add_key(self, name: str, passphrase: str, private_key: Optional[bytes] = None) -> KeyInfo:
        """Add a private key, generating one if none is given."""
        check_key_name(name)
        if private_key is None:
            private_key = generate_private_key()
        # Fail early on an invalid scalar
        public_key_from_private(private_key)
        self._keys[name] = (self._digest(passphrase), private_key)
        logger.info(f"Loaded in-memory key {name}")
        return self._info(name)

    def remove_key(self, name: str):
        """Remove a private key."""
        self._keys.pop(name, None)

    def _info(self, name: str) -> KeyInfo:
        if name not in self._keys:
            raise KeyNotFoundError(name)
        public_key = public_key_from_private(self._keys[name][1])
        return KeyInfo(
            name=name,
            public_key=public_key,
            address=address_from_public_key(public_key, self.bech32_prefix),
        )

    async def sign(self, name: str, passphrase: str, message: bytes) -> SignatureResult:
        if name not in self._keys:
            raise KeyNotFoundError(name)
        digest, private_key = self._keys[name]
        if not hmac.compare_digest(digest, self._digest(passphrase)):
            raise InvalidPassphraseError(name)

        return SignatureResult(
            signature=sign_secp256k1(private_key, message),
            public_key=public_key_from_private(private_key),
        )

    async def get_key_info(self, name: str) -> KeyInfo:
        return self._info(name)

    async def list_keys(self) -> list[KeyInfo]:
        return [self._info(name) for name in sorted(self._keys)]

    async def health_check(self) -> bool:
        """Check if any keys are loaded."""
        return len(self._keys) > 0
