"""Cryptographic utilities for key storage and secp256k1 signing.

Private keys at rest are encrypted with Fernet (AES-128-CBC with HMAC) under
a key derived from the owner's passphrase with PBKDF2.
"""

import base64
import hashlib
import logging
import os
from typing import Optional

from bip_utils import AtomAddrEncoder
from cryptography.fernet import Fernet, InvalidToken
from ecdsa import SECP256k1, BadSignatureError, SigningKey, VerifyingKey
from ecdsa.util import sigencode_string_canonize

logger = logging.getLogger(__name__)

__all__ = [
    "InvalidToken",
    "KeyEncryptor",
    "address_from_public_key",
    "derive_key_from_password",
    "generate_private_key",
    "public_key_from_private",
    "sign_secp256k1",
    "verify_secp256k1",
]


def derive_key_from_password(
    password: str, salt: Optional[bytes] = None, iterations: int = 100000
) -> tuple[str, bytes]:
    """Derive a Fernet key from a password using PBKDF2.

    Args:
        password: User-provided password
        salt: Optional salt (generated if not provided)
        iterations: PBKDF2 iteration count

    Returns:
        Tuple of (base64-encoded key, salt)
    """
    if salt is None:
        salt = os.urandom(16)

    key = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8", "surrogatepass"),
        salt,
        iterations,
        dklen=32,
    )

    # Fernet requires base64-encoded key
    fernet_key = base64.urlsafe_b64encode(key)
    return fernet_key.decode(), salt


class KeyEncryptor:
    """Encrypts and decrypts private keys using Fernet.

    Usage:
        fernet_key, salt = derive_key_from_password(passphrase)
        encryptor = KeyEncryptor(fernet_key)
        token = encryptor.encrypt(private_key)
        private_key = encryptor.decrypt(token)
    """

    def __init__(self, fernet_key: str):
        self._fernet = Fernet(fernet_key.encode())

    def encrypt(self, private_key: bytes) -> str:
        """Encrypt a private key, returning a Fernet token."""
        return self._fernet.encrypt(private_key.hex().encode()).decode()

    def decrypt(self, token: str) -> bytes:
        """Decrypt a Fernet token back to private key bytes.

        Raises:
            InvalidToken: If decryption fails (wrong key or corrupted data)
        """
        return bytes.fromhex(self._fernet.decrypt(token.encode()).decode())


# ======================
# secp256k1
# ======================

def generate_private_key() -> bytes:
    """Generate a random secp256k1 private key."""
    return SigningKey.generate(curve=SECP256k1).to_string()


def public_key_from_private(private_key: bytes) -> bytes:
    """Compressed (33-byte) public key for a private key."""
    sk = SigningKey.from_string(private_key, curve=SECP256k1)
    return sk.get_verifying_key().to_string("compressed")


def sign_secp256k1(private_key: bytes, message: bytes) -> bytes:
    """Sign SHA-256(message) with RFC 6979 nonces.

    Returns:
        64-byte r || s signature with s normalized to the lower half order
    """
    sk = SigningKey.from_string(private_key, curve=SECP256k1)
    return sk.sign_deterministic(
        message,
        hashfunc=hashlib.sha256,
        sigencode=sigencode_string_canonize,
    )


def verify_secp256k1(public_key: bytes, signature: bytes, message: bytes) -> bool:
    """Check an r || s signature over SHA-256(message)."""
    vk = VerifyingKey.from_string(public_key, curve=SECP256k1)
    try:
        return vk.verify(signature, message, hashfunc=hashlib.sha256)
    except BadSignatureError:
        return False


def address_from_public_key(public_key: bytes, prefix: str = "cosmos") -> str:
    """Bech32 account address: RIPEMD160(SHA256(pubkey)) under ``prefix``."""
    return AtomAddrEncoder.EncodeKey(public_key, hrp=prefix)
