"""File-backed keybase.

Each key lives in ``<key_dir>/<name>.json``:

    {
        "name": "validator",
        "pub_key": "<compressed secp256k1 public key, hex>",
        "address": "cosmos1...",
        "salt": "<PBKDF2 salt, hex>",
        "encrypted_key": "<Fernet token of the private key>"
    }

The private key is decrypted only for the duration of a sign call and only
with the key's passphrase. The keybase is read-only while signing.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from txsign.crypto import (
    InvalidToken,
    KeyEncryptor,
    address_from_public_key,
    derive_key_from_password,
    generate_private_key,
    public_key_from_private,
    sign_secp256k1,
)
from txsign.signing.base import (
    InvalidPassphraseError,
    KeyInfo,
    KeyNotFoundError,
    KeyStoreUnavailableError,
    SignatureResult,
    SignerBackend,
    SignerType,
    check_key_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyRecord:
    """A parsed key file."""
    public_key: bytes
    address: Optional[str]
    salt: bytes
    encrypted_key: str


class Keybase(SignerBackend):
    """Signing backend over passphrase-encrypted key files."""

    def __init__(
        self,
        key_dir: Path,
        kdf_iterations: int = 100000,
        bech32_prefix: str = "cosmos",
    ):
        super().__init__(SignerType.KEYBASE)
        self.key_dir = Path(key_dir)
        self.kdf_iterations = kdf_iterations
        self.bech32_prefix = bech32_prefix

    def _path(self, name: str) -> Path:
        try:
            check_key_name(name)
        except ValueError:
            raise KeyNotFoundError(name) from None
        return self.key_dir / f"{name}.json"

    def _load(self, name: str) -> KeyRecord:
        """Read and parse a key file.

        Raises:
            KeyNotFoundError: If the file does not exist
            KeyStoreUnavailableError: If it cannot be read or parsed
        """
        path = self._path(name)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise KeyNotFoundError(name)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read key file {path}: {e}")
            raise KeyStoreUnavailableError(f"Key store unavailable: {e}") from e

        try:
            return self._parse(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Corrupt key file {path}: {e}")
            raise KeyStoreUnavailableError(f"Key file for {name!r} is corrupt") from e

    @staticmethod
    def _parse(data) -> KeyRecord:
        if not isinstance(data, dict):
            raise TypeError("key file must hold a JSON object")
        if not isinstance(data["encrypted_key"], str):
            raise TypeError("encrypted_key must be a string")
        address = data.get("address")
        if address is not None and not isinstance(address, str):
            raise TypeError("address must be a string")

        public_key = bytes.fromhex(data["pub_key"])
        if len(public_key) != 33 or public_key[0] not in (2, 3):
            raise ValueError("pub_key must be a compressed secp256k1 key")
        return KeyRecord(
            public_key=public_key,
            address=address,
            salt=bytes.fromhex(data["salt"]),
            encrypted_key=data["encrypted_key"],
        )

    def _info(self, name: str, record: KeyRecord) -> KeyInfo:
        return KeyInfo(
            name=name,
            public_key=record.public_key,
            address=record.address or address_from_public_key(record.public_key, self.bech32_prefix),
        )

    def _unlock(self, name: str, record: KeyRecord, passphrase: str) -> bytes:
        fernet_key, _ = derive_key_from_password(passphrase, record.salt, self.kdf_iterations)
        try:
            return KeyEncryptor(fernet_key).decrypt(record.encrypted_key)
        except InvalidToken:
            raise InvalidPassphraseError(name)
        except ValueError as e:
            raise KeyStoreUnavailableError(f"Key file for {name!r} is corrupt") from e

    # ======================
    # Management
    # ======================

    def add_key(self, name: str, passphrase: str, private_key: Optional[bytes] = None) -> KeyInfo:
        """Store a key under ``name``, generating one if none is given.

        Args:
            name: Key name (letters, digits, ``-``, ``_`` and ``.``)
            passphrase: Passphrase the key is encrypted under
            private_key: 32-byte secp256k1 private key to import

        Raises:
            ValueError: If the name is invalid or already taken
        """
        check_key_name(name)
        if not passphrase:
            raise ValueError("Passphrase must not be empty")

        if private_key is None:
            private_key = generate_private_key()
        public_key = public_key_from_private(private_key)

        fernet_key, salt = derive_key_from_password(passphrase, iterations=self.kdf_iterations)
        record = {
            "name": name,
            "pub_key": public_key.hex(),
            "address": address_from_public_key(public_key, self.bech32_prefix),
            "salt": salt.hex(),
            "encrypted_key": KeyEncryptor(fernet_key).encrypt(private_key),
        }

        self.key_dir.mkdir(parents=True, exist_ok=True)
        path = self.key_dir / f"{name}.json"
        try:
            with path.open("x", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
        except FileExistsError:
            raise ValueError(f"Key {name!r} already exists")
        path.chmod(0o600)

        logger.info(f"Added key {name} ({record['address']})")
        return KeyInfo(name=name, public_key=public_key, address=record["address"])

    def delete_key(self, name: str, passphrase: str) -> None:
        """Delete a key after checking its passphrase."""
        record = self._load(name)
        self._unlock(name, record, passphrase)
        self._path(name).unlink()
        logger.info(f"Deleted key {name}")

    # ======================
    # SignerBackend
    # ======================

    def _sign_sync(self, name: str, passphrase: str, message: bytes) -> SignatureResult:
        record = self._load(name)
        private_key = self._unlock(name, record, passphrase)
        signature = sign_secp256k1(private_key, message)
        return SignatureResult(
            signature=signature,
            public_key=public_key_from_private(private_key),
        )

    async def sign(self, name: str, passphrase: str, message: bytes) -> SignatureResult:
        """Sign message bytes with a stored key.

        Key derivation and signing run in the default thread pool so that
        concurrent requests do not hold up the event loop.
        """
        loop = asyncio.get_event_loop()
        result = await loop.run_in_executor(
            None,
            lambda: self._sign_sync(name, passphrase, message),
        )
        logger.info(f"Signed {len(message)} bytes with key {name}")
        return result

    async def get_key_info(self, name: str) -> KeyInfo:
        return self._info(name, self._load(name))

    async def list_keys(self) -> list[KeyInfo]:
        if not self.key_dir.is_dir():
            return []
        keys = []
        for path in sorted(self.key_dir.glob("*.json")):
            try:
                check_key_name(path.stem)
            except ValueError:
                logger.warning(f"Skipping {path.name}: not a valid key name")
                continue
            keys.append(self._info(path.stem, self._load(path.stem)))
        return keys

    async def health_check(self) -> bool:
        """Check the key directory exists and is readable."""
        return self.key_dir.is_dir()
