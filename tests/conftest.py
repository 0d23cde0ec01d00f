"""Pytest configuration and fixtures."""

import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["SIGNER_BACKEND"] = "memory"

from txsign.codec import Codec
from txsign.config import Settings
from txsign.signing.keybase import Keybase
from txsign.signing.memory import MemorySigner

ALICE_PRIVATE_KEY = bytes.fromhex("01" * 32)
BOB_PRIVATE_KEY = bytes.fromhex("02" * 32)
PASSPHRASE = "correct horse battery staple"


@pytest.fixture
def codec() -> Codec:
    """Default wire codec."""
    return Codec()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a temporary keybase."""
    return Settings(
        key_dir=tmp_path / "keys",
        kdf_iterations=1000,
        signer_backend="keybase",
        max_body_bytes=64 * 1024,
    )


@pytest.fixture
def keybase(settings) -> Keybase:
    """Keybase holding alice and bob."""
    kb = Keybase(
        key_dir=settings.key_dir,
        kdf_iterations=settings.kdf_iterations,
        bech32_prefix=settings.bech32_prefix,
    )
    kb.add_key("alice", PASSPHRASE, ALICE_PRIVATE_KEY)
    kb.add_key("bob", PASSPHRASE, BOB_PRIVATE_KEY)
    return kb


@pytest.fixture
def memory_signer() -> MemorySigner:
    """In-memory signer holding alice."""
    signer = MemorySigner()
    signer.add_key("alice", PASSPHRASE, ALICE_PRIVATE_KEY)
    return signer


@pytest.fixture
def msg_send() -> dict:
    """A bank send message in amino JSON."""
    return {
        "type": "cosmos-sdk/MsgSend",
        "value": {
            "from_address": "cosmos1sender",
            "to_address": "cosmos1recipient",
            "amount": [{"denom": "stake", "amount": "10"}],
        },
    }


@pytest.fixture
def unsigned_tx(msg_send) -> dict:
    """An unsigned transaction with one message and 200000 gas."""
    return {
        "msg": [msg_send],
        "fee": {"amount": [], "gas": "200000"},
        "signatures": None,
        "memo": "",
    }


@pytest.fixture
def alice_public_key() -> bytes:
    """Compressed public key of alice."""
    from txsign.crypto import public_key_from_private
    return public_key_from_private(ALICE_PRIVATE_KEY)
