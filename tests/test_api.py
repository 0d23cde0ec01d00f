"""Tests for the FastAPI endpoints."""

import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from txsign.api.app import create_app
from txsign.codec import Codec
from txsign.crypto import verify_secp256k1
from txsign.models import SigningContext, StdTx
from txsign.signbytes import SignBytesBuilder

PASSPHRASE = "correct horse battery staple"


@pytest.fixture
def test_app(settings, keybase):
    """Create test application over a temporary keybase."""
    return create_app(settings, signer=keybase)


@pytest_asyncio.fixture
async def client(test_app):
    """Create async test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def sign_body(tx, **overrides) -> dict:
    body = {
        "tx": tx,
        "name": "alice",
        "password": PASSPHRASE,
        "chain_id": "test-chain",
        "account_number": "5",
        "sequence": "2",
    }
    body.update(overrides)
    return body


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "txsign"}

    @pytest.mark.asyncio
    async def test_detailed_health(self, client):
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["signer"]["type"] == "keybase"
        assert data["config"]["wire"]["tx_type"] == "auth/StdTx"


class TestSignEndpoint:
    """Tests for POST /tx/sign."""

    @pytest.mark.asyncio
    async def test_sign_reference_scenario(self, client, unsigned_tx, alice_public_key):
        response = await client.post("/tx/sign", json=sign_body(unsigned_tx))

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        data = response.json()
        assert data["type"] == "auth/StdTx"
        assert data["value"]["msg"] == unsigned_tx["msg"]

        tx = StdTx.model_validate(data["value"])
        sig = tx.signatures[0]
        expected_bytes = SignBytesBuilder(Codec()).build_for(
            SigningContext(chain_id="test-chain", account_number=5, sequence=2),
            StdTx.model_validate(unsigned_tx),
        )
        assert sig.pub_key.value == alice_public_key
        assert verify_secp256k1(alice_public_key, sig.signature, expected_bytes)

    @pytest.mark.asyncio
    async def test_multi_signer(self, client, unsigned_tx):
        first = await client.post("/tx/sign", json=sign_body(unsigned_tx))
        first_tx = first.json()

        second = await client.post(
            "/tx/sign",
            json=sign_body(first_tx, name="bob", account_number="9", sequence="0"),
        )

        assert second.status_code == 200
        signatures = second.json()["value"]["signatures"]
        assert len(signatures) == 2
        assert signatures[0] == first_tx["value"]["signatures"][0]
        assert (signatures[1]["account_number"], signatures[1]["sequence"]) == ("9", "0")
        assert signatures[0]["pub_key"] != signatures[1]["pub_key"]

    @pytest.mark.asyncio
    async def test_zero_counters(self, client, unsigned_tx):
        response = await client.post(
            "/tx/sign", json=sign_body(unsigned_tx, account_number="0", sequence="0")
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value", [
        ("account_number", "abc"),
        ("account_number", "-1"),
        ("sequence", "99999999999999999999"),
        ("sequence", ""),
    ])
    async def test_invalid_counters(self, client, unsigned_tx, field, value):
        response = await client.post("/tx/sign", json=sign_body(unsigned_tx, **{field: value}))

        assert response.status_code == 422
        data = response.json()
        assert data["category"] == "validation"
        assert data["field"] == field
        assert data["value"] == value

    @pytest.mark.asyncio
    async def test_empty_chain_id(self, client, unsigned_tx):
        response = await client.post("/tx/sign", json=sign_body(unsigned_tx, chain_id=""))

        assert response.status_code == 422
        assert response.json()["field"] == "chain_id"

    @pytest.mark.asyncio
    async def test_gas_out_of_range(self, client, unsigned_tx):
        unsigned_tx["fee"]["gas"] = "-1"

        response = await client.post("/tx/sign", json=sign_body(unsigned_tx))

        assert response.status_code == 422
        assert response.json()["field"] == "fee.gas"

    @pytest.mark.asyncio
    async def test_malformed_tx(self, client):
        response = await client.post("/tx/sign", json=sign_body({"msg": "nope"}))

        assert response.status_code == 422
        assert response.json()["category"] == "validation"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [b"not json", b"[]", b'{"name": 1}'])
    async def test_malformed_body(self, client, content):
        response = await client.post(
            "/tx/sign", content=content, headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["category"] == "decode"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["memo", "password", "chain_id", "msg"])
    async def test_lone_surrogate_rejected(self, client, unsigned_tx, field):
        body = sign_body(unsigned_tx)
        if field == "memo":
            body["tx"]["memo"] = "\ud800"
        elif field == "msg":
            body["tx"]["msg"][0]["value"]["to_address"] = "cosmos1\udfff"
        else:
            body[field] = "\ud800"

        # ensure_ascii keeps the surrogate as a "\ud800" escape on the wire
        response = await client.post("/tx/sign", content=json.dumps(body).encode())

        assert response.status_code == 400
        assert response.json()["category"] == "decode"

    @pytest.mark.asyncio
    async def test_oversized_body(self, client, unsigned_tx):
        body = sign_body(unsigned_tx)
        body["tx"]["memo"] = "x" * (64 * 1024)

        response = await client.post("/tx/sign", content=json.dumps(body).encode())

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, unsigned_tx):
        response = await client.post("/tx/sign", json=sign_body(unsigned_tx, password="wrong"))

        assert response.status_code == 401
        data = response.json()
        assert data["category"] == "signer"
        assert "wrong" not in json.dumps(data)

    @pytest.mark.asyncio
    async def test_unknown_key(self, client, unsigned_tx):
        response = await client.post("/tx/sign", json=sign_body(unsigned_tx, name="carol"))

        assert response.status_code == 404
        assert response.json()["category"] == "signer"

    @pytest.mark.asyncio
    async def test_key_store_unavailable(self, client, keybase, unsigned_tx):
        (keybase.key_dir / "alice.json").write_text("garbage")

        response = await client.post("/tx/sign", json=sign_body(unsigned_tx))

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_corrupt_key_field(self, client, keybase, unsigned_tx):
        path = keybase.key_dir / "alice.json"
        record = json.loads(path.read_text())
        record["salt"] = "zz"
        path.write_text(json.dumps(record))

        response = await client.post("/tx/sign", json=sign_body(unsigned_tx))

        assert response.status_code == 503
        assert response.json()["category"] == "signer"


class TestKeyEndpoints:
    """Tests for key listing."""

    @pytest.mark.asyncio
    async def test_list_keys(self, client, alice_public_key):
        response = await client.get("/keys")

        assert response.status_code == 200
        keys = response.json()
        assert [k["name"] for k in keys] == ["alice", "bob"]
        assert keys[0]["pub_key"] == alice_public_key.hex()

    @pytest.mark.asyncio
    async def test_get_key(self, client):
        response = await client.get("/keys/bob")

        assert response.status_code == 200
        assert response.json()["address"].startswith("cosmos1")

    @pytest.mark.asyncio
    async def test_get_unknown_key(self, client):
        response = await client.get("/keys/carol")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_corrupt_key_file(self, client, keybase):
        path = keybase.key_dir / "bob.json"
        record = json.loads(path.read_text())
        record["pub_key"] = "not hex"
        path.write_text(json.dumps(record))

        single = await client.get("/keys/bob")
        listing = await client.get("/keys")

        assert single.status_code == 503
        assert listing.status_code == 503
        assert listing.json()["category"] == "signer"

    @pytest.mark.asyncio
    async def test_list_skips_stray_files(self, client, keybase):
        (keybase.key_dir / "not a key.json").write_text("{}")

        response = await client.get("/keys")

        assert response.status_code == 200
        assert [k["name"] for k in response.json()] == ["alice", "bob"]
